# app/models/referral.py
import uuid

from sqlalchemy import BigInteger, CheckConstraint, Column, DateTime, ForeignKey, String, Uuid, func
from sqlalchemy.orm import relationship
from app.db.session import Base

REFERRAL_PENDING = "pending"
REFERRAL_PAID = "paid"
REFERRAL_REJECTED = "rejected"

class Referral(Base):
    __tablename__ = "referrals"
    __table_args__ = (
        CheckConstraint("status IN ('pending', 'paid', 'rejected')", name="referrals_status_check"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # ID того, кто пригласил. NULL - студент пришел сам (прямая регистрация)
    referrer_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)

    # Данные студента
    referred_name = Column(String(255), nullable=False)
    referred_email = Column(String(255), nullable=False)
    referred_phone = Column(String(50), nullable=False)

    course = Column(String(255), nullable=False)
    course_price = Column(BigInteger, nullable=False, default=0, server_default="0")
    earnings = Column(BigInteger, nullable=False, default=0, server_default="0")

    # 'pending' - ждет выплаты, 'paid' - выплачено, 'rejected' - отклонено админом
    status = Column(String(20), default=REFERRAL_PENDING, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # --- СВЯЗИ ДЛЯ УДОБСТВА ---
    referrer = relationship("User", back_populates="referrals")
