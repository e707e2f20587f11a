# app/models/payout.py
import uuid

from sqlalchemy import BigInteger, CheckConstraint, Column, DateTime, ForeignKey, String, Uuid, func
from sqlalchemy.orm import relationship
from app.db.session import Base

PAYOUT_PENDING = "pending"
PAYOUT_APPROVED = "approved"
PAYOUT_REJECTED = "rejected"

class Payout(Base):
    __tablename__ = "payouts"
    __table_args__ = (
        CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="payouts_status_check"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(BigInteger, nullable=False)
    status = Column(String(20), default=PAYOUT_PENDING, nullable=False, index=True)

    # Админ, который принял решение по выплате
    approved_by = Column(Uuid, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    paid_at = Column(DateTime(timezone=True), nullable=True) # Только для approved

    user = relationship("User", foreign_keys=[user_id])
