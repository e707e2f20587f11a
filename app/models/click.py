# app/models/click.py
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, Uuid, func
from app.db.session import Base

class ReferralClick(Base):
    """Событие перехода по реферальной ссылке. Только вставка, без обновлений."""
    __tablename__ = "referral_clicks"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    referral_code = Column(String(50), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
