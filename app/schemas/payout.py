# app/schemas/payout.py
import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class Payout(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    amount: int
    status: str
    approved_by: Optional[uuid.UUID] = None
    created_at: datetime
    paid_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PayoutCreateRequest(BaseModel):
    amount: int = Field(..., gt=0)


class UpdatePayoutStatusRequest(BaseModel):
    status: Literal["approved", "rejected"]
