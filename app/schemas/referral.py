# app/schemas/referral.py
import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field


class StudentRegistrationRequest(BaseModel):
    name: str = Field(..., min_length=2)
    email: EmailStr
    phone: str = Field(..., min_length=1)
    course: str = Field(..., min_length=1)
    referral_code: Optional[str] = ""

class StudentRegistrationResponse(BaseModel):
    # referral/referrer присутствуют только когда код пригласившего применен
    message: str
    referral: Optional[Literal["applied"]] = None
    referrer: Optional[str] = None


class TrackClickRequest(BaseModel):
    # Проверка на пустое значение делается в хендлере, чтобы вернуть понятную ошибку
    referral_code: Optional[str] = None


class Referral(BaseModel):
    id: uuid.UUID
    referrer_id: Optional[uuid.UUID] = None
    referred_name: str
    referred_email: str
    referred_phone: str
    course: str
    course_price: int
    earnings: int
    status: str
    created_at: datetime

    class Config:
        from_attributes = True

class AdminReferral(Referral):
    referrer_name: str  # "-" для прямой регистрации


class UpdateReferralStatusRequest(BaseModel):
    status: Literal["paid", "rejected"]
