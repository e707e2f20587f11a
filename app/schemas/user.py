# app/schemas/user.py
import uuid
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional


# --- Запросы аутентификации ---
class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: str = Field(..., min_length=2)
    phone: str = Field(..., min_length=1)
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    account_name: Optional[str] = None

    @field_validator("name", "phone")
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)

class ForgotPasswordRequest(BaseModel):
    email: EmailStr

class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8)


# Схема для пользователя, которую мы отдаем клиенту. Хеш пароля никогда не попадает в ответ
class User(BaseModel):
    id: uuid.UUID
    email: str
    name: str
    phone: str
    role: str
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    account_name: Optional[str] = None
    referral_code: str
    is_blocked: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

# Схема для ответа с токенами
class AuthResponse(BaseModel):
    access_token: str
    refresh_token: str
    user: User


class UpdateProfileRequest(BaseModel):
    """Пустые строки и отсутствующие поля не меняют профиль."""
    name: Optional[str] = None
    phone: Optional[str] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    account_name: Optional[str] = None

    @field_validator("*", mode="before")
    def empty_str_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("name")
    def name_min_length(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v.strip()) < 2:
            raise ValueError("must be at least 2 characters")
        return v


class UserDashboardStats(BaseModel):
    total_earnings: int     # Выплаченный заработок
    pending_balance: int    # Заработок, ожидающий выплаты
    total_referrals: int
    total_clicks: int


class BlockUserRequest(BaseModel):
    is_blocked: bool
