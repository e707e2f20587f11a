# app/schemas/admin.py
import uuid
from datetime import datetime
from pydantic import BaseModel


class AdminDashboardStats(BaseModel):
    """Агрегаты для главной страницы админки. Рефералы админов не учитываются."""
    total_referrals: int        # Рефералы с пригласившим
    total_earnings: int
    pending_balance: int
    total_paid_earnings: int
    paid_count: int
    total_codes: int
    active_codes: int           # Коды, которые хотя бы раз использовались
    total_students: int
    total_unique_courses: int
    total_payouts: int          # Сумма одобренных выплат
    pending_payouts: int


class ReferrerStats(BaseModel):
    referrer_id: uuid.UUID
    referrer_name: str
    referral_code: str
    total_usage: int
    total_earnings: int
    status: str  # "Active" / "Inactive"
    is_blocked: bool


class Student(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    phone: str
    course: str
    course_price: int
    referred_by: str  # Имя пригласившего или "-"
    status: str
    created_at: datetime


class MarkReferrerPaidResponse(BaseModel):
    message: str
    updated: int
