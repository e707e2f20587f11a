# app/routers/v1/endpoints/user.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.dependencies import get_db, get_page_params, get_referrer_user, get_user_claims
from app.models.user import User
from app.schemas.common import PageParams, PaginatedResponse
from app.schemas.payout import Payout, PayoutCreateRequest
from app.schemas.referral import Referral
from app.schemas.user import UpdateProfileRequest, User as UserSchema, UserDashboardStats
from app.services import user as user_service

# Только роль user: админ сюда не проходит (403)
router = APIRouter(prefix="/user", dependencies=[Depends(get_user_claims)])


@router.get("/dashboard", response_model=UserDashboardStats)
async def get_dashboard(
    current_user: User = Depends(get_referrer_user),
    db: Session = Depends(get_db),
):
    return user_service.get_dashboard(db, current_user)


@router.get("/referrals", response_model=PaginatedResponse[Referral])
async def get_my_referrals(
    params: PageParams = Depends(get_page_params),
    current_user: User = Depends(get_referrer_user),
    db: Session = Depends(get_db),
):
    return user_service.get_my_referrals(db, current_user, params)


@router.get("/profile", response_model=UserSchema)
async def get_profile(current_user: User = Depends(get_referrer_user)):
    return current_user


@router.patch("/profile", response_model=UserSchema)
async def update_profile(
    data: UpdateProfileRequest,
    current_user: User = Depends(get_referrer_user),
    db: Session = Depends(get_db),
):
    return user_service.update_profile(db, current_user, data)


@router.get("/payouts", response_model=PaginatedResponse[Payout])
async def get_my_payouts(
    params: PageParams = Depends(get_page_params),
    current_user: User = Depends(get_referrer_user),
    db: Session = Depends(get_db),
):
    return user_service.get_my_payouts(db, current_user, params)


@router.post("/payouts", response_model=Payout, status_code=status.HTTP_201_CREATED)
async def request_payout(
    data: PayoutCreateRequest,
    current_user: User = Depends(get_referrer_user),
    db: Session = Depends(get_db),
):
    """Запрос на вывод средств в пределах доступного баланса."""
    return user_service.request_payout(db, current_user, data.amount)
