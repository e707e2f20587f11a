# app/routers/v1/endpoints/auth.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.limiter import auth_limiter
from app.core.security import TokenManager, get_token_manager
from app.dependencies import get_db
from app.schemas.common import MessageResponse
from app.schemas.user import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    ResetPasswordRequest,
)
from app.services import auth as auth_service

# Строгий лимит действует на все эндпоинты аутентификации, отдельно для каждого пути
router = APIRouter(prefix="/auth", dependencies=[Depends(auth_limiter)])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
    tokens: TokenManager = Depends(get_token_manager),
):
    """Регистрирует пригласившего и сразу выдает пару токенов."""
    return await auth_service.register_user(db, tokens, data)


@router.post("/login", response_model=AuthResponse)
async def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    tokens: TokenManager = Depends(get_token_manager),
):
    return await auth_service.login(db, tokens, data.email, data.password)


@router.post("/refresh", response_model=AuthResponse)
async def refresh_tokens(
    data: RefreshRequest,
    db: Session = Depends(get_db),
    tokens: TokenManager = Depends(get_token_manager),
):
    return auth_service.refresh(db, tokens, data.refresh_token)


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(data: ForgotPasswordRequest, db: Session = Depends(get_db)):
    """Ответ одинаковый для существующих и несуществующих email."""
    return {"message": auth_service.forgot_password(db, data.email)}


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(data: ResetPasswordRequest, db: Session = Depends(get_db)):
    return {"message": await auth_service.reset_password(db, data.token, data.new_password)}
