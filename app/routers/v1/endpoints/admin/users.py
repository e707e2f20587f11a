# app/routers/v1/endpoints/admin/users.py

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.dependencies import get_admin_user, get_db
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.user import BlockUserRequest
from app.services import admin as admin_service

# Создаем роутер для этого модуля. Префикс будет добавлен на уровне выше.
router = APIRouter()


@router.post("/{user_id}/block", response_model=MessageResponse)
async def block_user_endpoint(
    user_id: uuid.UUID,
    data: BlockUserRequest,
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db),
):
    """[АДМИН] Блокирует или разблокирует пользователя. Себя заблокировать нельзя."""
    admin_service.set_user_blocked(db, admin, user_id, data.is_blocked)
    return {"message": "user blocked" if data.is_blocked else "user unblocked"}
