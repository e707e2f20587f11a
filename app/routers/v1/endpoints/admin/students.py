# app/routers/v1/endpoints/admin/students.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.dependencies import get_db, get_page_params
from app.schemas.admin import Student
from app.schemas.common import PageParams, PaginatedResponse
from app.services import admin as admin_service

router = APIRouter()


@router.get("", response_model=PaginatedResponse[Student])
async def get_students(
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
):
    """[АДМИН] Зарегистрированные студенты с курсом и пригласившим."""
    return admin_service.get_paginated_students(db, params)
