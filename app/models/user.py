# app/models/user.py

import uuid

from sqlalchemy import Boolean, Column, DateTime, String, Uuid, func
from sqlalchemy.orm import relationship
from .referral import Referral
from app.db.session import Base

ROLE_ADMIN = "admin"
ROLE_USER = "user"

class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # Email храним в нижнем регистре, поиск тоже идет по нижнему регистру
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False, default="", server_default="")
    role = Column(String(20), nullable=False, default=ROLE_USER, server_default=ROLE_USER)

    # Банковские реквизиты для выплат (необязательные)
    bank_name = Column(String(100), nullable=True)
    account_number = Column(String(20), nullable=True)
    account_name = Column(String(255), nullable=True)

    referral_code = Column(String(50), unique=True, index=True, nullable=False)
    is_blocked = Column(Boolean, default=False, nullable=False, server_default='false')

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Кого привел этот пользователь. Удаление пользователя удаляет его рефералов
    referrals = relationship(
        "Referral", back_populates="referrer", cascade="all, delete-orphan", passive_deletes=True
    )
