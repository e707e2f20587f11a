# app/routers/v1/api.py

from fastapi import APIRouter

from app.routers.v1.endpoints import auth, students, banks, user
from app.routers.v1.endpoints import admin as admin_v1_router

# Создаем главный роутер для API версии v1
# Все пути, подключенные к нему, будут иметь префикс /api/v1
api_router = APIRouter(prefix="/v1")

# Публичные эндпоинты
api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(students.router, tags=["Students"])
api_router.include_router(banks.router, tags=["Banks"])

# Личный кабинет пригласившего
api_router.include_router(user.router, tags=["User"])

# Админские эндпоинты
api_router.include_router(admin_v1_router.router, prefix="/admin")
