# app/routers/v1/endpoints/admin/__init__.py

from fastapi import APIRouter
from app.dependencies import get_admin_user
from fastapi import Depends

# 1. Импортируем все наши модули с роутерами из текущего пакета
from . import (
    general,
    referrals,
    referrers,
    students,
    payouts,
    users,
)

# 2. Создаем главный роутер для всего админского раздела.
#    `dependencies=[Depends(get_admin_user)]` применяется ко ВСЕМ эндпоинтам,
#    подключенным к этому роутеру: без токена - 401, с ролью user - 403.
router = APIRouter(
    tags=["Admin"],
    dependencies=[Depends(get_admin_user)]
)

# 3. Подключаем роутеры из каждого модуля, добавляя им специфичные префиксы.

# /admin/dashboard
router.include_router(general.router)

# /admin/referrals, /admin/referrals/{id}/paid, /admin/referrals/{id}/status
router.include_router(referrals.router, prefix="/referrals")

# /admin/referrers, /admin/referrers/{id}/paid
router.include_router(referrers.router, prefix="/referrers")

# /admin/students
router.include_router(students.router, prefix="/students")

# /admin/payouts, /admin/payouts/{id}
router.include_router(payouts.router, prefix="/payouts")

# /admin/users/{id}/block
router.include_router(users.router, prefix="/users")
