# create_admin.py
"""
Создает администратора из командной строки.

    python scripts/create_admin.py --email admin@cirvee.com --password secret123 --name "Super Admin"

Без аргументов используются ADMIN_EMAIL / ADMIN_PASSWORD / ADMIN_NAME из окружения (.env).
"""
import argparse
import logging
import sys
import os

# Хак для корректной работы импортов
sys.path.append(os.getcwd())

from app.core.config import settings
from app.core.exceptions import ConflictError
from app.core.logging_config import setup_logging
from app.dependencies import get_db_context
from app.services import auth as auth_service

logger = logging.getLogger("app.scripts.create_admin")


def main() -> int:
    parser = argparse.ArgumentParser(description="Create the admin account.")
    parser.add_argument("--email", default=settings.ADMIN_EMAIL)
    parser.add_argument("--password", default=settings.ADMIN_PASSWORD)
    parser.add_argument("--name", default=settings.ADMIN_NAME)
    args = parser.parse_args()

    setup_logging()
    if not args.email or not args.password:
        logger.error("Admin email and password are required (arguments or ADMIN_EMAIL/ADMIN_PASSWORD).")
        return 1
    if len(args.password) < 8:
        logger.error("Admin password must be at least 8 characters.")
        return 1

    with get_db_context() as db:
        try:
            admin = auth_service.ensure_admin(db, args.email, args.password, args.name)
        except ConflictError as e:
            logger.error(f"Could not create admin: {e.error}")
            return 1

    if admin is None:
        print(f"Admin {args.email} already exists.")
    else:
        print(f"Admin {admin.email} created with referral code {admin.referral_code}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
