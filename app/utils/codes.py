# app/utils/codes.py
import secrets


def generate_referral_code(name: str) -> str:
    """
    Код вида `JOH-1A2B3C`: первые три буквы имени в верхнем регистре
    и шесть случайных hex-символов. Уникальность проверяется вызывающей стороной.
    """
    prefix = name.strip().upper()[:3]
    suffix = secrets.token_hex(3).upper()
    return f"{prefix}-{suffix}"


def generate_reset_token() -> str:
    """Одноразовый токен сброса пароля: 32 случайных байта в hex."""
    return secrets.token_hex(32)
