# app/crud/user.py
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.user import User


class UniqueViolation(Exception):
    """Нарушение уникального ограничения на колонке `column` (email или referral_code)."""

    def __init__(self, column: str):
        self.column = column
        super().__init__(f"unique constraint violated on column '{column}'")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_id(db: Session, user_id: uuid.UUID) -> User | None:
    """Получает пользователя по его первичному ключу."""
    return db.query(User).filter(User.id == user_id).first()

def get_user_by_email(db: Session, email: str) -> User | None:
    """Поиск без учета регистра: email всегда хранится в нижнем регистре."""
    return db.query(User).filter(User.email == normalize_email(email)).first()

def get_user_by_referral_code(db: Session, code: str) -> User | None:
    return db.query(User).filter(User.referral_code == code).first()

def lock_user(db: Session, user_id: uuid.UUID) -> User | None:
    """SELECT ... FOR UPDATE: строка держится до commit/rollback текущей транзакции."""
    return db.query(User).filter(User.id == user_id).with_for_update().first()

def email_exists(db: Session, email: str) -> bool:
    return db.query(User.id).filter(User.email == normalize_email(email)).first() is not None

def referral_code_exists(db: Session, code: str) -> bool:
    return db.query(User.id).filter(User.referral_code == code).first() is not None


def create_user(
    db: Session,
    email: str,
    password_hash: str,
    name: str,
    phone: str,
    role: str,
    referral_code: str,
    bank_name: str | None = None,
    account_number: str | None = None,
    account_name: str | None = None,
) -> User:
    """
    Создает нового пользователя.
    Уникальные ограничения БД - последний арбитр при гонках: IntegrityError
    переводится в `UniqueViolation` с именем колонки, которая конфликтует.
    """
    db_user = User(
        email=normalize_email(email),
        password_hash=password_hash,
        name=name,
        phone=phone,
        role=role,
        referral_code=referral_code,
        bank_name=bank_name or None,
        account_number=account_number or None,
        account_name=account_name or None,
    )
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        # Определяем колонку повторным запросом, а не разбором текста ошибки драйвера
        if email_exists(db, email):
            raise UniqueViolation("email")
        if referral_code_exists(db, referral_code):
            raise UniqueViolation("referral_code")
        raise
    db.refresh(db_user)
    return db_user


def update_user(db: Session, user: User, **fields) -> User:
    """Обновляет только переданные (не None) поля."""
    for key, value in fields.items():
        if value is not None:
            setattr(user, key, value)
    db.commit()
    db.refresh(user)
    return user

def update_password(db: Session, user: User, password_hash: str) -> None:
    user.password_hash = password_hash
    db.commit()

def set_blocked(db: Session, user: User, is_blocked: bool) -> User:
    user.is_blocked = is_blocked
    db.commit()
    db.refresh(user)
    return user

def delete_user(db: Session, user: User) -> None:
    db.delete(user)
    db.commit()
