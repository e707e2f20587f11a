# app/core/security.py

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Literal

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError as PydanticValidationError

from app.core.config import settings
from app.core.exceptions import ExpiredTokenError, InvalidTokenError

logger = logging.getLogger(__name__)

# bcrypt сам генерирует соль для каждого вызова hash()
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Битый хеш в БД не должен приводить к 500 на логине
        logger.warning("Stored password hash could not be parsed.")
        return False


class TokenClaims(BaseModel):
    """Данные, которые middleware кладет в request.state.claims."""
    user_id: uuid.UUID
    email: str
    role: str
    type: Literal["access", "refresh"]


class TokenManager:
    """
    Выпускает и проверяет JWT двух классов: access и refresh.
    Каждый класс подписан своим секретом, поэтому утечка одного из них
    не позволяет подделать токены другого класса.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_expiry: timedelta,
        refresh_expiry: timedelta,
        algorithm: str = "HS256",
        issuer: str = "cirvee-referral",
    ):
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_expiry = access_expiry
        self.refresh_expiry = refresh_expiry
        self.algorithm = algorithm
        self.issuer = issuer

    def _encode(self, user_id: uuid.UUID, email: str, role: str, token_type: str, secret: str, expiry: timedelta) -> str:
        now = datetime.now(timezone.utc)
        to_encode = {
            "sub": str(user_id),
            "email": email,
            "role": role,
            "type": token_type,
            "iat": now,
            "exp": now + expiry,
            "iss": self.issuer,
        }
        return jwt.encode(to_encode, secret, algorithm=self.algorithm)

    def generate_access_token(self, user_id: uuid.UUID, email: str, role: str) -> str:
        return self._encode(user_id, email, role, ACCESS_TOKEN, self.access_secret, self.access_expiry)

    def generate_refresh_token(self, user_id: uuid.UUID, email: str, role: str) -> str:
        return self._encode(user_id, email, role, REFRESH_TOKEN, self.refresh_secret, self.refresh_expiry)

    def validate_access_token(self, token: str) -> TokenClaims:
        return self._validate(token, self.access_secret, ACCESS_TOKEN)

    def validate_refresh_token(self, token: str) -> TokenClaims:
        return self._validate(token, self.refresh_secret, REFRESH_TOKEN)

    def _validate(self, token: str, secret: str, expected_type: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require_exp": True, "require_sub": True},
            )
        except ExpiredSignatureError:
            raise ExpiredTokenError()
        except JWTError as e:
            logger.debug(f"JWT decoding failed: {e}")
            raise InvalidTokenError()

        if payload.get("type") != expected_type:
            logger.warning(f"Token of type '{payload.get('type')}' used where '{expected_type}' expected.")
            raise InvalidTokenError()

        try:
            return TokenClaims(
                user_id=payload["sub"],
                email=payload.get("email", ""),
                role=payload.get("role", ""),
                type=payload["type"],
            )
        except (KeyError, PydanticValidationError):
            raise InvalidTokenError()


token_manager = TokenManager(
    access_secret=settings.JWT_SECRET,
    refresh_secret=settings.JWT_REFRESH_SECRET,
    access_expiry=timedelta(minutes=settings.JWT_ACCESS_EXPIRE_MINUTES),
    refresh_expiry=timedelta(minutes=settings.JWT_REFRESH_EXPIRE_MINUTES),
    algorithm=settings.JWT_ALGORITHM,
    issuer=settings.JWT_ISSUER,
)


def get_token_manager() -> TokenManager:
    return token_manager
