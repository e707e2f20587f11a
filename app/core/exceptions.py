# app/core/exceptions.py
"""
Типизированные ошибки приложения.

Сервисы и зависимости выбрасывают наследников `AppError`, а единый обработчик
в `app/main.py` превращает их в JSON вида `{"error": ..., "message": ...}`.
"""
from fastapi import status


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "internal server error"

    def __init__(self, error: str | None = None, message: str | None = None, headers: dict | None = None):
        self.error = error or self.error
        self.message = message
        self.headers = headers
        super().__init__(self.error)

    def to_dict(self) -> dict:
        body = {"error": self.error}
        if self.message:
            body["message"] = self.message
        return body


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "invalid request"


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "unauthorized"


class InvalidTokenError(AuthenticationError):
    error = "invalid token"


class ExpiredTokenError(AuthenticationError):
    error = "token expired"


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "forbidden"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    error = "conflict"


class RateLimitExceeded(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error = "rate limit exceeded"


class UpstreamError(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    error = "upstream service error"

    def __init__(self, error: str | None = None, message: str | None = None, status_code: int | None = None):
        super().__init__(error, message)
        if status_code is not None:
            self.status_code = status_code


class InternalError(AppError):
    pass
