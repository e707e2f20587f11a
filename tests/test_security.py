# tests/test_security.py
import uuid
from datetime import timedelta

import pytest
from jose import jwt

from app.core.exceptions import ExpiredTokenError, InvalidTokenError
from app.core.security import TokenManager, hash_password, verify_password


def make_manager(**overrides) -> TokenManager:
    params = {
        "access_secret": "access-secret",
        "refresh_secret": "refresh-secret",
        "access_expiry": timedelta(minutes=15),
        "refresh_expiry": timedelta(days=7),
    }
    params.update(overrides)
    return TokenManager(**params)


def test_password_hashes_are_salted():
    first = hash_password("password123")
    second = hash_password("password123")

    assert first != second
    assert verify_password("password123", first)
    assert verify_password("password123", second)
    assert not verify_password("password124", first)


def test_access_token_claims():
    manager = make_manager()
    user_id = uuid.uuid4()

    claims = manager.validate_access_token(manager.generate_access_token(user_id, "john@example.com", "user"))

    assert claims.user_id == user_id
    assert claims.email == "john@example.com"
    assert claims.role == "user"
    assert claims.type == "access"


def test_refresh_token_claims():
    manager = make_manager()
    user_id = uuid.uuid4()

    claims = manager.validate_refresh_token(manager.generate_refresh_token(user_id, "admin@cirvee.com", "admin"))

    assert claims.user_id == user_id
    assert claims.role == "admin"
    assert claims.type == "refresh"


def test_token_signed_with_other_secret_is_invalid():
    token = make_manager(access_secret="other-secret").generate_access_token(uuid.uuid4(), "a@b.com", "user")

    with pytest.raises(InvalidTokenError):
        make_manager().validate_access_token(token)


def test_expired_token():
    manager = make_manager(access_expiry=timedelta(minutes=-1))
    token = manager.generate_access_token(uuid.uuid4(), "a@b.com", "user")

    with pytest.raises(ExpiredTokenError) as exc_info:
        manager.validate_access_token(token)
    assert exc_info.value.error == "token expired"


def test_refresh_token_is_not_accepted_as_access_token():
    manager = make_manager()
    refresh = manager.generate_refresh_token(uuid.uuid4(), "a@b.com", "user")
    access = manager.generate_access_token(uuid.uuid4(), "a@b.com", "user")

    with pytest.raises(InvalidTokenError):
        manager.validate_access_token(refresh)
    with pytest.raises(InvalidTokenError):
        manager.validate_refresh_token(access)


def test_token_classes_are_checked_even_with_shared_secret():
    manager = make_manager(refresh_secret="access-secret")
    refresh = manager.generate_refresh_token(uuid.uuid4(), "a@b.com", "user")

    with pytest.raises(InvalidTokenError):
        manager.validate_access_token(refresh)


def test_wrong_issuer_is_invalid():
    token = make_manager(issuer="someone-else").generate_access_token(uuid.uuid4(), "a@b.com", "user")

    with pytest.raises(InvalidTokenError):
        make_manager().validate_access_token(token)


def test_token_without_subject_is_invalid():
    token = jwt.encode({"type": "access", "iss": "cirvee-referral", "exp": 9999999999}, "access-secret", algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        make_manager().validate_access_token(token)


@pytest.mark.parametrize("garbage", ["", "not-a-jwt", "a.b.c"])
def test_malformed_token_is_invalid(garbage):
    with pytest.raises(InvalidTokenError) as exc_info:
        make_manager().validate_access_token(garbage)
    assert exc_info.value.status_code == 401
