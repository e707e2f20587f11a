# tests/test_crud.py
import logging
from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import ConflictError
from app.core.security import hash_password
from app.crud import reset_token as crud_reset_token
from app.crud import user as crud_user
from app.crud.user import UniqueViolation
from app.models.reset_token import PasswordResetToken
from app.models.user import ROLE_USER
from app.services import auth as auth_service


def make_user(db, email="jane@example.com", code="JAN-000001"):
    return crud_user.create_user(
        db,
        email=email,
        password_hash=hash_password("password123"),
        name="Jane Roe",
        phone="0800",
        role=ROLE_USER,
        referral_code=code,
    )


def test_email_is_stored_lowercase(db_session):
    user = make_user(db_session, email="  Jane@Example.COM ")

    assert user.email == "jane@example.com"
    assert crud_user.get_user_by_email(db_session, "JANE@example.com").id == user.id


def test_duplicate_email_reported_by_column(db_session):
    make_user(db_session)

    with pytest.raises(UniqueViolation) as exc_info:
        make_user(db_session, email="JANE@example.com", code="JAN-000002")
    assert exc_info.value.column == "email"


def test_duplicate_referral_code_reported_by_column(db_session):
    make_user(db_session)

    with pytest.raises(UniqueViolation) as exc_info:
        make_user(db_session, email="other@example.com")
    assert exc_info.value.column == "referral_code"


def test_referral_code_collision_is_retried(db_session, mocker):
    make_user(db_session, code="JOH-AAAAAA")
    generator = mocker.patch(
        "app.services.auth.generate_referral_code", side_effect=["JOH-AAAAAA", "JOH-AAAAAA", "JOH-BBBBBB"]
    )

    user = auth_service.create_user_with_code(
        db_session, email="john@example.com", password="password123", name="John", phone="", role=ROLE_USER
    )

    assert user.referral_code == "JOH-BBBBBB"
    assert generator.call_count == 3


def test_referral_code_generation_gives_up(db_session, mocker):
    make_user(db_session, code="JOH-AAAAAA")
    mocker.patch("app.services.auth.generate_referral_code", return_value="JOH-AAAAAA")

    with pytest.raises(ConflictError) as exc_info:
        auth_service.create_user_with_code(
            db_session, email="john@example.com", password="password123", name="John", phone="", role=ROLE_USER
        )
    assert exc_info.value.error == "could not generate unique referral code"


def test_new_reset_token_replaces_previous(db_session):
    user = make_user(db_session)

    first = crud_reset_token.create_reset_token(db_session, user.id, timedelta(hours=1))
    first_value = first.token
    second = crud_reset_token.create_reset_token(db_session, user.id, timedelta(hours=1))

    assert db_session.query(PasswordResetToken).count() == 1
    assert crud_reset_token.get_valid_token(db_session, first_value) is None
    assert crud_reset_token.get_valid_token(db_session, second.token).user_id == user.id


def test_expired_reset_token_is_removed_on_lookup(db_session):
    user = make_user(db_session)
    token = crud_reset_token.create_reset_token(db_session, user.id, timedelta(minutes=-5))

    assert crud_reset_token.get_valid_token(db_session, token.token) is None
    assert db_session.query(PasswordResetToken).count() == 0


def test_cleanup_expired_reset_tokens(db_session):
    alive = make_user(db_session)
    stale = make_user(db_session, email="stale@example.com", code="STA-000001")
    crud_reset_token.create_reset_token(db_session, alive.id, timedelta(hours=1))
    db_session.add(
        PasswordResetToken(
            user_id=stale.id, token="f" * 64, expires_at=datetime.now(timezone.utc) - timedelta(hours=2)
        )
    )
    db_session.commit()

    assert crud_reset_token.cleanup_expired(db_session) == 1
    assert db_session.query(PasswordResetToken).count() == 1


def test_admin_seeding_warns_when_email_is_a_regular_user(db_session, caplog):
    make_user(db_session, email="owner@cirvee.com")

    with caplog.at_level(logging.INFO, logger="app.services.auth"):
        assert auth_service.ensure_admin(db_session, "owner@cirvee.com", "password123", "Owner") is None

    warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "role 'user'" in warnings[0].getMessage()
    assert crud_user.get_user_by_email(db_session, "owner@cirvee.com").role == ROLE_USER


def test_admin_seeding_skips_existing_admin_quietly(db_session, caplog):
    auth_service.ensure_admin(db_session, "owner@cirvee.com", "password123", "Owner")

    with caplog.at_level(logging.INFO, logger="app.services.auth"):
        assert auth_service.ensure_admin(db_session, "owner@cirvee.com", "password123", "Owner") is None

    assert not [record for record in caplog.records if record.levelno >= logging.WARNING]
    assert "already exists" in caplog.text
