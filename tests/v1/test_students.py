# tests/v1/test_students.py
import json

from app.crud import user as crud_user
from app.models.click import ReferralClick
from app.models.referral import Referral
from app.services.admin import DASHBOARD_CACHE_KEY

STUDENT_BODY = {
    "name": "Jane Student",
    "email": "Jane.Student@example.com",
    "phone": "08099998888",
    "course": "Web Development",
}


def email_subjects(sent_emails) -> dict:
    return {call.args[1]: call.args for call in sent_emails.call_args_list}


async def test_register_student_with_referral_code(client, db_session, test_user, sent_emails):
    body = {**STUDENT_BODY, "referral_code": test_user.referral_code}

    response = await client.post("/api/v1/students/register", json=body)

    assert response.status_code == 201
    assert response.json() == {
        "message": "Student registered successfully",
        "referral": "applied",
        "referrer": "John Doe",
    }

    referral = db_session.query(Referral).one()
    assert referral.referrer_id == test_user.id
    assert referral.referred_email == "jane.student@example.com"
    assert referral.course_price == 150000
    assert referral.earnings == 15000
    assert referral.status == "pending"

    emails = email_subjects(sent_emails)
    assert emails["Registration Confirmed - Cirvee"][0] == "Jane.Student@example.com"
    notification = emails["New Referral - You Earned a Commission!"]
    assert notification[0] == "john@example.com"
    assert "15,000" in notification[2]
    alert = emails["New Student Registration - Cirvee Admin"]
    assert alert[0] == "owner@cirvee.com"
    assert "John Doe" in alert[2]


async def test_register_student_without_code(client, db_session, sent_emails):
    response = await client.post("/api/v1/students/register", json=STUDENT_BODY)

    assert response.status_code == 201
    assert response.json() == {"message": "Student registered successfully"}

    referral = db_session.query(Referral).one()
    assert referral.referrer_id is None
    assert referral.earnings == 0
    assert referral.course_price == 150000

    emails = email_subjects(sent_emails)
    assert "New Referral - You Earned a Commission!" not in emails
    assert "Direct Sign-up" in emails["New Student Registration - Cirvee Admin"][2]


async def test_unknown_referral_code_is_direct_signup(client, db_session):
    response = await client.post("/api/v1/students/register", json={**STUDENT_BODY, "referral_code": "XXX-000000"})

    assert response.status_code == 201
    assert "referral" not in response.json()
    assert db_session.query(Referral).one().referrer_id is None


async def test_admin_and_blocked_codes_earn_nothing(client, db_session, admin_user, test_user):
    crud_user.set_blocked(db_session, test_user, True)

    for code in (admin_user.referral_code, test_user.referral_code):
        response = await client.post("/api/v1/students/register", json={**STUDENT_BODY, "referral_code": code})
        assert response.status_code == 201
        assert response.json() == {"message": "Student registered successfully"}

    referrals = db_session.query(Referral).all()
    assert len(referrals) == 2
    assert all(r.referrer_id is None and r.earnings == 0 for r in referrals)


async def test_unknown_course_uses_default_price(client, db_session, test_user):
    body = {**STUDENT_BODY, "course": "Quantum Knitting", "referral_code": test_user.referral_code}

    response = await client.post("/api/v1/students/register", json=body)

    assert response.status_code == 201
    referral = db_session.query(Referral).one()
    assert referral.course_price == 100000
    assert referral.earnings == 10000


async def test_student_registration_invalidates_dashboard_cache(client, db_session, mock_redis):
    mock_redis.store[DASHBOARD_CACHE_KEY] = json.dumps({"stale": True})

    response = await client.post("/api/v1/students/register", json=STUDENT_BODY)

    assert response.status_code == 201
    assert DASHBOARD_CACHE_KEY not in mock_redis.store


async def test_student_registration_validation(client, db_session):
    response = await client.post("/api/v1/students/register", json={**STUDENT_BODY, "email": "not-an-email"})

    assert response.status_code == 400
    assert response.json()["error"] == "invalid request"


async def test_track_click(client, db_session, test_user):
    response = await client.post(
        "/api/v1/students/track-click",
        json={"referral_code": test_user.referral_code},
        headers={"X-Forwarded-For": "203.0.113.5, 10.0.0.1", "User-Agent": "pytest-browser"},
    )

    assert response.status_code == 200
    assert response.json() == {"message": "click recorded"}
    click = db_session.query(ReferralClick).one()
    assert click.referral_code == test_user.referral_code
    assert click.user_id == test_user.id
    assert click.ip_address == "203.0.113.5"
    assert click.user_agent == "pytest-browser"


async def test_track_click_for_unknown_code(client, db_session):
    response = await client.post("/api/v1/students/track-click", json={"referral_code": "NOP-123456"})

    assert response.status_code == 200
    assert db_session.query(ReferralClick).one().user_id is None


async def test_track_click_requires_code(client, db_session):
    for body in ({}, {"referral_code": ""}):
        response = await client.post("/api/v1/students/track-click", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "referral_code is required"}
