# tests/v1/admin/test_admin_dashboard.py
from unittest.mock import AsyncMock, MagicMock

from redis.exceptions import ConnectionError as RedisConnectionError

from app.crud import payout as crud_payout
from app.services.admin import DASHBOARD_CACHE_KEY


def seed_activity(db_session, admin_user, test_user, make_user, make_referral):
    mary = make_user("mary@example.com")
    make_referral(test_user, earnings=15000)
    make_referral(test_user, earnings=18000, status="paid")
    make_referral(mary, earnings=12000, course="Data Science")
    make_referral(None)
    # Рефералы админа в агрегатах не участвуют
    make_referral(admin_user, earnings=5000)

    approved = crud_payout.create_payout(db_session, test_user.id, 5000)
    crud_payout.update_status(db_session, approved.id, "approved", approved_by=admin_user.id)
    crud_payout.create_payout(db_session, mary.id, 3000)


async def test_dashboard_stats(
    client, db_session, admin_user, admin_auth_headers, test_user, make_user, make_referral, mock_redis
):
    seed_activity(db_session, admin_user, test_user, make_user, make_referral)

    response = await client.get("/api/v1/admin/dashboard", headers=admin_auth_headers)

    assert response.status_code == 200
    assert response.json() == {
        "total_referrals": 3,
        "total_earnings": 45000,
        "pending_balance": 27000,
        "total_paid_earnings": 18000,
        "paid_count": 1,
        "total_codes": 2,
        "active_codes": 2,
        "total_students": 5,
        "total_unique_courses": 2,
        "total_payouts": 5000,
        "pending_payouts": 3000,
    }
    assert DASHBOARD_CACHE_KEY in mock_redis.store


async def test_dashboard_is_served_from_cache(
    client, db_session, admin_auth_headers, test_user, make_referral, mock_redis
):
    make_referral(test_user)
    first = await client.get("/api/v1/admin/dashboard", headers=admin_auth_headers)
    # Запись в обход API не сбрасывает кеш
    make_referral(test_user)

    second = await client.get("/api/v1/admin/dashboard", headers=admin_auth_headers)

    assert second.json() == first.json()
    assert second.json()["total_students"] == 1
    mock_redis.set.assert_awaited_once()
    assert mock_redis.set.call_args.kwargs["ex"] == 300


async def test_mutation_invalidates_dashboard_cache(
    client, db_session, admin_auth_headers, test_user, make_referral, mock_redis
):
    referral = make_referral(test_user)
    await client.get("/api/v1/admin/dashboard", headers=admin_auth_headers)
    assert DASHBOARD_CACHE_KEY in mock_redis.store
    mock_redis.store["rate_limit:10.0.0.99"] = 3
    mock_redis.scan_iter = MagicMock()

    response = await client.post(f"/api/v1/admin/referrals/{referral.id}/paid", headers=admin_auth_headers)

    assert response.status_code == 200
    assert DASHBOARD_CACHE_KEY not in mock_redis.store
    # Удаляется один ключ, без обхода всего keyspace
    mock_redis.scan_iter.assert_not_called()
    assert mock_redis.store["rate_limit:10.0.0.99"] == 3
    stats = (await client.get("/api/v1/admin/dashboard", headers=admin_auth_headers)).json()
    assert stats["paid_count"] == 1
    assert stats["total_paid_earnings"] == 15000


async def test_dashboard_without_redis(client, db_session, admin_auth_headers, mock_redis):
    mock_redis.get = AsyncMock(side_effect=RedisConnectionError("down"))
    mock_redis.set = AsyncMock(side_effect=RedisConnectionError("down"))

    response = await client.get("/api/v1/admin/dashboard", headers=admin_auth_headers)

    assert response.status_code == 200
    assert response.json()["total_students"] == 0
