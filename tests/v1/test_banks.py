# tests/v1/test_banks.py
import httpx

BANKS_PAYLOAD = {
    "status": True,
    "data": [
        {"name": "Access Bank", "code": "044", "active": True, "is_deleted": False},
        {"name": "Old Bank", "code": "999", "active": False, "is_deleted": False},
        {"name": "Gone Bank", "code": "998", "active": True, "is_deleted": True},
        {"name": "GTBank", "code": "058", "active": True, "is_deleted": None},
    ],
}


async def test_list_banks(client, paystack_handler):
    paystack_handler.return_value = httpx.Response(200, json=BANKS_PAYLOAD)

    response = await client.get("/api/v1/banks")

    assert response.status_code == 200
    assert response.json() == {
        "status": True,
        "data": [{"name": "Access Bank", "code": "044"}, {"name": "GTBank", "code": "058"}],
    }
    request = paystack_handler.call_args.args[0]
    assert request.url.path == "/bank"
    assert request.url.params["country"] == "nigeria"
    assert request.headers["Authorization"] == "Bearer sk_test_secret"


async def test_list_banks_upstream_error(client, paystack_handler):
    paystack_handler.return_value = httpx.Response(500, text="boom")

    response = await client.get("/api/v1/banks")

    assert response.status_code == 502
    assert response.json() == {"error": "paystack API error"}


async def test_list_banks_unparseable_response(client, paystack_handler):
    paystack_handler.return_value = httpx.Response(200, text="<html>")

    response = await client.get("/api/v1/banks")

    assert response.status_code == 502
    assert response.json() == {"error": "failed to parse response"}


async def test_list_banks_network_error(client, paystack_handler):
    paystack_handler.side_effect = httpx.ConnectError("connection refused")

    response = await client.get("/api/v1/banks")

    assert response.status_code == 502
    assert response.json() == {"error": "payment provider unavailable"}


async def test_resolve_account(client, paystack_handler):
    paystack_handler.return_value = httpx.Response(
        200,
        json={"status": True, "data": {"account_number": "0123456789", "account_name": "JOHN DOE", "bank_id": 1}},
    )

    response = await client.get("/api/v1/banks/resolve?account_number=0123456789&bank_code=044")

    assert response.status_code == 200
    assert response.json() == {
        "status": True,
        "data": {"account_name": "JOHN DOE", "account_number": "0123456789"},
    }
    request = paystack_handler.call_args.args[0]
    assert request.url.path == "/bank/resolve"
    assert request.url.params["bank_code"] == "044"


async def test_resolve_account_rejected_by_paystack(client, paystack_handler):
    paystack_handler.return_value = httpx.Response(
        422, json={"status": False, "message": "Could not resolve account name. Check parameters or try again."}
    )

    response = await client.get("/api/v1/banks/resolve?account_number=0000000000&bank_code=044")

    assert response.status_code == 400
    assert response.json() == {"error": "Could not resolve account name. Check parameters or try again."}


async def test_resolve_account_requires_both_params(client, paystack_handler):
    response = await client.get("/api/v1/banks/resolve?account_number=0123456789")

    assert response.status_code == 400
    assert response.json() == {"error": "account_number and bank_code are required"}
    paystack_handler.assert_not_called()
