# app/clients/paystack.py

import logging
from typing import List

import httpx
from fastapi import status

from app.core.config import settings
from app.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)

class PaystackClient:
    """
    Асинхронный клиент для справочника банков и проверки счетов Paystack.
    Аутентификация - секретный ключ в заголовке Bearer.
    """
    def __init__(self, base_url: str, secret_key: str, transport: httpx.AsyncBaseTransport | None = None):
        timeouts = httpx.Timeout(10.0, read=20.0)
        self.async_client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {secret_key}", "Content-Type": "application/json"},
            timeout=timeouts,
            transport=transport,
        )

    async def _get(self, endpoint: str, params: dict) -> httpx.Response:
        try:
            return await self.async_client.get(endpoint, params=params)
        except httpx.RequestError as e:
            logger.error(f"Network error during GET request to {e.request.url!r}.", exc_info=True)
            raise UpstreamError("payment provider unavailable")

    async def list_banks(self) -> List[dict]:
        """
        Возвращает активные, не удаленные банки Нигерии в виде {name, code}.
        """
        response = await self._get("/bank", params={"country": "nigeria", "perPage": 100})
        if response.status_code != status.HTTP_200_OK:
            logger.error(f"Paystack bank list returned {response.status_code}: {response.text}")
            raise UpstreamError("paystack API error")

        try:
            banks = response.json().get("data") or []
            return [
                {"name": bank["name"], "code": bank["code"]}
                for bank in banks
                if bank.get("active") and not bank.get("is_deleted")
            ]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"Could not parse Paystack bank list: {e}")
            raise UpstreamError("failed to parse response")

    async def resolve_account(self, account_number: str, bank_code: str) -> dict:
        """
        Возвращает {account_name, account_number} для счета.
        Отказ Paystack (не 200) превращается в 400 с его сообщением.
        """
        response = await self._get(
            "/bank/resolve", params={"account_number": account_number, "bank_code": bank_code}
        )
        if response.status_code != status.HTTP_200_OK:
            message = "could not resolve account"
            try:
                body = response.json()
                if isinstance(body, dict) and isinstance(body.get("message"), str):
                    message = body["message"]
            except ValueError:
                pass
            logger.info(f"Paystack could not resolve account {account_number}/{bank_code}: {message}")
            raise UpstreamError(message, status_code=status.HTTP_400_BAD_REQUEST)

        try:
            data = response.json()["data"]
            return {"account_name": data["account_name"], "account_number": data["account_number"]}
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Could not parse Paystack resolve response: {e}")
            raise UpstreamError("failed to parse response")

    async def aclose(self) -> None:
        await self.async_client.aclose()


# Создаем синглтон
paystack_client = PaystackClient(
    base_url=settings.PAYSTACK_BASE_URL,
    secret_key=settings.PAYSTACK_SECRET_KEY,
)


def get_paystack_client() -> PaystackClient:
    return paystack_client
