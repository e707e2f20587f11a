# app/routers/v1/endpoints/banks.py
from fastapi import APIRouter, Depends, Query

from app.clients.paystack import PaystackClient, get_paystack_client
from app.core.exceptions import ValidationError
from app.schemas.bank import BankListResponse, ResolveAccountResponse

router = APIRouter(prefix="/banks")


@router.get("", response_model=BankListResponse)
async def list_banks(paystack: PaystackClient = Depends(get_paystack_client)):
    """Список банков Нигерии (прокси к Paystack)."""
    return {"status": True, "data": await paystack.list_banks()}


@router.get("/resolve", response_model=ResolveAccountResponse)
async def resolve_account(
    account_number: str = Query(""),
    bank_code: str = Query(""),
    paystack: PaystackClient = Depends(get_paystack_client),
):
    """Имя владельца счета по номеру счета и коду банка."""
    if not account_number or not bank_code:
        raise ValidationError("account_number and bank_code are required")
    return {"status": True, "data": await paystack.resolve_account(account_number, bank_code)}
