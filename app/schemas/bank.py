# app/schemas/bank.py
from typing import List

from pydantic import BaseModel


class Bank(BaseModel):
    name: str
    code: str

class BankListResponse(BaseModel):
    status: bool = True
    data: List[Bank]


class ResolvedAccount(BaseModel):
    account_name: str
    account_number: str

class ResolveAccountResponse(BaseModel):
    status: bool = True
    data: ResolvedAccount
