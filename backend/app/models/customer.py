from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from app.models.transaction import InstallmentStatus, TransactionStatus


class Customer(BaseModel):
    id: int
    nik: str
    name: str
    phone: str
    address: str
    created_at: Optional[datetime] = None


class CustomerCreate(BaseModel):
    nik: str = Field(min_length=16, max_length=16)  # national ID number
    name: str = Field(min_length=2)
    phone: str = Field(min_length=10)
    address: str = Field(min_length=5)


class InstallmentLine(BaseModel):
    nth: int
    status: InstallmentStatus
    amount: Decimal


class PurchaseHistory(BaseModel):
    id: int
    date: datetime
    total_price: Decimal
    status: TransactionStatus
    contract_id: Optional[int] = None
    installments: list[InstallmentLine] = []


class CustomerDetail(BaseModel):
    profile: Customer
    history: list[PurchaseHistory]
