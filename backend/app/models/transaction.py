from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from app.models.base import CamelModel
from app.models.scheme import SchemeSnapshot
from app.models.simulation import SimulationDisplay


class TransactionStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    PAID = "PAID"
    VOID = "VOID"
    BAD_DEBT = "BAD_DEBT"


class InstallmentStatus(str, Enum):
    UNPAID = "UNPAID"
    # PARTIAL and LATE are stored values with no transition into them yet
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    LATE = "LATE"


class Transaction(BaseModel):
    id: int
    customer_id: int
    product_id: int
    customer_name: str
    customer_phone: str
    customer_nik: str
    total_price: Decimal
    dp_amount: Decimal
    scheme_snapshot: SchemeSnapshot
    status: TransactionStatus
    created_at: datetime


class CreditContract(BaseModel):
    id: int
    transaction_id: int
    principal_amount: Decimal
    total_interest: Decimal
    monthly_installment: Decimal
    start_date: datetime
    due_date_day: int
    tenor_months: int


class Installment(BaseModel):
    id: int
    contract_id: int
    installment_nth: int
    due_date: date
    amount_due: Decimal
    amount_paid: Decimal = Decimal("0")
    penalty_accrued: Decimal = Decimal("0")
    penalty_paid: Decimal = Decimal("0")
    status: InstallmentStatus = InstallmentStatus.UNPAID
    paid_at: Optional[datetime] = None


class ContractDetail(CreditContract):
    """Contract joined with its transaction, product and ordered schedule."""
    transaction: Transaction
    product_name: Optional[str] = None
    product_sku: Optional[str] = None
    installments: list[Installment]


class SoldProduct(CamelModel):
    id: int
    name: str
    sku: str
    remaining_stock: int


class CustomerContact(CamelModel):
    name: str
    phone: str


class PaymentResult(BaseModel):
    installment: Installment
    contract_completed: bool


class TransactionReceipt(BaseModel):
    """Everything written by a successful sale."""
    transaction: Transaction
    contract: CreditContract
    installments: list[Installment]
    product: SoldProduct
    simulation: SimulationDisplay


class TransactionCreated(CamelModel):
    transaction_id: int
    contract_id: int
    customer: CustomerContact
    product: SoldProduct
    financials: SimulationDisplay
    installment_count: int
    first_due_date: Optional[date] = None
    last_due_date: Optional[date] = None

    @classmethod
    def from_receipt(cls, receipt: TransactionReceipt) -> "TransactionCreated":
        installments = receipt.installments
        return cls(
            transaction_id=receipt.transaction.id,
            contract_id=receipt.contract.id,
            customer=CustomerContact(
                name=receipt.transaction.customer_name,
                phone=receipt.transaction.customer_phone,
            ),
            product=receipt.product,
            financials=receipt.simulation,
            installment_count=len(installments),
            first_due_date=installments[0].due_date if installments else None,
            last_due_date=installments[-1].due_date if installments else None,
        )
