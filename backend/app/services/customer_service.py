"""Customer directory: registration, search and purchase history."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from app.db.unit_of_work import UnitOfWork
from app.errors import CustomerNotFoundError, DuplicateError
from app.logging import ledger_extra
from app.models.customer import (
    Customer,
    CustomerCreate,
    CustomerDetail,
    InstallmentLine,
    PurchaseHistory,
)
from app.services.credit_service import utc_now

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10


class CustomerService:
    def __init__(
        self,
        uow_factory: Callable[..., UnitOfWork],
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._uow_factory = uow_factory
        self._clock = clock or utc_now

    def register(self, data: CustomerCreate) -> Customer:
        with self._uow_factory() as uow:
            if uow.customers.get_by_nik(data.nik) is not None:
                raise DuplicateError("NIK is already registered")
            if uow.customers.get_by_phone(data.phone) is not None:
                raise DuplicateError("Phone number is already registered")
            customer = uow.customers.add(data, created_at=self._clock())
            uow.commit()

        logger.info("Registered customer %d", customer.id, extra=ledger_extra(customer_id=customer.id))
        return customer

    def search(self, query: str = "") -> list[Customer]:
        with self._uow_factory(read_only=True) as uow:
            return uow.customers.search(query.strip(), limit=SEARCH_LIMIT)

    def get_detail(self, customer_id: int) -> CustomerDetail:
        with self._uow_factory(read_only=True) as uow:
            customer = uow.customers.get(customer_id)
            if customer is None:
                raise CustomerNotFoundError("Customer not found")

            history = []
            for transaction in uow.transactions.list_by_customer(customer_id):
                contract = uow.contracts.get_by_transaction(transaction.id)
                lines = []
                if contract is not None:
                    lines = [
                        InstallmentLine(nth=i.installment_nth, status=i.status, amount=i.amount_due)
                        for i in uow.installments.list_by_contract(contract.id)
                    ]
                history.append(PurchaseHistory(
                    id=transaction.id,
                    date=transaction.created_at,
                    total_price=transaction.total_price,
                    status=transaction.status,
                    contract_id=contract.id if contract else None,
                    installments=lines,
                ))

        return CustomerDetail(profile=customer, history=history)
