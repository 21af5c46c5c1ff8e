"""Installment payment service.

An installment moves UNPAID -> PAID exactly once. Paying the last open
installment of a contract completes the parent transaction in the same unit
of work.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from app.db.unit_of_work import UnitOfWork
from app.errors import AlreadyPaidError, InstallmentNotFoundError
from app.logging import ledger_extra
from app.models.transaction import (
    ContractDetail,
    InstallmentStatus,
    PaymentResult,
    TransactionStatus,
)
from app.services.credit_service import utc_now

logger = logging.getLogger(__name__)


class PaymentService:
    def __init__(
        self,
        uow_factory: Callable[..., UnitOfWork],
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._uow_factory = uow_factory
        self._clock = clock or utc_now

    def pay_installment(self, installment_id: int) -> PaymentResult:
        """Settle one installment in full.

        Not idempotent: paying an already-paid installment raises
        AlreadyPaidError and changes nothing.
        """
        with self._uow_factory() as uow:
            installment = uow.installments.get(installment_id)
            if installment is None:
                raise InstallmentNotFoundError("Installment not found")
            if installment.status == InstallmentStatus.PAID:
                raise AlreadyPaidError("Installment is already paid")

            if not uow.installments.mark_paid(installment_id, self._clock()):
                raise AlreadyPaidError("Installment is already paid")

            # Counted after our own write so a payment committed concurrently is seen
            contract = uow.contracts.get(installment.contract_id)
            completed = uow.installments.count_unpaid(contract.id) == 0
            closed = completed and uow.transactions.mark_paid(contract.transaction_id)

            paid = uow.installments.get(installment_id)
            uow.commit()

        ids = ledger_extra(
            transaction_id=contract.transaction_id, contract_id=contract.id, installment_id=paid.id,
        )
        logger.info(
            "Installment %d (#%d of contract %d) paid: %s",
            paid.id, paid.installment_nth, contract.id, paid.amount_paid,
            extra=ids,
        )
        if closed:
            logger.info("Contract %d fully paid; transaction %d marked PAID",
                        contract.id, contract.transaction_id, extra=ids)
        elif completed:
            logger.warning("Contract %d fully paid but transaction %d is no longer open",
                           contract.id, contract.transaction_id, extra=ids)
        return PaymentResult(installment=paid, contract_completed=completed)

    def list_active_contracts(self) -> list[ContractDetail]:
        """Contracts of ACTIVE transactions, newest first, with their schedules."""
        with self._uow_factory(read_only=True) as uow:
            details = []
            for contract in uow.contracts.list_by_transaction_status(TransactionStatus.ACTIVE):
                transaction = uow.transactions.get(contract.transaction_id)
                product = uow.products.get(transaction.product_id)
                details.append(ContractDetail(
                    **contract.model_dump(),
                    transaction=transaction,
                    product_name=product.name if product else None,
                    product_sku=product.sku if product else None,
                    installments=uow.installments.list_by_contract(contract.id),
                ))
            return details
