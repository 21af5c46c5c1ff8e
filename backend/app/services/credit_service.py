"""Credit transaction service.

Runs loan simulations against the live scheme table and turns an accepted
simulation into a transaction, its credit contract and the full installment
schedule, decrementing stock, all inside one unit of work.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from app.db.unit_of_work import UnitOfWork
from app.errors import (
    CustomerNotFoundError,
    OutOfStockError,
    ProductInactiveError,
    ProductNotFoundError,
    SchemeNotFoundError,
)
from app.logging import ledger_extra
from app.models.scheme import SchemeSnapshot
from app.models.simulation import CreateTransactionRequest, SimulationRequest, SimulationResult
from app.models.transaction import SoldProduct, TransactionReceipt, TransactionStatus
from app.simulation import calculate_simulation, installment_due_dates, validate_due_date_day

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CreditService:
    def __init__(
        self,
        uow_factory: Callable[..., UnitOfWork],
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._uow_factory = uow_factory
        self._clock = clock or utc_now

    def simulate(self, request: SimulationRequest) -> SimulationResult:
        """Financial breakdown for the requested terms. Persists nothing."""
        with self._uow_factory(read_only=True) as uow:
            return self._simulate(uow, request)

    def create_transaction(self, request: CreateTransactionRequest) -> TransactionReceipt:
        """Record a credit sale.

        The scheme lookup, tenor and minimum down payment checks are always
        re-run here against the stored scheme; a simulation computed by the
        client is never trusted.
        """
        validate_due_date_day(request.due_date_day)

        with self._uow_factory() as uow:
            product = uow.products.get(request.product_id)
            if product is None:
                raise ProductNotFoundError(f"Product with ID {request.product_id} not found")
            if not product.is_active:
                raise ProductInactiveError(f'Product "{product.name}" is inactive')
            if product.stock_qty <= 0:
                raise OutOfStockError(f'Product "{product.name}" is out of stock')

            customer = uow.customers.get(request.customer_id)
            if customer is None:
                raise CustomerNotFoundError(f"Customer with ID {request.customer_id} not found")

            simulation = self._simulate(uow, request)
            raw = simulation.raw
            now = self._clock()

            transaction = uow.transactions.add(
                customer=customer,
                product_id=product.id,
                total_price=raw.price,
                dp_amount=raw.dp,
                scheme_snapshot=SchemeSnapshot.from_scheme(simulation.scheme),
                status=TransactionStatus.ACTIVE,
                created_at=now,
            )

            contract = uow.contracts.add(
                transaction_id=transaction.id,
                principal_amount=raw.principal,
                total_interest=raw.interest_amount,
                monthly_installment=raw.monthly_installment,
                start_date=now,
                due_date_day=request.due_date_day,
                tenor_months=raw.tenor_months,
            )

            due_dates = installment_due_dates(now, request.due_date_day, raw.tenor_months)
            installments = [
                uow.installments.add(
                    contract_id=contract.id,
                    installment_nth=nth,
                    due_date=due_date,
                    amount_due=raw.monthly_installment,
                )
                for nth, due_date in enumerate(due_dates, start=1)
            ]

            # Re-checked at write time; another sale may have taken the last unit
            if not uow.products.decrement_stock(product.id):
                raise OutOfStockError(f'Product "{product.name}" is out of stock')
            remaining_stock = uow.products.get(product.id).stock_qty

            uow.commit()

        logger.info(
            "Created transaction %d (contract %d, %d installments of %s) for customer %d; "
            "product %s stock now %d",
            transaction.id, contract.id, len(installments), raw.monthly_installment,
            customer.id, product.sku, remaining_stock,
            extra=ledger_extra(
                transaction_id=transaction.id, contract_id=contract.id,
                customer_id=customer.id, product_sku=product.sku,
            ),
        )
        return TransactionReceipt(
            transaction=transaction,
            contract=contract,
            installments=installments,
            product=SoldProduct(
                id=product.id,
                name=product.name,
                sku=product.sku,
                remaining_stock=remaining_stock,
            ),
            simulation=simulation.display,
        )

    def _simulate(self, uow: UnitOfWork, request: SimulationRequest) -> SimulationResult:
        scheme = uow.schemes.get(request.scheme_id)
        if scheme is None:
            raise SchemeNotFoundError(f"Loan scheme with ID {request.scheme_id} not found")
        return calculate_simulation(scheme, request.price, request.dp, request.tenor_months)
