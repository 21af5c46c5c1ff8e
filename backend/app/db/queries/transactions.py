from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from app.db.queries.base import Repository, as_datetime, as_decimal, to_money
from app.models.customer import Customer
from app.models.scheme import SchemeSnapshot
from app.models.transaction import CreditContract, Transaction, TransactionStatus

_TRANSACTION_COLUMNS = (
    "id, customer_id, product_id, customer_name, customer_phone, customer_nik, "
    "total_price, dp_amount, scheme_snapshot, status, created_at"
)

_CONTRACT_COLUMNS = (
    "id, transaction_id, principal_amount, total_interest, monthly_installment, "
    "start_date, due_date_day, tenor_months"
)


class TransactionRepository(Repository):
    def get(self, transaction_id: int) -> Optional[Transaction]:
        row = self._fetch_one(
            f"SELECT {_TRANSACTION_COLUMNS} FROM transactions WHERE id = ?", transaction_id
        )
        return _to_transaction(row) if row else None

    def add(
        self,
        customer: Customer,
        product_id: int,
        total_price: Decimal,
        dp_amount: Decimal,
        scheme_snapshot: SchemeSnapshot,
        status: TransactionStatus,
        created_at: datetime,
    ) -> Transaction:
        transaction_id = self._insert(
            """
            INSERT INTO transactions
                (customer_id, product_id, customer_name, customer_phone, customer_nik,
                 total_price, dp_amount, scheme_snapshot, status, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            customer.id, product_id, customer.name, customer.phone, customer.nik,
            to_money(total_price), to_money(dp_amount), scheme_snapshot.model_dump_json(),
            status.value, created_at,
        )
        return self.get(transaction_id)

    def mark_paid(self, transaction_id: int) -> bool:
        """Close an open (PENDING or ACTIVE) transaction as PAID.

        VOID and BAD_DEBT are terminal and left untouched; returns False then.
        """
        updated = self._update(
            "UPDATE transactions SET status = ? WHERE id = ? AND status IN (?, ?)",
            TransactionStatus.PAID.value, transaction_id,
            TransactionStatus.PENDING.value, TransactionStatus.ACTIVE.value,
        )
        return updated == 1

    def list_by_customer(self, customer_id: int) -> list[Transaction]:
        rows = self._fetch_all(
            f"""
            SELECT {_TRANSACTION_COLUMNS} FROM transactions
            WHERE customer_id = ?
            ORDER BY created_at DESC, id DESC
            """,
            customer_id,
        )
        return [_to_transaction(row) for row in rows]


class ContractRepository(Repository):
    def get(self, contract_id: int) -> Optional[CreditContract]:
        row = self._fetch_one(
            f"SELECT {_CONTRACT_COLUMNS} FROM credit_contracts WHERE id = ?", contract_id
        )
        return _to_contract(row) if row else None

    def get_by_transaction(self, transaction_id: int) -> Optional[CreditContract]:
        row = self._fetch_one(
            f"SELECT {_CONTRACT_COLUMNS} FROM credit_contracts WHERE transaction_id = ?",
            transaction_id,
        )
        return _to_contract(row) if row else None

    def add(
        self,
        transaction_id: int,
        principal_amount: Decimal,
        total_interest: Decimal,
        monthly_installment: Decimal,
        start_date: datetime,
        due_date_day: int,
        tenor_months: int,
    ) -> CreditContract:
        contract_id = self._insert(
            """
            INSERT INTO credit_contracts
                (transaction_id, principal_amount, total_interest, monthly_installment,
                 start_date, due_date_day, tenor_months)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            transaction_id, to_money(principal_amount), to_money(total_interest),
            to_money(monthly_installment), start_date, due_date_day, tenor_months,
        )
        return self.get(contract_id)

    def list_by_transaction_status(self, status: TransactionStatus) -> list[CreditContract]:
        columns = ", ".join(f"c.{col.strip()}" for col in _CONTRACT_COLUMNS.split(","))
        rows = self._fetch_all(
            f"""
            SELECT {columns}
            FROM credit_contracts c
            JOIN transactions t ON t.id = c.transaction_id
            WHERE t.status = ?
            ORDER BY c.start_date DESC, c.id DESC
            """,
            status.value,
        )
        return [_to_contract(row) for row in rows]


def _to_transaction(row: dict[str, Any]) -> Transaction:
    return Transaction(
        id=row["id"],
        customer_id=row["customer_id"],
        product_id=row["product_id"],
        customer_name=row["customer_name"],
        customer_phone=row["customer_phone"],
        customer_nik=row["customer_nik"],
        total_price=as_decimal(row["total_price"]),
        dp_amount=as_decimal(row["dp_amount"]),
        scheme_snapshot=SchemeSnapshot.model_validate_json(row["scheme_snapshot"]),
        status=row["status"],
        created_at=as_datetime(row["created_at"]),
    )


def _to_contract(row: dict[str, Any]) -> CreditContract:
    return CreditContract(
        id=row["id"],
        transaction_id=row["transaction_id"],
        principal_amount=as_decimal(row["principal_amount"]),
        total_interest=as_decimal(row["total_interest"]),
        monthly_installment=as_decimal(row["monthly_installment"]),
        start_date=as_datetime(row["start_date"]),
        due_date_day=row["due_date_day"],
        tenor_months=row["tenor_months"],
    )
