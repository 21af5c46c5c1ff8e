from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from app.db.queries.base import Repository, as_date, as_datetime, as_decimal, to_money
from app.models.transaction import Installment, InstallmentStatus

_COLUMNS = (
    "id, contract_id, installment_nth, due_date, amount_due, amount_paid, "
    "penalty_accrued, penalty_paid, status, paid_at"
)


class InstallmentRepository(Repository):
    def get(self, installment_id: int) -> Optional[Installment]:
        row = self._fetch_one(f"SELECT {_COLUMNS} FROM installments WHERE id = ?", installment_id)
        return _to_installment(row) if row else None

    def list_by_contract(self, contract_id: int) -> list[Installment]:
        rows = self._fetch_all(
            f"SELECT {_COLUMNS} FROM installments WHERE contract_id = ? ORDER BY installment_nth",
            contract_id,
        )
        return [_to_installment(row) for row in rows]

    def add(self, contract_id: int, installment_nth: int, due_date: date, amount_due: Decimal) -> Installment:
        installment_id = self._insert(
            """
            INSERT INTO installments
                (contract_id, installment_nth, due_date, amount_due, amount_paid,
                 penalty_accrued, penalty_paid, status)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            contract_id, installment_nth, due_date, to_money(amount_due),
            to_money(Decimal("0")), to_money(Decimal("0")), to_money(Decimal("0")),
            InstallmentStatus.UNPAID.value,
        )
        return self.get(installment_id)

    def mark_paid(self, installment_id: int, paid_at: datetime) -> bool:
        """Settle an installment in full.

        Guarded on the current status so that of two concurrent payments only
        one updates the row. Returns False if it was already paid.
        """
        updated = self._update(
            """
            UPDATE installments
            SET status = ?, amount_paid = amount_due, paid_at = ?
            WHERE id = ? AND status <> ?
            """,
            InstallmentStatus.PAID.value, paid_at, installment_id, InstallmentStatus.PAID.value,
        )
        return updated == 1

    def count_unpaid(self, contract_id: int) -> int:
        row = self._fetch_one(
            "SELECT COUNT(*) AS open_count FROM installments WHERE contract_id = ? AND status <> ?",
            contract_id, InstallmentStatus.PAID.value,
        )
        return int(row["open_count"])


def _to_installment(row: dict[str, Any]) -> Installment:
    return Installment(
        id=row["id"],
        contract_id=row["contract_id"],
        installment_nth=row["installment_nth"],
        due_date=as_date(row["due_date"]),
        amount_due=as_decimal(row["amount_due"]),
        amount_paid=as_decimal(row["amount_paid"]),
        penalty_accrued=as_decimal(row["penalty_accrued"]),
        penalty_paid=as_decimal(row["penalty_paid"]),
        status=row["status"],
        paid_at=as_datetime(row["paid_at"]),
    )
