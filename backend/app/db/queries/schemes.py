from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, Optional

from app.db.queries.base import Repository, as_decimal
from app.models.scheme import LoanScheme

_COLUMNS = "id, name, interest_rate, min_dp_percent, tenor_options, penalty_fee_daily, is_active"


class SchemeRepository(Repository):
    def get(self, scheme_id: int) -> Optional[LoanScheme]:
        row = self._fetch_one(f"SELECT {_COLUMNS} FROM loan_schemes WHERE id = ?", scheme_id)
        return _to_scheme(row) if row else None

    def get_by_name(self, name: str) -> Optional[LoanScheme]:
        row = self._fetch_one(f"SELECT {_COLUMNS} FROM loan_schemes WHERE name = ?", name)
        return _to_scheme(row) if row else None

    def list_active(self) -> list[LoanScheme]:
        rows = self._fetch_all(
            f"SELECT {_COLUMNS} FROM loan_schemes WHERE is_active = 1 ORDER BY name"
        )
        return [_to_scheme(row) for row in rows]

    def add(
        self,
        name: str,
        interest_rate: Decimal,
        min_dp_percent: Decimal,
        tenor_options: list[int],
        penalty_fee_daily: Decimal = Decimal("0"),
        is_active: bool = True,
    ) -> LoanScheme:
        scheme_id = self._insert(
            """
            INSERT INTO loan_schemes
                (name, interest_rate, min_dp_percent, tenor_options, penalty_fee_daily, is_active)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            name, interest_rate, min_dp_percent, json.dumps(tenor_options),
            penalty_fee_daily, is_active,
        )
        return self.get(scheme_id)


def _to_scheme(row: dict[str, Any]) -> LoanScheme:
    return LoanScheme(
        id=row["id"],
        name=row["name"],
        interest_rate=as_decimal(row["interest_rate"]),
        min_dp_percent=as_decimal(row["min_dp_percent"]),
        tenor_options=json.loads(row["tenor_options"]),
        penalty_fee_daily=as_decimal(row["penalty_fee_daily"]),
        is_active=bool(row["is_active"]),
    )
