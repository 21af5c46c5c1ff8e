"""Shared plumbing for the repository classes.

Rows come back as plain tuples from both sqlite3 and pyodbc; they are mapped
to dicts through ``cursor.description`` and converted explicitly, since SQLite
hands back text where SQL Server hands back Decimal/date objects.
"""
from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from app.db.connection import Dialect

MONEY_PLACES = Decimal("0.0001")


class Repository:
    def __init__(self, conn, dialect: Dialect):
        self._conn = conn
        self._dialect = dialect

    def _execute(self, query: str, *params: Any):
        cursor = self._conn.cursor()
        cursor.execute(query, params)
        return cursor

    def _fetch_one(self, query: str, *params: Any) -> Optional[dict[str, Any]]:
        cursor = self._execute(query, *params)
        row = cursor.fetchone()
        if row is None:
            return None
        return _as_dict(cursor, row)

    def _fetch_all(self, query: str, *params: Any, limit: Optional[int] = None) -> list[dict[str, Any]]:
        cursor = self._execute(query, *params)
        rows = cursor.fetchmany(limit) if limit is not None else cursor.fetchall()
        return [_as_dict(cursor, row) for row in rows]

    def _insert(self, query: str, *params: Any) -> int:
        """Run an INSERT and return the generated identity."""
        cursor = self._execute(query, *params)
        cursor.execute(self._dialect.last_insert_id_query)
        return int(cursor.fetchone()[0])

    def _update(self, query: str, *params: Any) -> int:
        """Run an UPDATE and return the affected row count."""
        return self._execute(query, *params).rowcount


def _as_dict(cursor, row) -> dict[str, Any]:
    columns = [desc[0].lower() for desc in cursor.description]
    return dict(zip(columns, row))


def to_money(value: Decimal) -> Decimal:
    """Quantize a money value to the stored scale."""
    return value.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def as_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def as_datetime(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
