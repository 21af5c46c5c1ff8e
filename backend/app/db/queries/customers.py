from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from app.db.queries.base import Repository, as_datetime
from app.models.customer import Customer, CustomerCreate

_COLUMNS = "id, nik, name, phone, address, created_at"


class CustomerRepository(Repository):
    def get(self, customer_id: int) -> Optional[Customer]:
        row = self._fetch_one(f"SELECT {_COLUMNS} FROM customers WHERE id = ?", customer_id)
        return _to_customer(row) if row else None

    def get_by_nik(self, nik: str) -> Optional[Customer]:
        row = self._fetch_one(f"SELECT {_COLUMNS} FROM customers WHERE nik = ?", nik)
        return _to_customer(row) if row else None

    def get_by_phone(self, phone: str) -> Optional[Customer]:
        row = self._fetch_one(f"SELECT {_COLUMNS} FROM customers WHERE phone = ?", phone)
        return _to_customer(row) if row else None

    def add(self, customer: CustomerCreate, created_at: datetime) -> Customer:
        customer_id = self._insert(
            "INSERT INTO customers (nik, name, phone, address, created_at) VALUES (?, ?, ?, ?, ?)",
            customer.nik, customer.name, customer.phone, customer.address, created_at,
        )
        return self.get(customer_id)

    def search(self, query: str, limit: int = 10) -> list[Customer]:
        """Name (case-insensitive), phone or NIK containing ``query``."""
        pattern = f"%{query.lower()}%"
        rows = self._fetch_all(
            f"""
            SELECT {_COLUMNS} FROM customers
            WHERE LOWER(name) LIKE ? OR phone LIKE ? OR nik LIKE ?
            ORDER BY name
            """,
            pattern, pattern, pattern,
            limit=limit,
        )
        return [_to_customer(row) for row in rows]


def _to_customer(row: dict[str, Any]) -> Customer:
    return Customer(
        id=row["id"],
        nik=row["nik"],
        name=row["name"],
        phone=row["phone"],
        address=row["address"],
        created_at=as_datetime(row["created_at"]),
    )
