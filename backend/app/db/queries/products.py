from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional

from app.db.queries.base import Repository, as_datetime, as_decimal, to_money
from app.models.product import Product, ProductCreate

_COLUMNS = (
    "id, sku, name, base_price, stock_qty, category, sub_category, "
    "attributes, is_active, created_at"
)


class ProductRepository(Repository):
    def get(self, product_id: int) -> Optional[Product]:
        row = self._fetch_one(f"SELECT {_COLUMNS} FROM products WHERE id = ?", product_id)
        return _to_product(row) if row else None

    def get_by_sku(self, sku: str) -> Optional[Product]:
        row = self._fetch_one(f"SELECT {_COLUMNS} FROM products WHERE sku = ?", sku)
        return _to_product(row) if row else None

    def list_active(
        self,
        category: Optional[str] = None,
        sub_category: Optional[str] = None,
    ) -> list[Product]:
        query = f"SELECT {_COLUMNS} FROM products WHERE is_active = 1"
        params: list[Any] = []
        if category:
            query += " AND category = ?"
            params.append(category)
        if sub_category:
            query += " AND sub_category = ?"
            params.append(sub_category)
        query += " ORDER BY name"
        return [_to_product(row) for row in self._fetch_all(query, *params)]

    def add(self, product: ProductCreate, created_at: datetime) -> Product:
        product_id = self._insert(
            """
            INSERT INTO products
                (sku, name, base_price, stock_qty, category, sub_category,
                 attributes, is_active, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, 1, ?)
            """,
            product.sku, product.name, to_money(product.base_price), product.stock_qty,
            product.category.value, product.sub_category,
            json.dumps(product.attributes, default=str), created_at,
        )
        return self.get(product_id)

    def decrement_stock(self, product_id: int) -> bool:
        """Take one unit out of stock.

        The stock check lives in the UPDATE itself, so two concurrent sales of
        the last unit cannot both succeed. Returns False when nothing was left.
        """
        updated = self._update(
            "UPDATE products SET stock_qty = stock_qty - 1 WHERE id = ? AND stock_qty > 0",
            product_id,
        )
        return updated == 1

    def restock(self, product_id: int, quantity: int) -> bool:
        updated = self._update(
            "UPDATE products SET stock_qty = stock_qty + ? WHERE id = ?",
            quantity, product_id,
        )
        return updated == 1


def _to_product(row: dict[str, Any]) -> Product:
    return Product(
        id=row["id"],
        sku=row["sku"],
        name=row["name"],
        base_price=as_decimal(row["base_price"]),
        stock_qty=row["stock_qty"],
        category=row["category"],
        sub_category=row["sub_category"],
        attributes=json.loads(row["attributes"] or "{}"),
        is_active=bool(row["is_active"]),
        created_at=as_datetime(row["created_at"]),
    )
