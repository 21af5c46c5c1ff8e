"""Parse an uploaded Excel stock sheet into new products.

Column matching is flexible (partial, case-insensitive) so sheets exported by
suppliers or kept by hand in either English or Indonesian headings load
without remapping. Columns that are not recognised are kept per product as
free-form attributes.
"""
from __future__ import annotations

import logging
import re
from decimal import Decimal, InvalidOperation
from io import BytesIO
from typing import Any, BinaryIO

import pandas as pd
import pydantic

from app.models.product import ProductCategory, ProductCreate

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Column matching helpers
# ---------------------------------------------------------------------------
_COLUMN_PATTERNS: dict[str, list[str]] = {
    "sku": ["sku", "kode barang", "item code", "code"],
    "name": ["product name", "nama barang", "nama", "name"],
    "price": ["base price", "harga", "price"],
    "stock": ["stock qty", "stok", "stock", "qty", "quantity"],
    "sub_category": ["sub.?categor", "sub.?kategori", "jenis", "type"],
    "category": ["^categor", "^kategori"],
}

_CATEGORY_ALIASES: dict[str, ProductCategory] = {
    "elektronik": ProductCategory.ELECTRONIC,
    "furnitur": ProductCategory.FURNITURE,
    "kendaraan": ProductCategory.VEHICLE,
}


def _find_column(columns: list[str], key: str, taken: set[str]) -> str | None:
    """Find a column name by partial case-insensitive match.

    Patterns are tried in order (most specific first). A pattern containing
    regex metacharacters is treated as a regex; otherwise plain substring
    matching is used. Columns already claimed by another key are skipped.
    """
    patterns = _COLUMN_PATTERNS.get(key, [key])
    col_lower = {c: c.lower().strip() for c in columns if c not in taken}
    for pattern in patterns:
        pat = pattern.lower()
        if any(ch in pat for ch in ("*", "+", "?", "\\", "^", "$", "|")):
            rx = re.compile(pat)
            for orig, low in col_lower.items():
                if rx.search(low):
                    return orig
        else:
            for orig, low in col_lower.items():
                if pat in low:
                    return orig
    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def parse_stock_sheet(file: BinaryIO, filename: str) -> list[ProductCreate]:
    """Parse an Excel stock sheet into ProductCreate records.

    Raises ValueError on an empty file, missing SKU/price columns, or when no
    row yields a valid product.
    """
    data = file.read()
    if not data:
        raise ValueError("Uploaded file is empty")

    df = pd.read_excel(BytesIO(data), dtype=object)
    df.columns = [str(c).strip() for c in df.columns]

    if df.empty:
        raise ValueError("Spreadsheet contains no data rows")

    # sub_category is matched before category so "Sub Category" is not taken as category
    col_map: dict[str, str | None] = {}
    taken: set[str] = set()
    for key in ("sku", "sub_category", "category", "name", "price", "stock"):
        col = _find_column(list(df.columns), key, taken)
        col_map[key] = col
        if col is not None:
            taken.add(col)

    logger.info("Stock sheet %s columns: %s", filename, list(df.columns))
    logger.info("Column mapping: %s", col_map)

    for required in ("sku", "price", "category"):
        if not col_map.get(required):
            raise ValueError(
                f"Cannot find a {required} column. Available columns: {list(df.columns)}"
            )

    extra_columns = [c for c in df.columns if c not in taken]

    products: list[ProductCreate] = []
    for idx, row in df.iterrows():
        sku = _safe_str(row, col_map["sku"])
        price = _safe_decimal(row, col_map["price"])
        category = _parse_category(_safe_str(row, col_map["category"]))
        if not sku or price is None or price <= 0 or category is None:
            logger.warning("Skipping row %s: missing SKU, price or category", idx + 2)
            continue

        attributes = {
            col: _plain(row[col]) for col in extra_columns if not _is_blank(row[col])
        }
        try:
            products.append(ProductCreate(
                sku=sku,
                name=_safe_str(row, col_map.get("name")) or sku,
                base_price=price,
                stock_qty=_safe_int(row, col_map.get("stock"), 0),
                category=category,
                sub_category=_safe_str(row, col_map.get("sub_category")) or "Other",
                attributes=attributes,
            ))
        except pydantic.ValidationError as e:
            logger.warning("Skipping row %s: %s", idx + 2, e.errors()[0]["msg"])

    if not products:
        raise ValueError("No valid products could be parsed from the file")
    return products


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------
def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and value != value:  # NaN check
        return True
    return isinstance(value, str) and not value.strip()


def _plain(value: Any) -> Any:
    if isinstance(value, (str, bool, int, float)):
        return value
    return str(value)


def _parse_category(raw: str) -> ProductCategory | None:
    value = raw.strip().lower()
    if not value:
        return None
    if value in _CATEGORY_ALIASES:
        return _CATEGORY_ALIASES[value]
    # "Electronics", "electronic", "VEHICLES" ...
    for category in ProductCategory:
        if value.rstrip("s") == category.value.lower():
            return category
    return None


def _safe_str(row, col: str | None) -> str:
    if col is None or _is_blank(row[col]):
        return ""
    value = row[col]
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _safe_decimal(row, col: str | None) -> Decimal | None:
    if col is None or _is_blank(row[col]):
        return None
    try:
        return Decimal(str(row[col]).replace(",", "").strip())
    except InvalidOperation:
        return None


def _safe_int(row, col: str | None, default: int) -> int:
    if col is None or _is_blank(row[col]):
        return default
    try:
        return int(float(row[col]))
    except (ValueError, TypeError):
        return default
