from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class ProductCategory(str, Enum):
    ELECTRONIC = "ELECTRONIC"
    FURNITURE = "FURNITURE"
    VEHICLE = "VEHICLE"


# Sub-categories offered by the POS product form
PRODUCT_TYPES: dict[ProductCategory, list[str]] = {
    ProductCategory.ELECTRONIC: ["Refrigerator", "TV", "Laptop", "Speaker", "Washing Machine", "Other"],
    ProductCategory.FURNITURE: ["Spring Bed", "Table", "Chair", "Wardrobe", "Bed Sheet", "Other"],
    ProductCategory.VEHICLE: ["Motorcycle", "Car", "Electric Bicycle", "Other"],
}


class Product(BaseModel):
    id: int
    sku: str
    name: str
    base_price: Decimal
    stock_qty: int = Field(ge=0)
    category: ProductCategory
    sub_category: str
    attributes: dict[str, Any] = {}
    is_active: bool = True
    created_at: Optional[datetime] = None


class ProductCreate(BaseModel):
    sku: str = Field(min_length=3)
    name: str = Field(min_length=2)
    base_price: Decimal = Field(gt=0, max_digits=19, decimal_places=4)
    stock_qty: int = Field(ge=0)
    category: ProductCategory
    sub_category: str = Field(min_length=2)
    attributes: dict[str, Any] = Field(default_factory=dict)


class RestockRequest(BaseModel):
    quantity_to_add: int = Field(gt=0)


class ProductImportResult(BaseModel):
    imported: int
    products: list[Product]
