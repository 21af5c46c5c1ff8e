"""Catalog service: loan schemes and product inventory."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from app.db.unit_of_work import UnitOfWork
from app.errors import DuplicateError, ProductNotFoundError
from app.logging import ledger_extra
from app.models.product import Product, ProductCreate
from app.models.scheme import LoanScheme
from app.services.credit_service import utc_now

logger = logging.getLogger(__name__)


class CatalogService:
    def __init__(
        self,
        uow_factory: Callable[..., UnitOfWork],
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._uow_factory = uow_factory
        self._clock = clock or utc_now

    def list_schemes(self) -> list[LoanScheme]:
        with self._uow_factory(read_only=True) as uow:
            return uow.schemes.list_active()

    def list_products(
        self,
        category: Optional[str] = None,
        sub_category: Optional[str] = None,
    ) -> list[Product]:
        with self._uow_factory(read_only=True) as uow:
            products = uow.products.list_active(category, sub_category)
        logger.debug("Returned %d products (category=%s, sub_category=%s)",
                     len(products), category, sub_category)
        return products

    def create_product(self, product: ProductCreate) -> Product:
        return self.import_products([product])[0]

    def import_products(self, products: list[ProductCreate]) -> list[Product]:
        """Create several products at once; a duplicate SKU rejects the whole batch."""
        seen: set[str] = set()
        for product in products:
            if product.sku in seen:
                raise DuplicateError(f'Product with SKU "{product.sku}" appears more than once')
            seen.add(product.sku)

        with self._uow_factory() as uow:
            created = []
            now = self._clock()
            for product in products:
                if uow.products.get_by_sku(product.sku) is not None:
                    raise DuplicateError(f'Product with SKU "{product.sku}" already exists')
                created.append(uow.products.add(product, created_at=now))
            uow.commit()

        logger.info("Created %d product(s): %s", len(created), ", ".join(p.sku for p in created))
        return created

    def restock_product(self, product_id: int, quantity_to_add: int) -> Product:
        with self._uow_factory() as uow:
            if not uow.products.restock(product_id, quantity_to_add):
                raise ProductNotFoundError(f"Product with ID {product_id} not found")
            product = uow.products.get(product_id)
            uow.commit()

        logger.info("Restocked %s by %d, stock now %d", product.sku, quantity_to_add, product.stock_qty,
                    extra=ledger_extra(product_sku=product.sku))
        return product
