from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.db.connection import DatabasePool
from app.db.unit_of_work import sql_unit_of_work_factory
from app.main import create_app
from app.models.customer import CustomerCreate
from app.models.product import ProductCategory, ProductCreate
from app.services.credit_service import CreditService
from app.services.payment_service import PaymentService

# Jan 31 so the first installment exercises month-end clamping
FIXED_NOW = datetime(2025, 1, 31, 10, 30, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_DIALECT="sqlite",
        SQLITE_PATH=str(tmp_path / "ledger.db"),
        LOG_LEVEL="WARNING",
        _env_file=None,
    )


@pytest.fixture
def pool(settings):
    pool = DatabasePool(settings)
    pool.initialize()
    yield pool
    pool.close()


@pytest.fixture
def uow_factory(pool):
    return sql_unit_of_work_factory(pool)


@pytest.fixture
def seeded(uow_factory) -> dict:
    """One 2%/month scheme, one TV in stock (5 units) and one customer."""
    with uow_factory() as uow:
        scheme = uow.schemes.add(
            name="Flat 2%",
            interest_rate=Decimal("2"),
            min_dp_percent=Decimal("10"),
            tenor_options=[3, 6, 9, 12],
            penalty_fee_daily=Decimal("5000"),
        )
        inactive_scheme = uow.schemes.add(
            name="Old Promo",
            interest_rate=Decimal("1.5"),
            min_dp_percent=Decimal("20"),
            tenor_options=[6],
            is_active=False,
        )
        product = uow.products.add(
            ProductCreate(
                sku="ELK-TV-043",
                name="LED TV 43 inch",
                base_price=Decimal("4500000"),
                stock_qty=5,
                category=ProductCategory.ELECTRONIC,
                sub_category="TV",
                attributes={"brand": "Polytron"},
            ),
            created_at=FIXED_NOW,
        )
        customer = uow.customers.add(
            CustomerCreate(
                nik="3201010101010001",
                name="Siti Rahayu",
                phone="081234567890",
                address="Jl. Merdeka No. 10, Bandung",
            ),
            created_at=FIXED_NOW,
        )
        uow.commit()
    return {
        "scheme": scheme,
        "inactive_scheme": inactive_scheme,
        "product": product,
        "customer": customer,
    }


@pytest.fixture
def credit_service(uow_factory) -> CreditService:
    return CreditService(uow_factory, clock=fixed_clock)


@pytest.fixture
def payment_service(uow_factory) -> PaymentService:
    return PaymentService(uow_factory, clock=fixed_clock)


@pytest.fixture
def client(settings, pool):
    app = create_app(settings)
    with TestClient(app) as c:
        yield c
