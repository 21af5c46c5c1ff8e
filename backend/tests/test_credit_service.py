"""Tests for CreditService: simulation lookups and atomic transaction creation."""
from datetime import date
from decimal import Decimal

import pytest

from app.errors import (
    CustomerNotFoundError,
    InsufficientDownPaymentError,
    InvalidTenorError,
    OutOfStockError,
    ProductInactiveError,
    ProductNotFoundError,
    SchemeInactiveError,
    SchemeNotFoundError,
    ValidationError,
)
from app.db.queries.products import ProductRepository
from app.models.product import ProductCategory, ProductCreate
from app.models.simulation import CreateTransactionRequest, SimulationRequest
from app.models.transaction import InstallmentStatus, TransactionStatus


def _count(pool, table: str) -> int:
    conn = pool.get_connection()
    try:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
    finally:
        conn.close()


def _stock(uow_factory, product_id: int) -> int:
    with uow_factory() as uow:
        return uow.products.get(product_id).stock_qty


def _request(seeded, **overrides) -> CreateTransactionRequest:
    defaults = dict(
        price=Decimal("4500000"),
        dp=Decimal("500000"),
        scheme_id=seeded["scheme"].id,
        tenor_months=6,
        product_id=seeded["product"].id,
        customer_id=seeded["customer"].id,
        due_date_day=15,
    )
    defaults.update(overrides)
    return CreateTransactionRequest(**defaults)


def _rows_written(pool) -> tuple[int, int, int]:
    return (
        _count(pool, "transactions"),
        _count(pool, "credit_contracts"),
        _count(pool, "installments"),
    )


class TestSimulate:
    def test_simulate_uses_stored_scheme(self, credit_service, seeded):
        result = credit_service.simulate(SimulationRequest(
            price=Decimal("4500000"), dp=Decimal("500000"),
            scheme_id=seeded["scheme"].id, tenor_months=6,
        ))
        assert result.raw.monthly_installment == Decimal("746667")
        assert result.scheme.id == seeded["scheme"].id

    def test_simulate_persists_nothing(self, credit_service, seeded, pool):
        credit_service.simulate(SimulationRequest(
            price=Decimal("4500000"), dp=Decimal("500000"),
            scheme_id=seeded["scheme"].id, tenor_months=6,
        ))
        assert _rows_written(pool) == (0, 0, 0)

    def test_simulate_runs_while_a_sale_holds_the_write_lock(self, credit_service, seeded, uow_factory):
        with uow_factory() as writer:
            writer.products.restock(seeded["product"].id, 1)
            result = credit_service.simulate(SimulationRequest(
                price=Decimal("4500000"), dp=Decimal("500000"),
                scheme_id=seeded["scheme"].id, tenor_months=6,
            ))
            writer.commit()
        assert result.raw.monthly_installment == Decimal("746667")

    def test_unknown_scheme(self, credit_service, seeded):
        with pytest.raises(SchemeNotFoundError, match="999"):
            credit_service.simulate(SimulationRequest(
                price=Decimal("4500000"), dp=Decimal("500000"), scheme_id=999, tenor_months=6,
            ))

    def test_inactive_scheme(self, credit_service, seeded):
        with pytest.raises(SchemeInactiveError):
            credit_service.simulate(SimulationRequest(
                price=Decimal("4500000"), dp=Decimal("1000000"),
                scheme_id=seeded["inactive_scheme"].id, tenor_months=6,
            ))


class TestCreateTransaction:
    def test_writes_transaction_contract_and_schedule(self, credit_service, seeded, uow_factory, now):
        receipt = credit_service.create_transaction(_request(seeded))

        assert receipt.transaction.status == TransactionStatus.ACTIVE
        assert receipt.transaction.total_price == Decimal("4500000")
        assert receipt.transaction.dp_amount == Decimal("500000")
        assert receipt.transaction.customer_name == "Siti Rahayu"
        assert receipt.transaction.customer_nik == "3201010101010001"
        assert receipt.transaction.created_at == now

        contract = receipt.contract
        assert contract.transaction_id == receipt.transaction.id
        assert contract.principal_amount == Decimal("4000000")
        assert contract.total_interest == Decimal("480000")
        assert contract.monthly_installment == Decimal("746667")
        assert contract.tenor_months == 6
        assert contract.due_date_day == 15

        with uow_factory() as uow:
            stored = uow.installments.list_by_contract(contract.id)
        assert [i.installment_nth for i in stored] == [1, 2, 3, 4, 5, 6]
        assert all(i.status == InstallmentStatus.UNPAID for i in stored)
        assert all(i.amount_paid == 0 for i in stored)
        assert sum(i.amount_due for i in stored) >= contract.principal_amount + contract.total_interest

    def test_schedule_starts_month_after_sale(self, credit_service, seeded):
        receipt = credit_service.create_transaction(_request(seeded))
        assert [i.due_date for i in receipt.installments] == [
            date(2025, 2, 15), date(2025, 3, 15), date(2025, 4, 15),
            date(2025, 5, 15), date(2025, 6, 15), date(2025, 7, 15),
        ]

    def test_sale_on_month_end_keeps_february(self, credit_service, seeded):
        receipt = credit_service.create_transaction(_request(seeded, due_date_day=28, tenor_months=3))
        assert [i.due_date for i in receipt.installments] == [
            date(2025, 2, 28), date(2025, 3, 28), date(2025, 4, 28),
        ]

    def test_decrements_stock_by_one(self, credit_service, seeded, uow_factory):
        receipt = credit_service.create_transaction(_request(seeded))
        assert receipt.product.remaining_stock == 4
        assert _stock(uow_factory, seeded["product"].id) == 4

    def test_snapshot_matches_scheme_at_sale(self, credit_service, seeded):
        receipt = credit_service.create_transaction(_request(seeded))
        snapshot = receipt.transaction.scheme_snapshot
        assert snapshot.kind == "loan_scheme"
        assert snapshot.version == 1
        assert snapshot.scheme_id == seeded["scheme"].id
        assert snapshot.interest_rate == Decimal("2")
        assert snapshot.tenor_options == (3, 6, 9, 12)

    def test_snapshot_survives_scheme_edit(self, credit_service, seeded, uow_factory, pool):
        receipt = credit_service.create_transaction(_request(seeded))

        conn = pool.get_connection()
        try:
            conn.execute(
                "UPDATE loan_schemes SET interest_rate = ?, tenor_options = ? WHERE id = ?",
                ("5", "[12, 24]", seeded["scheme"].id),
            )
        finally:
            conn.close()

        with uow_factory() as uow:
            transaction = uow.transactions.get(receipt.transaction.id)
            contract = uow.contracts.get(receipt.contract.id)
            assert uow.schemes.get(seeded["scheme"].id).interest_rate == Decimal("5")
        assert transaction.scheme_snapshot.interest_rate == Decimal("2")
        assert transaction.scheme_snapshot.tenor_options == (3, 6, 9, 12)
        assert contract.monthly_installment == Decimal("746667")

    def test_sells_until_stock_is_gone(self, credit_service, seeded, uow_factory):
        for _ in range(5):
            credit_service.create_transaction(_request(seeded))
        assert _stock(uow_factory, seeded["product"].id) == 0

        with pytest.raises(OutOfStockError):
            credit_service.create_transaction(_request(seeded))
        assert _stock(uow_factory, seeded["product"].id) == 0

    def test_out_of_stock_writes_nothing(self, credit_service, seeded, uow_factory, pool, now):
        with uow_factory() as uow:
            empty = uow.products.add(
                ProductCreate(
                    sku="FRN-CHR-001",
                    name="Office Chair",
                    base_price=Decimal("900000"),
                    stock_qty=0,
                    category=ProductCategory.FURNITURE,
                    sub_category="Chair",
                ),
                created_at=now,
            )
            uow.commit()

        with pytest.raises(OutOfStockError):
            credit_service.create_transaction(_request(
                seeded, product_id=empty.id, price=Decimal("900000"), dp=Decimal("100000"),
            ))
        assert _rows_written(pool) == (0, 0, 0)
        assert _stock(uow_factory, empty.id) == 0

    def test_stock_lost_after_rows_written_rolls_back(self, credit_service, seeded, uow_factory,
                                                      pool, monkeypatch):
        # Another till sold the last unit between the stock check and the decrement
        monkeypatch.setattr(ProductRepository, "decrement_stock", lambda self, product_id: False)

        with pytest.raises(OutOfStockError):
            credit_service.create_transaction(_request(seeded))
        assert _rows_written(pool) == (0, 0, 0)
        assert _stock(uow_factory, seeded["product"].id) == 5

    def test_unknown_product(self, credit_service, seeded):
        with pytest.raises(ProductNotFoundError):
            credit_service.create_transaction(_request(seeded, product_id=999))

    def test_unknown_customer(self, credit_service, seeded):
        with pytest.raises(CustomerNotFoundError):
            credit_service.create_transaction(_request(seeded, customer_id=999))

    def test_unknown_scheme(self, credit_service, seeded):
        with pytest.raises(SchemeNotFoundError):
            credit_service.create_transaction(_request(seeded, scheme_id=999))

    def test_inactive_product(self, credit_service, seeded, pool):
        conn = pool.get_connection()
        try:
            conn.execute("UPDATE products SET is_active = 0 WHERE id = ?", (seeded["product"].id,))
        finally:
            conn.close()

        with pytest.raises(ProductInactiveError):
            credit_service.create_transaction(_request(seeded))

    @pytest.mark.parametrize("overrides, error", [
        ({"tenor_months": 7}, InvalidTenorError),
        ({"dp": Decimal("100000")}, InsufficientDownPaymentError),
        ({"due_date_day": 31}, ValidationError),
        ({"due_date_day": 0}, ValidationError),
    ])
    def test_rejected_terms_leave_no_trace(self, credit_service, seeded, uow_factory, pool,
                                           overrides, error):
        with pytest.raises(error):
            credit_service.create_transaction(_request(seeded, **overrides))
        assert _rows_written(pool) == (0, 0, 0)
        assert _stock(uow_factory, seeded["product"].id) == 5

    def test_inactive_scheme_leaves_no_trace(self, credit_service, seeded, uow_factory, pool):
        with pytest.raises(SchemeInactiveError):
            credit_service.create_transaction(_request(
                seeded, scheme_id=seeded["inactive_scheme"].id, dp=Decimal("1000000"),
            ))
        assert _rows_written(pool) == (0, 0, 0)
        assert _stock(uow_factory, seeded["product"].id) == 5

    def test_client_price_is_not_checked_against_catalog(self, credit_service, seeded):
        # The declared price drives the contract; the catalog price is only a default
        receipt = credit_service.create_transaction(_request(
            seeded, price=Decimal("4000000"), dp=Decimal("400000"),
        ))
        assert receipt.transaction.total_price == Decimal("4000000")
        assert receipt.contract.principal_amount == Decimal("3600000")
