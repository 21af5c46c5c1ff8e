"""Unit of work: one explicit storage transaction per service call.

Services open a unit of work, use its repositories, and call ``commit()``.
Leaving the ``with`` block without committing rolls everything back, so an
exception anywhere in the block leaves no partial rows behind.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from app.db.connection import DatabasePool
from app.db.queries.customers import CustomerRepository
from app.db.queries.installments import InstallmentRepository
from app.db.queries.products import ProductRepository
from app.db.queries.schemes import SchemeRepository
from app.db.queries.transactions import ContractRepository, TransactionRepository
from app.errors import InternalError


class UnitOfWork(ABC):
    schemes: SchemeRepository
    products: ProductRepository
    customers: CustomerRepository
    transactions: TransactionRepository
    contracts: ContractRepository
    installments: InstallmentRepository

    # Driver exceptions surfaced to callers as InternalError
    storage_errors: tuple[type[Exception], ...] = ()

    def __init__(self) -> None:
        self._committed = False
        self._read_only = False

    def __enter__(self) -> "UnitOfWork":
        self.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if not self._committed:
                self.rollback()
        finally:
            self.close()
        if exc is not None and isinstance(exc, self.storage_errors):
            raise InternalError(f"Storage failure: {exc}") from exc

    @abstractmethod
    def begin(self) -> None: ...

    def commit(self) -> None:
        if self._read_only:
            raise InternalError("Cannot commit a read-only unit of work")
        self._commit()
        self._committed = True

    @abstractmethod
    def _commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...

    def close(self) -> None:
        pass


class SqlUnitOfWork(UnitOfWork):
    """Unit of work over a single DB-API connection from the pool.

    ``read_only`` skips the dialect's begin statement, so on SQLite lookups
    such as simulations do not take the write lock held by sales and payments.
    """

    def __init__(self, pool: DatabasePool, read_only: bool = False) -> None:
        super().__init__()
        self._pool = pool
        self._read_only = read_only
        self._conn = None
        self.storage_errors = pool.driver_errors

    def begin(self) -> None:
        self._conn = self._pool.get_connection()
        dialect = self._pool.dialect
        if dialect.begin_statement and not self._read_only:
            try:
                self._conn.execute(dialect.begin_statement)
            except self.storage_errors as e:
                self.close()
                raise InternalError(f"Could not start a transaction: {e}") from e
        self.schemes = SchemeRepository(self._conn, dialect)
        self.products = ProductRepository(self._conn, dialect)
        self.customers = CustomerRepository(self._conn, dialect)
        self.transactions = TransactionRepository(self._conn, dialect)
        self.contracts = ContractRepository(self._conn, dialect)
        self.installments = InstallmentRepository(self._conn, dialect)

    def _commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        if self._conn is not None:
            self._conn.rollback()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None


def sql_unit_of_work_factory(pool: DatabasePool) -> Callable[..., UnitOfWork]:
    return lambda read_only=False: SqlUnitOfWork(pool, read_only=read_only)
