from __future__ import annotations

import logging
import sqlite3
import time
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

try:
    import pyodbc
except ImportError:
    pyodbc = None

from app.config import Settings
from app.db.schema import SQLITE_SCHEMA
from app.errors import InternalError

logger = logging.getLogger(__name__)

# sqlite3 has no native Decimal/date binding; money and dates are stored as text
sqlite3.register_adapter(Decimal, str)
sqlite3.register_adapter(date, date.isoformat)
sqlite3.register_adapter(datetime, datetime.isoformat)


@dataclass(frozen=True)
class Dialect:
    """SQL that differs between the supported backends."""
    name: str
    begin_statement: Optional[str]
    last_insert_id_query: str
    version_query: str


SQLITE = Dialect(
    name="sqlite",
    begin_statement="BEGIN IMMEDIATE",
    last_insert_id_query="SELECT last_insert_rowid()",
    version_query="SELECT sqlite_version()",
)

# pyodbc opens with autocommit off, so a transaction is already running
MSSQL = Dialect(
    name="mssql",
    begin_statement=None,
    last_insert_id_query="SELECT CAST(@@IDENTITY AS BIGINT)",
    version_query="SELECT @@VERSION",
)

_DIALECTS = {d.name: d for d in (SQLITE, MSSQL)}


class DatabasePool:
    """Hands out DB-API connections to SQLite (local/dev) or SQL Server (pyodbc)."""

    def __init__(self, settings: Settings):
        self._settings = settings
        self._initialized: bool = False
        try:
            self.dialect = _DIALECTS[settings.DATABASE_DIALECT.lower()]
        except KeyError:
            raise ValueError(
                f"Unsupported DATABASE_DIALECT '{settings.DATABASE_DIALECT}'. "
                f"Choose one of: {', '.join(_DIALECTS)}"
            ) from None

    def initialize(self):
        if self.dialect is SQLITE:
            logger.info("Database pool initialized for SQLite at %s", self._settings.SQLITE_PATH)
            self._initialized = True
            if self._settings.CREATE_SCHEMA_ON_STARTUP:
                self.create_schema()
        elif self._settings.SQLSERVER_CONN_STRING:
            logger.info("Database pool initialized with connection string")
            self._initialized = True
        else:
            logger.warning("No SQLSERVER_CONN_STRING configured, DB calls will fail")

    def create_schema(self) -> None:
        """Create the SQLite tables if they do not exist yet."""
        conn = self.get_connection()
        try:
            conn.executescript(SQLITE_SCHEMA)
        finally:
            conn.close()

    def get_connection(self, retries: int = 3, delay: float = 1.0):
        """Get a database connection with retry logic."""
        if not self._initialized:
            raise RuntimeError("Database pool not initialized")

        if self.dialect is SQLITE:
            connect = self._connect_sqlite
        else:
            if pyodbc is None:
                raise RuntimeError("pyodbc is not installed (missing ODBC driver)")
            connect = self._connect_mssql
        errors = self.driver_errors

        last_error = None
        for attempt in range(1, retries + 1):
            try:
                return connect()
            except errors as e:
                last_error = e
                logger.warning("DB connection attempt %d/%d failed: %s", attempt, retries, e)
                if attempt < retries:
                    time.sleep(delay)

        raise InternalError(f"Failed to connect after {retries} attempts: {last_error}")

    @property
    def driver_errors(self) -> tuple[type[Exception], ...]:
        """Exception classes raised by the active DB-API driver."""
        if self.dialect is SQLITE:
            return (sqlite3.Error,)
        return (pyodbc.Error,) if pyodbc is not None else ()

    def _connect_sqlite(self):
        # isolation_level=None: the unit of work issues BEGIN itself
        conn = sqlite3.connect(
            self._settings.SQLITE_PATH,
            timeout=30,
            isolation_level=None,
            check_same_thread=False,
        )
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _connect_mssql(self):
        return pyodbc.connect(self._settings.SQLSERVER_CONN_STRING, timeout=30, autocommit=False)

    def test_connection(self) -> dict:
        """Test DB connectivity and return status info."""
        if not self._initialized:
            return {"status": "not_configured", "message": "Database pool not initialized"}
        try:
            conn = self.get_connection(retries=1)
            try:
                cursor = conn.cursor()
                cursor.execute(self.dialect.version_query)
                version = cursor.fetchone()[0]
            finally:
                conn.close()
            return {"status": "connected", "dialect": self.dialect.name, "version": version}
        except Exception as e:
            return {"status": "error", "message": str(e)}

    def close(self):
        logger.info("Database pool closed")
        self._initialized = False
