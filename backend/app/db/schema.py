"""SQLite DDL for local databases and tests.

Money columns are TEXT so values round-trip as exact decimals. The SQL Server
deployment uses the same table and column names with DECIMAL(19,4) money,
DATE/DATETIME2 timestamps and IDENTITY keys.
"""

SQLITE_SCHEMA = """
CREATE TABLE IF NOT EXISTS loan_schemes (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    name                TEXT    NOT NULL,
    interest_rate       TEXT    NOT NULL,
    min_dp_percent      TEXT    NOT NULL,
    tenor_options       TEXT    NOT NULL,
    penalty_fee_daily   TEXT    NOT NULL DEFAULT '0',
    is_active           INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS products (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    sku                 TEXT    NOT NULL UNIQUE,
    name                TEXT    NOT NULL,
    base_price          TEXT    NOT NULL,
    stock_qty           INTEGER NOT NULL CHECK (stock_qty >= 0),
    category            TEXT    NOT NULL,
    sub_category        TEXT    NOT NULL,
    attributes          TEXT    NOT NULL DEFAULT '{}',
    is_active           INTEGER NOT NULL DEFAULT 1,
    created_at          TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS customers (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    nik                 TEXT    NOT NULL UNIQUE,
    name                TEXT    NOT NULL,
    phone               TEXT    NOT NULL UNIQUE,
    address             TEXT    NOT NULL,
    created_at          TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS transactions (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    customer_id         INTEGER NOT NULL REFERENCES customers (id),
    product_id          INTEGER NOT NULL REFERENCES products (id),
    customer_name       TEXT    NOT NULL,
    customer_phone      TEXT    NOT NULL,
    customer_nik        TEXT    NOT NULL,
    total_price         TEXT    NOT NULL,
    dp_amount           TEXT    NOT NULL,
    scheme_snapshot     TEXT    NOT NULL,
    status              TEXT    NOT NULL,
    created_at          TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS credit_contracts (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    transaction_id      INTEGER NOT NULL UNIQUE REFERENCES transactions (id),
    principal_amount    TEXT    NOT NULL,
    total_interest      TEXT    NOT NULL,
    monthly_installment TEXT    NOT NULL,
    start_date          TEXT    NOT NULL,
    due_date_day        INTEGER NOT NULL CHECK (due_date_day BETWEEN 1 AND 28),
    tenor_months        INTEGER NOT NULL CHECK (tenor_months > 0)
);

CREATE TABLE IF NOT EXISTS installments (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    contract_id         INTEGER NOT NULL REFERENCES credit_contracts (id),
    installment_nth     INTEGER NOT NULL,
    due_date            TEXT    NOT NULL,
    amount_due          TEXT    NOT NULL,
    amount_paid         TEXT    NOT NULL DEFAULT '0',
    penalty_accrued     TEXT    NOT NULL DEFAULT '0',
    penalty_paid        TEXT    NOT NULL DEFAULT '0',
    status              TEXT    NOT NULL,
    paid_at             TEXT,
    UNIQUE (contract_id, installment_nth)
);

CREATE INDEX IF NOT EXISTS ix_transactions_customer ON transactions (customer_id);
CREATE INDEX IF NOT EXISTS ix_installments_contract ON installments (contract_id);
"""
