#!/usr/bin/env python3
"""Seed loan schemes and products into the configured database.

Usage:
    cd backend && python scripts/seed_data.py                       # scripts/seed_data.json
    cd backend && python scripts/seed_data.py --file my_seed.json

Schemes whose name already exists and products whose SKU already exists are
skipped, so the script can be re-run against a seeded database.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(BACKEND_DIR))

from app.config import settings  # noqa: E402
from app.db.connection import DatabasePool  # noqa: E402
from app.db.unit_of_work import SqlUnitOfWork  # noqa: E402
from app.models.product import ProductCreate  # noqa: E402

DEFAULT_SEED = Path(__file__).resolve().parent / "seed_data.json"

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def seed(pool: DatabasePool, data: dict) -> None:
    with SqlUnitOfWork(pool) as uow:
        for s in data.get("loan_schemes", []):
            if uow.schemes.get_by_name(s["name"]) is not None:
                logger.info("Scheme %s already exists, skipped", s["name"])
                continue
            scheme = uow.schemes.add(
                name=s["name"],
                interest_rate=Decimal(str(s["interest_rate_flat"])),
                min_dp_percent=Decimal(str(s["min_dp_percent"])),
                tenor_options=[int(t) for t in s["tenor_options"]],
                penalty_fee_daily=Decimal(str(s.get("penalty_fee_daily", 0))),
            )
            logger.info("Scheme created: %s (id %d)", scheme.name, scheme.id)

        for p in data.get("products", []):
            product = ProductCreate(**p)
            if uow.products.get_by_sku(product.sku) is not None:
                logger.info("Product %s already exists, skipped", product.sku)
                continue
            created = uow.products.add(product, created_at=datetime.now(timezone.utc))
            logger.info("Product created: %s - %s", created.sku, created.name)

        uow.commit()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed loan schemes and products")
    parser.add_argument("--file", type=Path, default=DEFAULT_SEED, help="Seed JSON file")
    args = parser.parse_args()

    data = json.loads(args.file.read_text(encoding="utf-8"))

    pool = DatabasePool(settings)
    pool.initialize()
    try:
        seed(pool, data)
    finally:
        pool.close()
    logger.info("Seeding finished.")


if __name__ == "__main__":
    main()
