# hyroxbox/db/init_db.py
"""
Development helper to **reset** the database schema and seed demo data.

WARNING:
    This script DROPS ALL TABLES and recreates them from scratch.
    Use only in development or in an environment where data loss is acceptable.

What it does:
    - Drop all SQLModel tables.
    - Recreate all tables.
    - Seed the demo regions and boxes from hyroxbox.db.session.

Usage:
    python -m hyroxbox.db.init_db
"""

from __future__ import annotations

import logging

from sqlmodel import Session, SQLModel

from hyroxbox.db import models  # noqa: F401
from hyroxbox.db.session import get_engine, seed_demo_data

log = logging.getLogger(__name__)


def seed_db() -> None:
    """Drop all tables, recreate schema, and insert demo data."""
    engine = get_engine()

    log.info("Dropping all SQLModel tables...")
    SQLModel.metadata.drop_all(engine)

    log.info("Creating all SQLModel tables...")
    SQLModel.metadata.create_all(engine)

    with Session(engine) as session:
        seed_demo_data(session)
        session.commit()

    log.info("Seed completed.")


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    seed_db()
