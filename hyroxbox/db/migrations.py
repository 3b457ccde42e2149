"""
Minimal migrations module.

create_all() only creates missing tables; it never alters existing ones.
The steps below bring databases created by older schema versions up to
date. They are idempotent and only run on PostgreSQL (SQLite databases are
local/dev and are simply recreated).
"""

from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


def run_minimal_migrations(engine: Engine) -> None:
    """
    Run small idempotent migrations for already-created tables.
    """
    if engine.dialect.name != "postgresql":
        log.info("Skipping minimal migrations for dialect %s", engine.dialect.name)
        return

    with engine.begin() as conn:
        # ---------------------------------------------------------------
        # 1) Region 1:N HyroxBox
        #
        # An older schema declared hyroxbox.region_id UNIQUE (one box per
        # region). Drop any single-column unique constraint on region_id.
        # ---------------------------------------------------------------
        conn.execute(
            text(
                """
                DO $$
                DECLARE
                    con record;
                BEGIN
                    FOR con IN
                        SELECT c.conname
                        FROM pg_constraint c
                        JOIN pg_class t ON t.oid = c.conrelid
                        JOIN pg_attribute a
                          ON a.attrelid = t.oid AND a.attnum = ANY (c.conkey)
                        WHERE t.relname = 'hyroxbox'
                          AND c.contype = 'u'
                          AND a.attname = 'region_id'
                          AND array_length(c.conkey, 1) = 1
                    LOOP
                        EXECUTE format(
                            'ALTER TABLE hyroxbox DROP CONSTRAINT %I', con.conname
                        );
                    END LOOP;
                END$$;
                """
            )
        )

        # ---------------------------------------------------------------
        # 2) Add non_member_price to hyroxbox (nullable INTEGER)
        # ---------------------------------------------------------------
        conn.execute(
            text(
                """
                ALTER TABLE hyroxbox
                ADD COLUMN IF NOT EXISTS non_member_price INTEGER;
                """
            )
        )

        # ---------------------------------------------------------------
        # 3) popularity: backfill + NOT NULL DEFAULT 0
        # ---------------------------------------------------------------
        conn.execute(
            text(
                """
                ALTER TABLE hyroxbox
                ADD COLUMN IF NOT EXISTS popularity INTEGER;
                """
            )
        )
        conn.execute(
            text("UPDATE hyroxbox SET popularity = 0 WHERE popularity IS NULL;")
        )
        conn.execute(
            text(
                """
                ALTER TABLE hyroxbox
                ALTER COLUMN popularity SET DEFAULT 0,
                ALTER COLUMN popularity SET NOT NULL;
                """
            )
        )

    log.info("Minimal migrations applied")
