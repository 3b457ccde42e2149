# hyroxbox/api/v1/health.py
"""Health check: confirms the database answers a trivial query."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from hyroxbox.db.session import get_engine

router = APIRouter()
log = logging.getLogger(__name__)


@router.get("/health")
def health():
    """Return {"ok": True, "db": "ok"} or 503 if the DB is unreachable."""
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        log.error("Health check failed: %s", e)
        raise HTTPException(503, f"DB error: {e}") from e
    return {"ok": True, "db": "ok"}
