"""Health and readiness routes."""

import logging
import sqlite3

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from agentry.agents.loader import get_bundle_loader
from agentry.db.connection import get_conn

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict[str, bool]:
    return {"ok": True}


@router.get("/readyz")
async def readyz() -> JSONResponse:
    db_ok = True
    try:
        with get_conn() as conn:
            conn.execute("SELECT 1")
    except sqlite3.Error as exc:
        logger.warning("Readiness database check failed: %s", exc)
        db_ok = False
    agents_root_ok = get_bundle_loader().root.is_dir()
    payload = {"ok": db_ok, "database": db_ok, "agents_root": agents_root_ok}
    return JSONResponse(payload, status_code=200 if db_ok else 503)
