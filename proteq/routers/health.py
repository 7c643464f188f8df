"""Health check endpoint."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text

from proteq.config import get_settings
from proteq.db import get_engine
from proteq.dependencies import get_otp_store
from proteq.services.otp_store import OtpStore

router = APIRouter(prefix="/health", tags=["health"])
logger = logging.getLogger(__name__)


def _db_status() -> str:
    """Return 'ok' if the DB is reachable, 'error' otherwise."""

    try:
        engine = get_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return "ok"
    except Exception:  # noqa: BLE001
        logger.exception("DB health check failed")
        return "error"


def _scheduler_running(request: Request) -> bool:
    scheduler = getattr(request.app.state, "scheduler", None)
    return bool(scheduler is not None and scheduler.running)


@router.get("", summary="Health check")
def healthcheck(request: Request, store: OtpStore = Depends(get_otp_store)) -> dict[str, object]:
    """Return database reachability and OTP sweeper state."""

    settings = get_settings()
    db_status = _db_status()
    return {
        "status": "ok" if db_status == "ok" else "degraded",
        "env": settings.app_env,
        "db_ok": db_status == "ok",
        "db_status": db_status,
        "scheduler_config_enabled": bool(settings.OTP_SWEEP_ENABLED),
        "scheduler_running": _scheduler_running(request),
        "otp_pending": len(store),
        "mail_enabled": bool(settings.MAIL_ENABLED),
    }
