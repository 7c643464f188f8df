from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import proteq.models  # registers the tables
from proteq import db
from proteq.config import AppInfo, Settings, get_settings
from proteq.core.logging import get_logger, setup_logging
from proteq.routers import get_api_router
from proteq.services.mailer import Mailer
from proteq.services.otp_store import OtpStore
from proteq.utils.errors import error_response

logger = get_logger(__name__)
ALLOWED_CREATE_ENV = {"dev", "local", "test"}


def _configure_middlewares(fastapi_app: FastAPI, settings: Settings) -> None:
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-API-Key"],
    )

    if settings.PROMETHEUS_ENABLED:
        from starlette_exporter import PrometheusMiddleware, handle_metrics

        fastapi_app.add_middleware(PrometheusMiddleware, app_name="proteq")
        fastapi_app.add_route("/metrics", handle_metrics)

    if settings.SENTRY_DSN:
        import sentry_sdk

        sentry_sdk.init(dsn=settings.SENTRY_DSN, traces_sample_rate=0.2)


def build_otp_store(settings: Settings) -> OtpStore:
    return OtpStore(
        ttl=timedelta(seconds=settings.OTP_TTL_SECONDS),
        max_attempts=settings.OTP_MAX_ATTEMPTS,
    )


def _start_otp_sweeper(fastapi_app: FastAPI, settings: Settings) -> AsyncIOScheduler | None:
    if not settings.OTP_SWEEP_ENABLED or settings.OTP_SWEEP_INTERVAL_SECONDS <= 0:
        logger.info("OTP sweep disabled", extra={"env": settings.app_env})
        return None
    scheduler = AsyncIOScheduler()
    fastapi_app.state.otp_store.schedule_sweep(scheduler, settings.OTP_SWEEP_INTERVAL_SECONDS)
    scheduler.start()
    logger.info(
        "OTP sweep scheduled",
        extra={"interval_seconds": settings.OTP_SWEEP_INTERVAL_SECONDS},
    )
    return scheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, AppInfo().name)
    logger.info("Application startup", extra={"env": settings.app_env})

    db.init_engine()  # sync, idempotent
    if settings.ALLOW_DB_CREATE_ALL and settings.app_env.lower() in ALLOWED_CREATE_ENV:
        logger.warning(
            "Running Base.metadata.create_all() because APP_ENV=%s and ALLOW_DB_CREATE_ALL=True",
            settings.app_env,
        )
        db.create_all()
    else:
        logger.info(
            "Skipping create_all(); use Alembic migrations. APP_ENV=%s, ALLOW_DB_CREATE_ALL=%s",
            settings.app_env,
            settings.ALLOW_DB_CREATE_ALL,
        )

    if not settings.MAIL_ENABLED:
        logger.warning("Mail delivery disabled; reset codes will not be emailed.", extra={"env": settings.app_env})

    app.state.scheduler = _start_otp_sweeper(app, settings)
    try:
        yield
    finally:
        if app.state.scheduler is not None:
            app.state.scheduler.shutdown(wait=False)
            app.state.scheduler = None
        db.close_engine()
        logger.info("Application shutdown", extra={"env": settings.app_env})


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app_info = AppInfo()

    fastapi_app = FastAPI(title=app_info.name, version=app_info.version, lifespan=lifespan)
    fastapi_app.state.otp_store = build_otp_store(settings)
    fastapi_app.state.mailer = Mailer(settings)
    fastapi_app.state.scheduler = None

    _configure_middlewares(fastapi_app, settings)
    fastapi_app.include_router(get_api_router())

    @fastapi_app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception", exc_info=exc)
        payload = error_response("INTERNAL_SERVER_ERROR", "An unexpected error occurred.")
        return JSONResponse(status_code=500, content=payload)

    @fastapi_app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        detail = exc.detail
        if isinstance(detail, dict) and "error" in detail:
            content: dict[str, Any] = detail
        else:
            content = error_response("HTTP_ERROR", str(detail))
        return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))

    return fastapi_app


app = create_app()

__all__ = ["app", "create_app", "lifespan"]
