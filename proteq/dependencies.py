"""Request-scoped accessors for the process-wide services kept on ``app.state``."""
from __future__ import annotations

from fastapi import Request

from proteq.services.mailer import Mailer
from proteq.services.otp_store import OtpStore


def get_otp_store(request: Request) -> OtpStore:
    return request.app.state.otp_store


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def client_user_agent(request: Request) -> str | None:
    return request.headers.get("user-agent")


__all__ = ["client_ip", "client_user_agent", "get_mailer", "get_otp_store"]
