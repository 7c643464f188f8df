"""Error payloads shared by the routers and security dependencies."""
from typing import Any

from fastapi import HTTPException


def error_response(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return ``{"error": {"code", "message", "details"?}}``."""

    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"error": error}


def api_error(
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> HTTPException:
    """Build an ``HTTPException`` carrying an :func:`error_response` payload."""

    return HTTPException(status_code=status_code, detail=error_response(code, message, details))


__all__ = ["api_error", "error_response"]
