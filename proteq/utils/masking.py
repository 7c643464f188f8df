"""Helpers for keeping personal data out of log records."""
from __future__ import annotations

from typing import Any


def mask_email(value: Any) -> str:
    """Return ``***@domain`` for an email address."""

    text = "" if value is None else str(value)
    if "@" not in text:
        return "***@***"
    _, domain = text.split("@", 1)
    return f"***@{domain or '***'}"


__all__ = ["mask_email"]
