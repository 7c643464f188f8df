"""Security dependencies for API key validation and scope enforcement."""
from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Callable, Set

from fastapi import Depends, Header, status
from sqlalchemy.orm import Session

from proteq.config import DEV_API_KEY_ALLOWED, ENV
from proteq.db import get_db
from proteq.models.api_key import ApiKey, ApiScope
from proteq.utils.apikey import find_valid_key, is_dev_key
from proteq.utils.errors import api_error

logger = logging.getLogger(__name__)


def _extract_key(
    authorization: str | None = Header(default=None),
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> str | None:
    """Read the key from ``Authorization: Bearer ...`` or ``X-API-Key``."""
    if x_api_key:
        return x_api_key.strip()
    if authorization and authorization.startswith("Bearer "):
        return authorization.split(" ", 1)[1].strip()
    return None


def _legacy_key(now: datetime) -> ApiKey:
    return ApiKey(
        id=0,
        name="__legacy__",
        prefix="legacy",
        key_hash="legacy",
        scope=ApiScope.admin,
        is_active=True,
        created_at=now,
        expires_at=None,
        last_used_at=now,
    )


def require_api_key(
    db: Session = Depends(get_db),
    token: str | None = Depends(_extract_key),
) -> ApiKey:
    """Validate API key tokens and return the corresponding row."""
    if not token:
        raise api_error(status.HTTP_401_UNAUTHORIZED, "NO_API_KEY", "API key required.")

    now = datetime.now(UTC)
    if is_dev_key(token):
        if not DEV_API_KEY_ALLOWED:
            raise api_error(status.HTTP_401_UNAUTHORIZED, "LEGACY_KEY_FORBIDDEN", "Legacy dev key disabled.")
        logger.warning("Legacy dev API key used", extra={"env": ENV})
        return _legacy_key(now)

    key = find_valid_key(db, token)
    if key is None:
        raise api_error(status.HTTP_401_UNAUTHORIZED, "UNAUTHORIZED", "Invalid or expired API key")

    key.last_used_at = now
    db.commit()
    return key


def require_scope(allowed: Set[ApiScope]) -> Callable:
    """Ensure the key carries one of the allowed scopes (admin passes every check)."""

    if not allowed:
        raise RuntimeError("require_scope needs a non-empty set of ApiScope")

    def _dep(key: ApiKey = Depends(require_api_key)) -> ApiKey:
        if key.scope == ApiScope.admin or key.scope in allowed:
            return key
        raise api_error(
            status.HTTP_403_FORBIDDEN,
            "INSUFFICIENT_SCOPE",
            f"Requires one of: {sorted(scope.value for scope in allowed)}",
        )

    return _dep


__all__ = ["require_api_key", "require_scope"]
