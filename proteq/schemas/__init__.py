"""Pydantic schemas exposed by the API."""
from .activity_log import (
    ActivityLogCreate,
    ActivityLogCreated,
    ActivityLogFilters,
    ActivityLogPage,
    ActivityLogRead,
    ActorRead,
)
from .auth import (
    ForgotPasswordRequest,
    MessageResponse,
    ResetPasswordRequest,
    VerifyOtpRequest,
    VerifyOtpResponse,
)

__all__ = [
    "ActivityLogCreate",
    "ActivityLogCreated",
    "ActivityLogFilters",
    "ActivityLogPage",
    "ActivityLogRead",
    "ActorRead",
    "ForgotPasswordRequest",
    "MessageResponse",
    "ResetPasswordRequest",
    "VerifyOtpRequest",
    "VerifyOtpResponse",
]
