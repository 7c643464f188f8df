"""ORM models package."""
from .activity_log import ActivityLog
from .actors import Admin, AdminStatus, GeneralUser, Staff
from .api_key import ApiKey, ApiScope
from .base import Base

__all__ = [
    "ActivityLog",
    "Admin",
    "AdminStatus",
    "ApiKey",
    "ApiScope",
    "Base",
    "GeneralUser",
    "Staff",
]
