"""Activity log schemas."""
from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

UserTypeFilter = Literal["all", "admin", "staff", "user"]
ActorTypeName = Literal["admin", "staff", "user"]

# Largest value a BIGINT primary key can hold.
MAX_ID = 2**63 - 1
# Keeps (page - 1) * limit well inside a 64-bit OFFSET.
MAX_PAGE = 1_000_000
MAX_LIMIT = 1_000


class ActivityLogFilters(BaseModel):
    """Options accepted by the activity log queries.

    ``action`` is a case-insensitive substring; ``"all"`` or an empty string
    disables it. ``date_from``/``date_to`` are inclusive calendar dates (UTC)
    and accept ISO strings, with an empty string meaning "no bound".
    """

    page: int = Field(default=1, ge=1, le=MAX_PAGE)
    limit: int = Field(default=20, ge=1, le=MAX_LIMIT)
    user_type: UserTypeFilter = "all"
    action: str = "all"
    date_from: date | None = None
    date_to: date | None = None

    @field_validator("date_from", "date_to", mode="before")
    @classmethod
    def _blank_date_is_unbounded(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def action_filter(self) -> str | None:
        text = self.action.strip()
        if not text or text.lower() == "all":
            return None
        return text


class ActivityLogCreate(BaseModel):
    user_type: ActorTypeName
    user_id: int = Field(gt=0, le=MAX_ID)
    action: str = Field(min_length=1, max_length=100)
    details: str | None = None


class ActivityLogCreated(BaseModel):
    id: int


class ActivityLogRead(BaseModel):
    id: int
    admin_id: int | None
    staff_id: int | None
    general_user_id: int | None
    user_type: Literal["admin", "staff", "user", "unknown"]
    user_id: int | None
    user_name: str | None
    user_email: str | None
    action: str
    details: str | None
    ip_address: str | None
    user_agent: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ActivityLogPage(BaseModel):
    items: list[ActivityLogRead]
    page: int
    limit: int
    total: int


class ActorRead(BaseModel):
    id: int
    user_type: ActorTypeName
    name: str
    email: str
