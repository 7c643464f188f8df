"""Activity log endpoints."""
from fastapi import APIRouter, Depends, Path, Query, Request, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from proteq.config import get_settings
from proteq.db import get_db
from proteq.dependencies import client_ip, client_user_agent
from proteq.models.api_key import ApiKey, ApiScope
from proteq.schemas.activity_log import (
    MAX_ID,
    MAX_PAGE,
    ActivityLogCreate,
    ActivityLogCreated,
    ActivityLogFilters,
    ActivityLogPage,
    ActorRead,
    ActorTypeName,
    UserTypeFilter,
)
from proteq.security import require_scope
from proteq.services.activity_logger import (
    AuditError,
    count_activity_logs,
    get_activity_logs,
    get_actor_details,
    log_activity,
)
from proteq.utils.errors import api_error

router = APIRouter(prefix="/activity-logs", tags=["activity-logs"])

MAX_PAGE_SIZE = get_settings().ACTIVITY_LOG_MAX_LIMIT


@router.get("", response_model=ActivityLogPage)
def list_activity_logs(
    page: int = Query(default=1, ge=1, le=MAX_PAGE),
    limit: int = Query(default=20, ge=1, le=MAX_PAGE_SIZE),
    user_type: UserTypeFilter = Query(default="all"),
    action: str = Query(default="all", max_length=100),
    date_from: str | None = Query(default=None),
    date_to: str | None = Query(default=None),
    db: Session = Depends(get_db),
    api_key: ApiKey = Depends(require_scope({ApiScope.admin})),
) -> ActivityLogPage:
    """Return one page of activity, newest first."""

    try:
        filters = ActivityLogFilters(
            page=page,
            limit=limit,
            user_type=user_type,
            action=action,
            date_from=date_from or None,
            date_to=date_to or None,
        )
    except ValidationError as exc:
        raise api_error(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "INVALID_FILTERS",
            "Invalid activity log filters.",
            {"fields": sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})},
        ) from exc

    items = get_activity_logs(db, filters)
    total = count_activity_logs(db, filters)
    return ActivityLogPage(items=items, page=filters.page, limit=filters.limit, total=total)


@router.post("", response_model=ActivityLogCreated, status_code=status.HTTP_201_CREATED)
def create_activity_log(
    payload: ActivityLogCreate,
    request: Request,
    db: Session = Depends(get_db),
    api_key: ApiKey = Depends(require_scope({ApiScope.admin, ApiScope.staff})),
) -> ActivityLogCreated:
    """Record an action performed by an admin, staff member or citizen."""

    result = log_activity(
        db,
        payload.user_type,
        payload.user_id,
        payload.action,
        details=payload.details,
        ip_address=client_ip(request),
        user_agent=client_user_agent(request),
    )
    if result:
        db.commit()
        return ActivityLogCreated(id=result.log_id)

    if result.error is AuditError.PERSISTENCE_FAILED:
        raise api_error(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "ACTIVITY_LOG_UNAVAILABLE",
            "Activity could not be recorded.",
        )
    raise api_error(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        result.error.value if result.error else "ACTIVITY_NOT_LOGGED",
        "Actor not found or inactive.",
    )


@router.get("/actors/{user_type}/{user_id}", response_model=ActorRead)
def read_actor(
    user_type: ActorTypeName,
    user_id: int = Path(gt=0, le=MAX_ID),
    db: Session = Depends(get_db),
    api_key: ApiKey = Depends(require_scope({ApiScope.admin})),
) -> ActorRead:
    """Return the display identity of an actor referenced by activity entries."""

    actor = get_actor_details(db, user_type, user_id)
    if actor is None:
        raise api_error(status.HTTP_404_NOT_FOUND, "ACTOR_NOT_FOUND", "Actor not found.")
    return actor
