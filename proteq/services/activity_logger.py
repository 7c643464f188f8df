"""Activity log service: validated writes and enriched reads.

Every entry references exactly one actor (admin, staff member or citizen).
Writes are refused for actors that are missing or inactive, and neither the
write nor the read path raises: callers branch on the returned value so a
failed audit write never aborts the operation being audited.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable

from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import InstrumentedAttribute, Session, aliased

from proteq.models.activity_log import ActivityLog
from proteq.models.actors import Admin, AdminStatus, GeneralUser, Staff
from proteq.schemas.activity_log import MAX_ID, ActivityLogFilters, ActivityLogRead, ActorRead
from proteq.utils.time import start_of_day, start_of_next_day, utcnow

logger = logging.getLogger(__name__)


class ActorKind(str, enum.Enum):
    """Actor kinds, valued with the spelling used at the API boundary."""

    ADMIN = "admin"
    STAFF = "staff"
    CITIZEN = "user"

    @classmethod
    def parse(cls, value: Any) -> "ActorKind | None":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class ActorTable:
    """How one actor kind is stored, validated and displayed."""

    model: type
    log_column: InstrumentedAttribute
    is_active: Callable[[], ColumnElement[bool]]
    display_name: Callable[[Any], ColumnElement[str]]


ACTOR_TABLES: dict[ActorKind, ActorTable] = {
    ActorKind.ADMIN: ActorTable(
        model=Admin,
        log_column=ActivityLog.admin_id,
        is_active=lambda: Admin.status == AdminStatus.active,
        display_name=lambda entity: entity.name,
    ),
    ActorKind.STAFF: ActorTable(
        model=Staff,
        log_column=ActivityLog.staff_id,
        is_active=lambda: Staff.status == Staff.STATUS_ACTIVE,
        display_name=lambda entity: entity.name,
    ),
    ActorKind.CITIZEN: ActorTable(
        model=GeneralUser,
        log_column=ActivityLog.general_user_id,
        is_active=lambda: GeneralUser.status.is_(True),
        display_name=lambda entity: entity.first_name + " " + entity.last_name,
    ),
}


@dataclass(frozen=True)
class ActorRef:
    """Reference to a single actor; the only way a log reference gets set."""

    kind: ActorKind
    actor_id: int

    def reference_columns(self) -> dict[str, int | None]:
        return {
            table.log_column.key: (self.actor_id if kind is self.kind else None)
            for kind, table in ACTOR_TABLES.items()
        }


class AuditError(str, enum.Enum):
    INVALID_ACTOR_KIND = "INVALID_ACTOR_KIND"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    ACTOR_NOT_ACTIVE = "ACTOR_NOT_ACTIVE"
    PERSISTENCE_FAILED = "PERSISTENCE_FAILED"


@dataclass(frozen=True)
class LogActivityResult:
    """Outcome of :func:`log_activity`; truthy only when a row was written."""

    log_id: int | None = None
    error: AuditError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.log_id is not None

    def __bool__(self) -> bool:
        return self.ok


def _is_actor_id(actor_id: Any) -> bool:
    return (
        isinstance(actor_id, int)
        and not isinstance(actor_id, bool)
        and 0 < actor_id <= MAX_ID
    )


def validate_actor(db: Session, actor_kind: ActorKind | str, actor_id: int) -> bool:
    """Return True iff exactly one active actor of ``actor_kind`` has ``actor_id``.

    The lookup runs in a savepoint so a failed query leaves the caller's
    transaction usable.
    """

    kind = ActorKind.parse(actor_kind)
    if kind is None or not _is_actor_id(actor_id):
        return False
    table = ACTOR_TABLES[kind]
    stmt = (
        select(func.count())
        .select_from(table.model)
        .where(table.model.id == actor_id, table.is_active())
    )
    try:
        with db.begin_nested():
            matches = db.execute(stmt).scalar_one()
    except SQLAlchemyError:
        logger.exception(
            "Actor validation query failed",
            extra={"actor_kind": kind.value, "actor_id": actor_id},
        )
        return False
    return matches == 1


def log_activity(
    db: Session,
    actor_kind: ActorKind | str,
    actor_id: int,
    action: str,
    details: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> LogActivityResult:
    """Validate the actor and append one activity log entry.

    The entry is flushed inside a savepoint and left for the caller to
    commit with its own work; a failed insert only rolls back the
    savepoint. Failures are logged and reported through the returned
    :class:`LogActivityResult`; nothing is raised.
    """

    kind = ActorKind.parse(actor_kind)
    if kind is None:
        logger.warning("Activity not logged: invalid actor kind", extra={"actor_kind": str(actor_kind)})
        return LogActivityResult(error=AuditError.INVALID_ACTOR_KIND)
    if not _is_actor_id(actor_id):
        logger.warning("Activity not logged: invalid actor id", extra={"actor_kind": kind.value})
        return LogActivityResult(error=AuditError.INVALID_ARGUMENT)
    if not isinstance(action, str) or not action.strip():
        logger.warning("Activity not logged: empty action", extra={"actor_kind": kind.value})
        return LogActivityResult(error=AuditError.INVALID_ARGUMENT)

    if not validate_actor(db, kind, actor_id):
        logger.warning(
            "Activity not logged: actor missing or inactive",
            extra={"actor_kind": kind.value, "actor_id": actor_id, "action": action},
        )
        return LogActivityResult(error=AuditError.ACTOR_NOT_ACTIVE)

    entry = ActivityLog(
        **ActorRef(kind, actor_id).reference_columns(),
        action=action,
        details=details,
        ip_address=ip_address,
        user_agent=user_agent,
        created_at=utcnow(),
    )
    try:
        with db.begin_nested():
            db.add(entry)
            db.flush()
            log_id = entry.id
    except SQLAlchemyError:
        logger.exception(
            "Activity log insert failed",
            extra={"actor_kind": kind.value, "actor_id": actor_id, "action": action},
        )
        return LogActivityResult(error=AuditError.PERSISTENCE_FAILED)

    logger.info(
        "Activity logged",
        extra={"actor_kind": kind.value, "actor_id": actor_id, "action": action, "log_id": log_id},
    )
    return LogActivityResult(log_id=log_id)


def get_actor_details(db: Session, actor_kind: ActorKind | str, actor_id: int) -> ActorRead | None:
    """Return id, display name and email for an actor, whatever its status."""

    kind = ActorKind.parse(actor_kind)
    if kind is None or not _is_actor_id(actor_id):
        return None
    table = ACTOR_TABLES[kind]
    model = table.model
    stmt = select(
        model.id.label("id"),
        table.display_name(model).label("name"),
        model.email.label("email"),
    ).where(model.id == actor_id)
    try:
        with db.begin_nested():
            row = db.execute(stmt).first()
    except SQLAlchemyError:
        logger.exception(
            "Actor lookup failed",
            extra={"actor_kind": kind.value, "actor_id": actor_id},
        )
        return None
    if row is None:
        return None
    return ActorRead(id=row.id, user_type=kind.value, name=row.name, email=row.email)


def _filtered(stmt: Select, filters: ActivityLogFilters) -> Select:
    kind = ActorKind.parse(filters.user_type)
    if kind is not None:
        stmt = stmt.where(ACTOR_TABLES[kind].log_column.is_not(None))
    action = filters.action_filter
    if action:
        stmt = stmt.where(ActivityLog.action.icontains(action, autoescape=True))
    if filters.date_from is not None:
        stmt = stmt.where(ActivityLog.created_at >= start_of_day(filters.date_from))
    if filters.date_to is not None:
        stmt = stmt.where(ActivityLog.created_at < start_of_next_day(filters.date_to))
    return stmt


def _enriched_select() -> Select:
    """Select log entries left-joined with all three actor tables."""

    actors = {kind: aliased(table.model, name=f"actor_{kind.name.lower()}") for kind, table in ACTOR_TABLES.items()}
    columns = [ActivityLog]
    for kind, actor in actors.items():
        table = ACTOR_TABLES[kind]
        prefix = kind.name.lower()
        columns.extend(
            [
                actor.id.label(f"{prefix}_actor_id"),
                table.display_name(actor).label(f"{prefix}_name"),
                actor.email.label(f"{prefix}_email"),
            ]
        )
    stmt = select(*columns).select_from(ActivityLog)
    for kind, actor in actors.items():
        stmt = stmt.outerjoin(actor, ACTOR_TABLES[kind].log_column == actor.id)
    return stmt


def _to_view(row: Any) -> ActivityLogRead:
    entry: ActivityLog = row[0]
    user_type, user_id, user_name, user_email = "unknown", None, None, None
    for kind, table in ACTOR_TABLES.items():
        if getattr(entry, table.log_column.key) is None:
            continue
        prefix = kind.name.lower()
        resolved_id = getattr(row, f"{prefix}_actor_id")
        if resolved_id is not None:
            user_type = kind.value
            user_id = resolved_id
            user_name = getattr(row, f"{prefix}_name")
            user_email = getattr(row, f"{prefix}_email")
        break
    return ActivityLogRead(
        id=entry.id,
        admin_id=entry.admin_id,
        staff_id=entry.staff_id,
        general_user_id=entry.general_user_id,
        user_type=user_type,
        user_id=user_id,
        user_name=user_name,
        user_email=user_email,
        action=entry.action,
        details=entry.details,
        ip_address=entry.ip_address,
        user_agent=entry.user_agent,
        created_at=entry.created_at,
    )


def get_activity_logs(db: Session, filters: ActivityLogFilters | None = None) -> list[ActivityLogRead]:
    """Return one page of log entries, newest first, enriched with actor identity.

    Query errors are logged and produce an empty list.
    """

    filters = filters or ActivityLogFilters()
    stmt = _enriched_select()
    stmt = (
        _filtered(stmt, filters)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(filters.limit)
        .offset(filters.offset)
    )
    try:
        with db.begin_nested():
            rows = db.execute(stmt).all()
    except SQLAlchemyError:
        logger.exception("Activity log query failed", extra={"filters": filters.model_dump(mode="json")})
        return []
    return [_to_view(row) for row in rows]


def count_activity_logs(db: Session, filters: ActivityLogFilters | None = None) -> int:
    """Return how many entries match ``filters``, ignoring pagination."""

    filters = filters or ActivityLogFilters()
    stmt = _filtered(select(func.count(ActivityLog.id)).select_from(ActivityLog), filters)
    try:
        with db.begin_nested():
            return db.execute(stmt).scalar_one()
    except SQLAlchemyError:
        logger.exception("Activity log count failed", extra={"filters": filters.model_dump(mode="json")})
        return 0


__all__ = [
    "ACTOR_TABLES",
    "ActorKind",
    "ActorRef",
    "AuditError",
    "LogActivityResult",
    "count_activity_logs",
    "get_activity_logs",
    "get_actor_details",
    "log_activity",
    "validate_actor",
]
