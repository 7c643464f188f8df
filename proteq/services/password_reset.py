"""Citizen password reset: request a code, verify it, set a new password."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from proteq.models.actors import GeneralUser
from proteq.services.activity_logger import ActorKind, log_activity
from proteq.services.mailer import MailDeliveryError, Mailer
from proteq.services.otp_store import OtpStore, OtpVerification
from proteq.utils.masking import mask_email
from proteq.utils.passwords import hash_password, validate_password_policy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResetOutcome:
    ok: bool
    code: str
    message: str
    errors: list[str] = field(default_factory=list)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def find_active_citizen(db: Session, email: str) -> GeneralUser | None:
    stmt = select(GeneralUser).where(
        func.lower(GeneralUser.email) == normalize_email(email),
        GeneralUser.status.is_(True),
    )
    return db.execute(stmt).scalars().first()


def _audit(db: Session, user: GeneralUser, action: str, details: str, ip_address: str | None, user_agent: str | None) -> None:
    result = log_activity(
        db,
        ActorKind.CITIZEN,
        user.id,
        action,
        details=details,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    if not result:
        logger.warning(
            "Failed to record password reset activity",
            extra={"action": action, "user_id": user.id, "reason": result.error.value if result.error else None},
        )


def request_reset(
    db: Session,
    store: OtpStore,
    mailer: Mailer,
    email: str,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> ResetOutcome:
    """Issue a reset code for an active citizen account and mail it."""

    email = normalize_email(email)
    user = find_active_citizen(db, email)
    if user is None:
        logger.info("Password reset requested for unknown account", extra={"email": mask_email(email)})
        return ResetOutcome(False, "ACCOUNT_NOT_FOUND", "No active account found for this email address.")

    code = store.generate_code()
    store.store(email, code)
    try:
        mailer.send_password_reset_code(email, code)
    except MailDeliveryError:
        store.delete(email)
        return ResetOutcome(False, "MAIL_FAILED", "Could not send the verification code. Please try again later.")

    _audit(db, user, "password_reset_requested", "Password reset code sent", ip_address, user_agent)
    db.commit()
    return ResetOutcome(True, "CODE_SENT", "A verification code has been sent to your email address.")


def verify_code(store: OtpStore, email: str, code: str) -> OtpVerification:
    """Check a reset code without consuming it; the reset step consumes it."""

    return store.verify(normalize_email(email), code, delete_on_success=False)


def reset_password(
    db: Session,
    store: OtpStore,
    email: str,
    code: str,
    new_password: str,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> ResetOutcome:
    """Consume the reset code and store a new password hash."""

    errors = validate_password_policy(new_password)
    if errors:
        return ResetOutcome(False, "WEAK_PASSWORD", "Password does not meet the policy.", errors)

    email = normalize_email(email)
    verification = store.verify(email, code)
    if not verification.valid:
        return ResetOutcome(False, verification.status.value, verification.message)

    user = find_active_citizen(db, email)
    if user is None:
        return ResetOutcome(False, "ACCOUNT_NOT_FOUND", "No active account found for this email address.")

    user.password_hash = hash_password(new_password)
    _audit(db, user, "password_reset", "Password reset via email verification code", ip_address, user_agent)
    db.commit()
    logger.info("Password reset completed", extra={"user_id": user.id})
    return ResetOutcome(True, "PASSWORD_RESET", "Password has been reset successfully.")


__all__ = [
    "ResetOutcome",
    "find_active_citizen",
    "normalize_email",
    "request_reset",
    "reset_password",
    "verify_code",
]
