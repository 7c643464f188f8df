"""Password reset endpoints for citizen accounts."""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from proteq.db import get_db
from proteq.dependencies import client_ip, client_user_agent, get_mailer, get_otp_store
from proteq.schemas.auth import (
    ForgotPasswordRequest,
    MessageResponse,
    ResetPasswordRequest,
    VerifyOtpRequest,
    VerifyOtpResponse,
)
from proteq.services import password_reset
from proteq.services.mailer import Mailer
from proteq.services.otp_store import OtpStore
from proteq.utils.errors import api_error

router = APIRouter(prefix="/auth", tags=["auth"])

_FAILURE_STATUS = {
    "ACCOUNT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "MAIL_FAILED": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _raise_for(outcome: password_reset.ResetOutcome) -> None:
    details = {"errors": outcome.errors} if outcome.errors else None
    raise api_error(
        _FAILURE_STATUS.get(outcome.code, status.HTTP_400_BAD_REQUEST),
        outcome.code,
        outcome.message,
        details,
    )


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    payload: ForgotPasswordRequest,
    request: Request,
    db: Session = Depends(get_db),
    store: OtpStore = Depends(get_otp_store),
    mailer: Mailer = Depends(get_mailer),
) -> MessageResponse:
    """Send a six-digit verification code to the account's email address."""

    outcome = password_reset.request_reset(
        db,
        store,
        mailer,
        payload.email,
        ip_address=client_ip(request),
        user_agent=client_user_agent(request),
    )
    if not outcome.ok:
        _raise_for(outcome)
    return MessageResponse(message=outcome.message)


@router.post("/verify-otp", response_model=VerifyOtpResponse)
def verify_otp(
    payload: VerifyOtpRequest,
    store: OtpStore = Depends(get_otp_store),
) -> VerifyOtpResponse:
    """Check a verification code; the code stays valid for the reset step."""

    verification = password_reset.verify_code(store, payload.email, payload.otp)
    if not verification.valid:
        raise api_error(status.HTTP_400_BAD_REQUEST, verification.status.value, verification.message)
    return VerifyOtpResponse(valid=True, message=verification.message)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    payload: ResetPasswordRequest,
    request: Request,
    db: Session = Depends(get_db),
    store: OtpStore = Depends(get_otp_store),
) -> MessageResponse:
    """Consume the verification code and set a new password."""

    outcome = password_reset.reset_password(
        db,
        store,
        payload.email,
        payload.otp,
        payload.new_password,
        ip_address=client_ip(request),
        user_agent=client_user_agent(request),
    )
    if not outcome.ok:
        _raise_for(outcome)
    return MessageResponse(message=outcome.message)
