"""Outgoing mail over SMTP."""
from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage

from proteq.config import Settings, get_settings
from proteq.utils.masking import mask_email

logger = logging.getLogger(__name__)

RESET_SUBJECT = "Password Reset OTP - MDRRMO"


class MailDeliveryError(RuntimeError):
    """Raised when a message could not be handed to the SMTP server."""


def _reset_body(code: str, ttl_minutes: int) -> str:
    return (
        "You requested to reset your ProteQ password.\n\n"
        f"Your verification code is: {code}\n\n"
        f"This code expires in {ttl_minutes} minutes. "
        "If you did not request a password reset, you can ignore this email.\n"
    )


class Mailer:
    """Sends transactional email using the SMTP settings."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    @property
    def enabled(self) -> bool:
        return bool(self.settings.MAIL_ENABLED)

    def send(self, to_email: str, subject: str, body: str) -> None:
        settings = self.settings
        if not self.enabled:
            logger.info(
                "Mail delivery disabled; message not sent",
                extra={"to": mask_email(to_email), "subject": subject},
            )
            return

        from_email = settings.MAIL_FROM or settings.SMTP_USER
        if not settings.SMTP_HOST or not from_email:
            raise MailDeliveryError("SMTP_HOST and MAIL_FROM (or SMTP_USER) must be set")

        msg = EmailMessage()
        msg["From"] = from_email
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.set_content(body)

        try:
            with smtplib.SMTP(
                settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.SMTP_TIMEOUT_SECONDS
            ) as server:
                server.ehlo()
                if settings.SMTP_STARTTLS:
                    server.starttls()
                    server.ehlo()
                if settings.SMTP_USER and settings.SMTP_PASSWORD:
                    server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.exception("SMTP delivery failed", extra={"to": mask_email(to_email)})
            raise MailDeliveryError(str(exc)) from exc

        logger.info("Mail sent", extra={"to": mask_email(to_email), "subject": subject})

    def send_password_reset_code(self, to_email: str, code: str) -> None:
        ttl_minutes = max(1, self.settings.OTP_TTL_SECONDS // 60)
        self.send(to_email, RESET_SUBJECT, _reset_body(code, ttl_minutes))


__all__ = ["Mailer", "MailDeliveryError", "RESET_SUBJECT"]
