"""In-memory store for short-lived numeric one-time passwords.

One record per email address. A record is consumed by a successful
verification, dropped once it expires or after too many wrong codes, and
reclaimed by a periodic sweep otherwise.
"""
from __future__ import annotations

import enum
import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from proteq.utils.masking import mask_email
from proteq.utils.time import utcnow

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(minutes=10)
DEFAULT_MAX_ATTEMPTS = 3
SWEEP_JOB_ID = "otp-sweep"


class OtpStatus(str, enum.Enum):
    VERIFIED = "VERIFIED"
    NOT_FOUND = "NOT_FOUND"
    EXPIRED = "EXPIRED"
    TOO_MANY_ATTEMPTS = "TOO_MANY_ATTEMPTS"
    INVALID = "INVALID"


_MESSAGES = {
    OtpStatus.VERIFIED: "OTP verified successfully",
    OtpStatus.NOT_FOUND: "OTP not found or expired",
    OtpStatus.EXPIRED: "OTP has expired",
    OtpStatus.TOO_MANY_ATTEMPTS: "Too many failed attempts",
    OtpStatus.INVALID: "Invalid OTP",
}


@dataclass
class OtpRecord:
    code: str
    expires_at: datetime
    attempts: int = 0


@dataclass(frozen=True)
class OtpVerification:
    status: OtpStatus

    @property
    def valid(self) -> bool:
        return self.status is OtpStatus.VERIFIED

    @property
    def message(self) -> str:
        return _MESSAGES[self.status]


def generate_code() -> str:
    """Return a six-digit code drawn uniformly from 100000..999999."""

    return str(100000 + secrets.randbelow(900000))


class OtpStore:
    """Owns the email -> :class:`OtpRecord` map.

    All operations hold one lock so that the verification state machine stays
    ordered when requests and the sweep job run on different threads.
    """

    def __init__(
        self,
        ttl: timedelta = DEFAULT_TTL,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.ttl = ttl
        self.max_attempts = max_attempts
        self._clock = clock
        self._records: dict[str, OtpRecord] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, email: object) -> bool:
        with self._lock:
            return email in self._records

    generate_code = staticmethod(generate_code)

    def get(self, email: str) -> OtpRecord | None:
        """Return a copy of the record held for ``email``, if any."""

        with self._lock:
            record = self._records.get(email)
            if record is None:
                return None
            return OtpRecord(code=record.code, expires_at=record.expires_at, attempts=record.attempts)

    def store(self, email: str, code: str) -> None:
        """Replace any record for ``email`` with a fresh one."""

        with self._lock:
            self._records[email] = OtpRecord(code=code, expires_at=self._clock() + self.ttl)

    def verify(self, email: str, code: str, delete_on_success: bool = True) -> OtpVerification:
        """Check ``code`` against the record for ``email``.

        Precedence: missing, then expired, then attempt limit, then the code
        comparison. A wrong code counts one attempt.
        """

        with self._lock:
            record = self._records.get(email)
            if record is None:
                return OtpVerification(OtpStatus.NOT_FOUND)

            if self._clock() > record.expires_at:
                del self._records[email]
                return OtpVerification(OtpStatus.EXPIRED)

            if record.attempts >= self.max_attempts:
                del self._records[email]
                logger.warning("OTP attempt limit reached", extra={"email": mask_email(email)})
                return OtpVerification(OtpStatus.TOO_MANY_ATTEMPTS)

            if secrets.compare_digest(record.code.encode(), str(code).encode()):
                if delete_on_success:
                    del self._records[email]
                return OtpVerification(OtpStatus.VERIFIED)

            record.attempts += 1
            return OtpVerification(OtpStatus.INVALID)

    def delete(self, email: str) -> None:
        with self._lock:
            self._records.pop(email, None)

    def sweep(self) -> int:
        """Drop every expired record and return how many were removed."""

        with self._lock:
            now = self._clock()
            expired = [email for email, record in self._records.items() if now > record.expires_at]
            for email in expired:
                del self._records[email]
        if expired:
            logger.info("Expired OTPs swept", extra={"removed": len(expired)})
        return len(expired)

    def schedule_sweep(self, scheduler, interval_seconds: int) -> None:
        """Register :meth:`sweep` as an interval job on an APScheduler scheduler."""

        scheduler.add_job(
            self.sweep,
            "interval",
            seconds=interval_seconds,
            id=SWEEP_JOB_ID,
            replace_existing=True,
        )


__all__ = [
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_TTL",
    "OtpRecord",
    "OtpStatus",
    "OtpStore",
    "OtpVerification",
    "SWEEP_JOB_ID",
    "generate_code",
]
