import re
import threading
from datetime import timedelta
from unittest.mock import MagicMock

from proteq.services.otp_store import (
    SWEEP_JOB_ID,
    OtpStatus,
    OtpStore,
    generate_code,
)

EMAIL = "juan@proteq.ph"


def test_generated_codes_are_six_digits_without_leading_zero():
    codes = [generate_code() for _ in range(10_000)]

    assert all(re.fullmatch(r"[1-9]\d{5}", code) for code in codes)
    assert all(100000 <= int(code) <= 999999 for code in codes)
    assert len(set(codes)) > 9800


def test_wrong_then_right_code(otp_store):
    otp_store.store("a@x.com", "123456")

    wrong = otp_store.verify("a@x.com", "000000")
    assert wrong.status is OtpStatus.INVALID
    assert wrong.message == "Invalid OTP"
    assert otp_store.get("a@x.com").attempts == 1

    right = otp_store.verify("a@x.com", "123456")
    assert right.valid
    assert otp_store.get("a@x.com") is None


def test_verify_success_consumes_record(otp_store):
    otp_store.store(EMAIL, "123456")

    first = otp_store.verify(EMAIL, "123456")
    second = otp_store.verify(EMAIL, "123456")

    assert first.valid
    assert first.message == "OTP verified successfully"
    assert second.status is OtpStatus.NOT_FOUND
    assert second.message == "OTP not found or expired"
    assert EMAIL not in otp_store


def test_verify_without_delete_keeps_record(otp_store):
    otp_store.store(EMAIL, "123456")

    assert otp_store.verify(EMAIL, "123456", delete_on_success=False).valid
    assert otp_store.verify(EMAIL, "123456").valid
    assert len(otp_store) == 0


def test_wrong_codes_count_attempts_then_lock_out(otp_store):
    otp_store.store(EMAIL, "123456")

    for expected_attempts in (1, 2, 3):
        result = otp_store.verify(EMAIL, "000000")
        assert result.status is OtpStatus.INVALID
        assert result.message == "Invalid OTP"
        assert otp_store.get(EMAIL).attempts == expected_attempts

    locked = otp_store.verify(EMAIL, "123456")
    assert locked.status is OtpStatus.TOO_MANY_ATTEMPTS
    assert locked.message == "Too many failed attempts"
    assert otp_store.get(EMAIL) is None
    assert otp_store.verify(EMAIL, "123456").status is OtpStatus.NOT_FOUND


def test_expired_record_rejects_correct_code(otp_store, otp_clock):
    otp_store.store(EMAIL, "123456")
    otp_clock.advance(minutes=10, seconds=1)

    result = otp_store.verify(EMAIL, "123456")

    assert result.status is OtpStatus.EXPIRED
    assert result.message == "OTP has expired"
    assert EMAIL not in otp_store


def test_record_is_valid_up_to_its_expiry_instant(otp_store, otp_clock):
    otp_store.store(EMAIL, "123456")
    otp_clock.advance(minutes=10)

    assert otp_store.verify(EMAIL, "123456").valid


def test_expiry_takes_precedence_over_attempt_limit(otp_store, otp_clock):
    otp_store.store(EMAIL, "123456")
    for _ in range(3):
        otp_store.verify(EMAIL, "999999")
    otp_clock.advance(minutes=11)

    assert otp_store.verify(EMAIL, "123456").status is OtpStatus.EXPIRED


def test_store_replaces_previous_record(otp_store, otp_clock):
    otp_store.store(EMAIL, "111111")
    otp_store.verify(EMAIL, "000000")
    otp_clock.advance(minutes=5)

    otp_store.store(EMAIL, "222222")
    record = otp_store.get(EMAIL)

    assert record.code == "222222"
    assert record.attempts == 0
    assert record.expires_at == otp_clock.now + timedelta(minutes=10)
    assert otp_store.verify(EMAIL, "111111").status is OtpStatus.INVALID


def test_get_returns_a_copy(otp_store):
    otp_store.store(EMAIL, "123456")
    record = otp_store.get(EMAIL)
    record.attempts = 99

    assert otp_store.get(EMAIL).attempts == 0


def test_delete_is_idempotent(otp_store):
    otp_store.store(EMAIL, "123456")
    otp_store.delete(EMAIL)
    otp_store.delete(EMAIL)

    assert otp_store.verify(EMAIL, "123456").status is OtpStatus.NOT_FOUND


def test_sweep_removes_only_expired_records(otp_store, otp_clock):
    otp_store.store("old@proteq.ph", "111111")
    otp_clock.advance(minutes=6)
    otp_store.store("new@proteq.ph", "222222")
    otp_clock.advance(minutes=5)

    removed = otp_store.sweep()

    assert removed == 1
    assert "old@proteq.ph" not in otp_store
    assert "new@proteq.ph" in otp_store
    assert otp_store.sweep() == 0


def test_schedule_sweep_registers_interval_job(otp_store):
    scheduler = MagicMock()

    otp_store.schedule_sweep(scheduler, 120)

    scheduler.add_job.assert_called_once_with(
        otp_store.sweep,
        "interval",
        seconds=120,
        id=SWEEP_JOB_ID,
        replace_existing=True,
    )


def test_concurrent_wrong_guesses_respect_attempt_limit():
    store = OtpStore(max_attempts=3)
    store.store(EMAIL, "123456")
    barrier = threading.Barrier(10)
    results = []
    results_lock = threading.Lock()

    def guess() -> None:
        barrier.wait()
        outcome = store.verify(EMAIL, "000000")
        with results_lock:
            results.append(outcome.status)

    threads = [threading.Thread(target=guess) for _ in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count(OtpStatus.INVALID) == 3
    assert results.count(OtpStatus.TOO_MANY_ATTEMPTS) == 1
    assert results.count(OtpStatus.NOT_FOUND) == 6
