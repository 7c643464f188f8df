import smtplib

import pytest

from proteq.config import Settings
from proteq.services.mailer import RESET_SUBJECT, MailDeliveryError, Mailer


class FakeSMTP:
    instances: list["FakeSMTP"] = []
    fail_on_send = False

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.calls: list[str] = []
        self.messages = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def ehlo(self):
        self.calls.append("ehlo")

    def starttls(self):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append(f"login:{user}")

    def send_message(self, message):
        if FakeSMTP.fail_on_send:
            raise smtplib.SMTPRecipientsRefused({message["To"]: (550, b"no such user")})
        self.messages.append(message)


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.fail_on_send = False
    monkeypatch.setattr("proteq.services.mailer.smtplib.SMTP", FakeSMTP)
    return FakeSMTP


def _settings(**overrides) -> Settings:
    values = {
        "MAIL_ENABLED": True,
        "MAIL_FROM": "noreply@proteq.ph",
        "SMTP_HOST": "smtp.proteq.ph",
        "SMTP_USER": "mailer",
        "SMTP_PASSWORD": "secret",
        "OTP_TTL_SECONDS": 600,
    }
    values.update(overrides)
    return Settings(**values)


def test_disabled_mailer_skips_smtp(fake_smtp):
    Mailer(_settings(MAIL_ENABLED=False)).send("juan@proteq.ph", "Hello", "Body")

    assert fake_smtp.instances == []


def test_reset_code_message(fake_smtp):
    Mailer(_settings()).send_password_reset_code("juan@proteq.ph", "482913")

    [server] = fake_smtp.instances
    assert (server.host, server.port) == ("smtp.proteq.ph", 587)
    assert server.calls == ["ehlo", "starttls", "ehlo", "login:mailer"]
    [message] = server.messages
    assert message["Subject"] == RESET_SUBJECT
    assert message["To"] == "juan@proteq.ph"
    assert message["From"] == "noreply@proteq.ph"
    body = message.get_content()
    assert "482913" in body
    assert "10 minutes" in body


def test_plain_smtp_without_credentials(fake_smtp):
    Mailer(_settings(SMTP_STARTTLS=False, SMTP_USER="", SMTP_PASSWORD="")).send(
        "juan@proteq.ph", "Hello", "Body"
    )

    [server] = fake_smtp.instances
    assert server.calls == ["ehlo"]


def test_missing_host_is_a_delivery_error(fake_smtp):
    with pytest.raises(MailDeliveryError):
        Mailer(_settings(SMTP_HOST=" ")).send("juan@proteq.ph", "Hello", "Body")

    assert fake_smtp.instances == []


def test_smtp_failure_is_wrapped(fake_smtp):
    fake_smtp.fail_on_send = True

    with pytest.raises(MailDeliveryError):
        Mailer(_settings()).send("juan@proteq.ph", "Hello", "Body")
