"""Test configuration."""
import os
from collections.abc import AsyncIterator, Callable, Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from uuid import uuid4

from alembic import command
from alembic.config import Config
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

# --- Default environment
os.environ.setdefault("DATABASE_URL", "sqlite:///./proteq_test.db")
os.environ.setdefault("API_KEY", "test-secret-key")
os.environ.setdefault("PROTEQ_ENV", "dev")
os.environ.setdefault("OTP_SWEEP_ENABLED", "false")
os.environ.setdefault("MAIL_ENABLED", "false")

from proteq.main import app  # noqa: E402
from proteq.db import get_db  # noqa: E402
from proteq.dependencies import get_mailer, get_otp_store  # noqa: E402
from proteq.models import Admin, AdminStatus, GeneralUser, Staff  # noqa: E402
from proteq.models.api_key import ApiKey, ApiScope  # noqa: E402
from proteq.services.mailer import MailDeliveryError, Mailer  # noqa: E402
from proteq.services.otp_store import OtpStore  # noqa: E402
from proteq.utils.apikey import hash_key  # noqa: E402
from proteq.utils.passwords import hash_password  # noqa: E402

DB_PATH = Path("./proteq_test.db")
DEFAULT_PASSWORD = "OldPassw0rd"


def _run_migrations() -> None:
    cfg = Config(str(Path(__file__).resolve().parents[1] / "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", os.environ["DATABASE_URL"])
    command.upgrade(cfg, "head")


# --- (1) Fresh database file for the session
if DB_PATH.exists():
    DB_PATH.unlink()

engine = create_engine(
    os.environ["DATABASE_URL"],
    connect_args={"check_same_thread": False},
    future=True,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False,
                                   future=True, expire_on_commit=False)

# --- (2) Schema comes from Alembic only
_run_migrations()


class FrozenClock:
    """Manually advanced clock for the OTP store."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 3, 1, 8, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class RecordingMailer(Mailer):
    """Mailer that keeps messages in memory instead of talking to SMTP."""

    def __init__(self) -> None:
        super().__init__()
        self.sent: list[dict[str, str]] = []
        self.fail = False

    def send(self, to_email: str, subject: str, body: str) -> None:
        if self.fail:
            raise MailDeliveryError("smtp unavailable")
        self.sent.append({"to": to_email, "subject": subject, "body": body})

    @property
    def last_code(self) -> str | None:
        if not self.sent:
            return None
        for token in self.sent[-1]["body"].split():
            if token.isdigit() and len(token) == 6:
                return token
        return None


@pytest.fixture
def db_session() -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture(autouse=True)
def override_db_dependency(db_session: Session) -> Iterator[None]:
    def _get_db() -> Iterator[Session]:
        yield db_session
    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def otp_clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def otp_store(otp_clock: FrozenClock) -> OtpStore:
    return OtpStore(ttl=timedelta(minutes=10), max_attempts=3, clock=otp_clock)


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture(autouse=True)
def override_service_dependencies(otp_store: OtpStore, mailer: RecordingMailer) -> Iterator[None]:
    app.dependency_overrides[get_otp_store] = lambda: otp_store
    app.dependency_overrides[get_mailer] = lambda: mailer
    yield
    app.dependency_overrides.pop(get_otp_store, None)
    app.dependency_overrides.pop(get_mailer, None)


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def make_admin(db_session: Session) -> Callable[..., Admin]:
    def _factory(*, name: str = "Ana Admin", status: AdminStatus = AdminStatus.active) -> Admin:
        admin = Admin(
            name=name,
            email=f"admin-{uuid4().hex[:8]}@proteq.ph",
            password_hash=hash_password(DEFAULT_PASSWORD),
            status=status,
        )
        db_session.add(admin)
        db_session.flush()
        return admin

    return _factory


@pytest.fixture
def make_staff(db_session: Session) -> Callable[..., Staff]:
    def _factory(*, name: str = "Sam Staff", status: int = Staff.STATUS_ACTIVE) -> Staff:
        staff = Staff(
            name=name,
            email=f"staff-{uuid4().hex[:8]}@proteq.ph",
            password_hash=hash_password(DEFAULT_PASSWORD),
            position="Responder",
            department="Rescue",
            status=status,
        )
        db_session.add(staff)
        db_session.flush()
        return staff

    return _factory


@pytest.fixture
def make_citizen(db_session: Session) -> Callable[..., GeneralUser]:
    def _factory(
        *,
        first_name: str = "Juan",
        last_name: str = "Cruz",
        email: str | None = None,
        status: bool = True,
    ) -> GeneralUser:
        user = GeneralUser(
            first_name=first_name,
            last_name=last_name,
            email=email or f"citizen-{uuid4().hex[:8]}@proteq.ph",
            password_hash=hash_password(DEFAULT_PASSWORD),
            status=status,
        )
        db_session.add(user)
        db_session.flush()
        return user

    return _factory


@pytest.fixture
def make_api_key(db_session: Session) -> Callable[..., ApiKey]:
    def _factory(
        name: str,
        key: str,
        scope: ApiScope = ApiScope.staff,
        is_active: bool = True,
        expires_at: datetime | None = None,
    ) -> ApiKey:
        api_key = ApiKey(
            name=name,
            prefix="t_" + uuid4().hex[:8],
            key_hash=hash_key(key),
            scope=scope,
            is_active=is_active,
            expires_at=expires_at,
        )
        db_session.add(api_key)
        db_session.commit()
        db_session.refresh(api_key)
        return api_key

    return _factory


@pytest.fixture
def staff_headers(make_api_key: Callable[..., ApiKey]) -> dict[str, str]:
    token = f"staff-{uuid4().hex}"
    make_api_key(name=f"staff-{uuid4().hex}", key=token, scope=ApiScope.staff)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(make_api_key: Callable[..., ApiKey]) -> dict[str, str]:
    token = f"admin-{uuid4().hex}"
    make_api_key(name=f"admin-{uuid4().hex}", key=token, scope=ApiScope.admin)
    return {"Authorization": f"Bearer {token}"}
