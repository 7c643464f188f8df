"""Actor tables: administrators, staff members and citizens.

Each table predates the activity log and keeps its own primary-key column
name and its own way of flagging an account as active.
"""
import enum

from sqlalchemy import Boolean, Enum, Integer, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UpdatedAtMixin


class AdminStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"


class Admin(UpdatedAtMixin, Base):
    """Municipal administrator account."""

    __tablename__ = "admin"

    id: Mapped[int] = mapped_column("admin_id", Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[AdminStatus] = mapped_column(
        Enum(AdminStatus, name="adminstatus"), nullable=False, default=AdminStatus.active
    )


class Staff(UpdatedAtMixin, Base):
    """Responder or operator working incidents."""

    __tablename__ = "staff"

    STATUS_ACTIVE = 1
    STATUS_INACTIVE = 0

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[str | None] = mapped_column(String(100), nullable=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=STATUS_ACTIVE)


class GeneralUser(UpdatedAtMixin, Base):
    """Citizen account used to report incidents and receive alerts."""

    __tablename__ = "general_users"

    id: Mapped[int] = mapped_column("user_id", Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


__all__ = ["Admin", "AdminStatus", "GeneralUser", "Staff"]
