"""Activity log model."""
from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class ActivityLog(Base):
    """Immutable record of one action performed by one actor."""

    __tablename__ = "activity_logs"
    __table_args__ = (
        CheckConstraint(
            "(CASE WHEN admin_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN staff_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN general_user_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="ck_activity_logs_single_actor",
        ),
        Index("ix_activity_logs_created_at", "created_at"),
    )

    admin_id: Mapped[int | None] = mapped_column(ForeignKey("admin.admin_id"), nullable=True, index=True)
    staff_id: Mapped[int | None] = mapped_column(ForeignKey("staff.id"), nullable=True, index=True)
    general_user_id: Mapped[int | None] = mapped_column(
        ForeignKey("general_users.user_id"), nullable=True, index=True
    )
    action: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<ActivityLog(id={self.id}, action='{self.action}')>"
