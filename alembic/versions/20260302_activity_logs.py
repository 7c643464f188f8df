"""Create activity_logs with one actor reference per entry."""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20260302_activity_logs"
down_revision = "20260301_actor_tables"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "activity_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("admin_id", sa.Integer(), sa.ForeignKey("admin.admin_id"), nullable=True),
        sa.Column("staff_id", sa.Integer(), sa.ForeignKey("staff.id"), nullable=True),
        sa.Column("general_user_id", sa.Integer(), sa.ForeignKey("general_users.user_id"), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "(CASE WHEN admin_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN staff_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN general_user_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="ck_activity_logs_single_actor",
        ),
    )
    op.create_index("ix_activity_logs_admin_id", "activity_logs", ["admin_id"])
    op.create_index("ix_activity_logs_staff_id", "activity_logs", ["staff_id"])
    op.create_index("ix_activity_logs_general_user_id", "activity_logs", ["general_user_id"])
    op.create_index("ix_activity_logs_action", "activity_logs", ["action"])
    op.create_index("ix_activity_logs_created_at", "activity_logs", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_activity_logs_created_at", table_name="activity_logs")
    op.drop_index("ix_activity_logs_action", table_name="activity_logs")
    op.drop_index("ix_activity_logs_general_user_id", table_name="activity_logs")
    op.drop_index("ix_activity_logs_staff_id", table_name="activity_logs")
    op.drop_index("ix_activity_logs_admin_id", table_name="activity_logs")
    op.drop_table("activity_logs")
