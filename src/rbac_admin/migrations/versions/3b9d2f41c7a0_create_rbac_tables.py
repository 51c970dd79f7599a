"""Create rbac and audit tables

Revision ID: 3b9d2f41c7a0
Revises:
Create Date: 2026-10-19 10:02:11.418274

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3b9d2f41c7a0"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=False),
        server_default=sa.func.now(),
        nullable=False,
    )


def upgrade() -> None:
    op.execute(sa.text("CREATE SCHEMA IF NOT EXISTS auth"))
    op.execute(sa.text("CREATE SCHEMA IF NOT EXISTS audit"))

    op.create_table(
        "permission",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("guard_name", sa.String(255), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.UniqueConstraint("name", "guard_name"),
        schema="auth",
    )
    op.create_table(
        "role",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("guard_name", sa.String(255), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.UniqueConstraint("name", "guard_name"),
        schema="auth",
    )
    op.create_table(
        "role_permission",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        _timestamp("created_at"),
        sa.Column(
            "role_id",
            sa.Integer,
            sa.ForeignKey("auth.role.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "permission_id",
            sa.Integer,
            sa.ForeignKey("auth.permission.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.UniqueConstraint("role_id", "permission_id"),
        schema="auth",
    )
    op.create_table(
        "activity_log",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        _timestamp("created_at"),
        sa.Column("log_name", sa.String(255), nullable=False),
        sa.Column("description", sa.String, nullable=False),
        sa.Column("event", sa.String(255), nullable=True),
        sa.Column("causer_id", sa.String(255), nullable=True),
        sa.Column("properties", sa.JSON, nullable=False),
        schema="audit",
    )
    op.create_index(
        "ix_audit_activity_log_log_name",
        "activity_log",
        ["log_name"],
        schema="audit",
    )


def downgrade() -> None:
    op.drop_index("ix_audit_activity_log_log_name", table_name="activity_log", schema="audit")
    op.drop_table("activity_log", schema="audit")
    op.drop_table("role_permission", schema="auth")
    op.drop_table("role", schema="auth")
    op.drop_table("permission", schema="auth")
