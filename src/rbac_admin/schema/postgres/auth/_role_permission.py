"""
Junction table linking roles to permissions in a many-to-many relationship.

Each row grants a single permission to a single role. The unique constraint on
(role_id, permission_id) guarantees a role never holds the same permission
twice, which keeps grant and synchronize operations idempotent.
"""

from sqlalchemy import (
    TIMESTAMP,
    Column,
    ForeignKey,
    Integer,
    Table,
    UniqueConstraint,
    func,
)

from .._metadata import metadata

role_permission = Table(
    "role_permission",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "created_at",
        TIMESTAMP(timezone=False),
        server_default=func.now(),
        nullable=False,
    ),
    Column(
        "role_id",
        Integer,
        ForeignKey("auth.role.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "permission_id",
        Integer,
        ForeignKey("auth.permission.id", ondelete="CASCADE"),
        nullable=False,
    ),
    UniqueConstraint("role_id", "permission_id"),
    comment=__doc__.strip(),
    schema="auth",
)
