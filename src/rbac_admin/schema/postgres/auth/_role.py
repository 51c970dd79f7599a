"""
Roles table storing named bundles of permissions.

A role is created together with at least one permission and can later be
renamed, re-guarded, or have its permission set replaced, extended or reduced
(possibly to nothing). The permissions a role holds live in role_permission.
"""

from sqlalchemy import (
    TIMESTAMP,
    Column,
    Integer,
    String,
    Table,
    UniqueConstraint,
    func,
)

from .._metadata import metadata

role = Table(
    "role",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("guard_name", String(255), nullable=False),
    Column(
        "created_at",
        TIMESTAMP(timezone=False),
        server_default=func.now(),
        nullable=False,
    ),
    Column(
        "updated_at",
        TIMESTAMP(timezone=False),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    ),
    UniqueConstraint("name", "guard_name"),
    comment=__doc__.strip(),
    schema="auth",
)
