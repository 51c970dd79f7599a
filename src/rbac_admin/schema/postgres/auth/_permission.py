"""
Permissions table storing the atomic capabilities managed by this service.

Each permission is a single named capability that can be granted to any number
of roles. Names are unique within a guard, and the guard is fixed once the
permission has been created; only the name may change afterwards. Removing a
permission removes every role_permission row that references it but never the
roles themselves.
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

permission = Table(
    "permission",
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
