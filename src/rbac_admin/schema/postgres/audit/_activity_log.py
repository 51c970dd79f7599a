"""
Append-only activity log recording every administrative action.

Entries are written by the audit sink after each permission or role operation,
whatever its outcome. log_name groups entries by the kind of entity involved
("Permission", "Role"), causer_id identifies the authenticated actor when there
is one, and properties carries the operation specific payload (origin address,
snapshots of affected rows, counts). Rows are never updated or deleted.
"""

from sqlalchemy import (
    JSON,
    TIMESTAMP,
    Column,
    Integer,
    String,
    Table,
    func,
)

from .._metadata import metadata

activity_log = Table(
    "activity_log",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "created_at",
        TIMESTAMP(timezone=False),
        server_default=func.now(),
        nullable=False,
    ),
    Column("log_name", String(255), nullable=False, index=True),
    Column("description", String, nullable=False),
    Column("event", String(255), nullable=True),
    Column("causer_id", String(255), nullable=True),
    Column("properties", JSON, nullable=False),
    comment=__doc__.strip(),
    schema="audit",
)
