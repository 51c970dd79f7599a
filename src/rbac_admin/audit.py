"""
Audit trail for administrative actions.

AuditSink appends one ActivityLog row per operation outcome using its own
session, so a failing audit write can never undo or alter the primary
operation. ActivityLogReader lists and filters the recorded entries.
"""

import datetime
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from rbac_admin.models.log import ActivityLog
from rbac_admin.rbac.requests import ActivityLogDateRangeRequest
from rbac_admin.util.logging import get_logger
from rbac_admin.validation import ErrorBag, validate

logger = get_logger(__name__)


@dataclass(frozen=True)
class RequestContext:
    """Who is acting and from where, passed explicitly into every operation."""

    actor: Optional[str]
    ip_address: Optional[str]


class AuditSink:
    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def record(
        self,
        ctx: RequestContext,
        log_name: str,
        description: str,
        event: str,
        properties: Optional[Dict[str, Any]] = None,
    ):
        payload = {"ip_address": ctx.ip_address}
        payload.update(properties or {})

        try:
            with self.session_factory() as session:
                session.add(
                    ActivityLog(
                        log_name=log_name,
                        description=description,
                        event=event,
                        causer_id=ctx.actor,
                        properties=payload,
                    )
                )
                session.commit()
        except Exception as e:
            logger.warning(
                f"Failed to record activity '{event}' for {log_name}: {e}",
                exc_info=True,
            )


class ActivityLogReader:
    def __init__(self, db: Session):
        self.db = db

    def list_all(self) -> List[ActivityLog]:
        return list(
            self.db.scalars(
                select(ActivityLog).order_by(
                    ActivityLog.created_at.desc(), ActivityLog.id.desc()
                )
            )
        )

    def by_log_name(self, log_name: str) -> List[ActivityLog]:
        return list(
            self.db.scalars(
                select(ActivityLog)
                .where(ActivityLog.log_name == log_name)
                .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
            )
        )

    def by_date_range(self, payload: Dict[str, Any]) -> List[ActivityLog]:
        """
        Entries created between start_date and end_date, both days included.

        Raises:
            ValidationFailed: When a date is missing, malformed, or the range is
                reversed
        """
        request = validate(ActivityLogDateRangeRequest, payload)

        errors = ErrorBag()
        if request.end_date < request.start_date:
            errors.add(
                "end_date",
                "The end_date field must be a date after or equal to start_date.",
            )
        errors.raise_if_any()

        start = datetime.datetime.combine(request.start_date, datetime.time.min)
        end = datetime.datetime.combine(
            request.end_date + datetime.timedelta(days=1), datetime.time.min
        )

        return list(
            self.db.scalars(
                select(ActivityLog)
                .where(ActivityLog.created_at >= start, ActivityLog.created_at < end)
                .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
            )
        )
