from typing import Dict, List, Optional

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from rbac_admin.audit import ActivityLogReader, AuditSink, RequestContext
from rbac_admin.constants import LOG_NAME
from rbac_admin.rbac.service import RbacService
from rbac_admin.rbac.store import RbacStore
from rbac_admin.server.auth import AuthManager, bearer_scheme
from rbac_admin.util.postgres import get_managed_session, get_session_factory

from .config import settings

am = AuthManager(
    jwt_secret=settings.JWT_SECRET_KEY,
    jwt_algorithm=settings.ALGORITHM,
    access_token_expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
)


def get_audit_sink() -> AuditSink:
    return AuditSink(get_session_factory())


def get_rbac_service(
    db: Session = Depends(get_managed_session),
    audit: AuditSink = Depends(get_audit_sink),
) -> RbacService:
    return RbacService(
        RbacStore(db),
        audit,
        default_guard_name=settings.DEFAULT_GUARD_NAME,
    )


def get_activity_log_reader(
    db: Session = Depends(get_managed_session),
) -> ActivityLogReader:
    return ActivityLogReader(db)


def get_request_context(
    request: Request,
    user_uuid: str = Depends(am.get_current_user_uuid),
) -> RequestContext:
    return RequestContext(
        actor=user_uuid,
        ip_address=request.client.host if request.client else None,
    )


# audit categories by router tag
ROUTE_LOG_NAMES = {
    "permissions": LOG_NAME.PERMISSION,
    "roles": LOG_NAME.ROLE,
}


def _route_log_name(route) -> Optional[str]:
    for tag in getattr(route, "tags", None) or []:
        if tag in ROUTE_LOG_NAMES:
            return ROUTE_LOG_NAMES[tag]
    return None


async def record_rejected_request(request: Request, errors: Dict[str, List[str]]):
    """
    Audit a request FastAPI rejected before any service operation ran.

    Covers malformed path parameters and undecodable JSON bodies. The entry is
    filed under the category of the matched route; routes outside the
    permission and role routers are not audited. The caller's token is read
    when present but not required.
    """
    route = request.scope.get("route")
    log_name = _route_log_name(route)
    if log_name is None:
        return

    actor = None
    credentials = await bearer_scheme(request)
    if credentials is not None:
        try:
            actor = am.decode_subject(credentials.credentials)
        except HTTPException:
            actor = None

    ctx = RequestContext(
        actor=actor,
        ip_address=request.client.host if request.client else None,
    )
    action = (route.summary or route.name).lower()
    audit_factory = request.app.dependency_overrides.get(get_audit_sink, get_audit_sink)
    await run_in_threadpool(
        audit_factory().record,
        ctx,
        log_name=log_name,
        description=f"Rejected request to {action}.",
        event="Validation Failed",
        properties={"errors": errors},
    )
