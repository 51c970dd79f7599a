from typing import Optional

from fastapi import Depends, Query, status
from fastapi.routing import APIRouter

from rbac_admin.audit import ActivityLogReader

from ..dependencies import am, get_activity_log_reader
from ..envelope import respond
from ..transport_types.responses import EnvelopeResponse

activity_log_router = APIRouter(
    tags=["activity logs"],
    dependencies=[Depends(am.get_current_user_uuid)],
)


@activity_log_router.get(
    "/activity-logs",
    response_model=EnvelopeResponse,
    summary="List activity logs",
)
def get_all_logs(reader: ActivityLogReader = Depends(get_activity_log_reader)):
    logs = reader.list_all()
    return respond(
        status.HTTP_200_OK,
        "Activity logs retrieved successfully.",
        [log.to_dict() for log in logs],
    )


@activity_log_router.get(
    "/activity-logs/log-name/{log_name}",
    response_model=EnvelopeResponse,
    summary="List activity logs for one category",
)
def get_logs_by_log_name(
    log_name: str,
    reader: ActivityLogReader = Depends(get_activity_log_reader),
):
    logs = reader.by_log_name(log_name)
    return respond(
        status.HTTP_200_OK,
        "Activity logs retrieved successfully.",
        [log.to_dict() for log in logs],
    )


@activity_log_router.get(
    "/activity-logs/date-range",
    response_model=EnvelopeResponse,
    summary="List activity logs between two dates",
    description="Both `start_date` and `end_date` are ISO dates and are included.",
)
def get_logs_by_date_range(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    reader: ActivityLogReader = Depends(get_activity_log_reader),
):
    payload = {
        key: value
        for key, value in (("start_date", start_date), ("end_date", end_date))
        if value is not None
    }
    logs = reader.by_date_range(payload)
    return respond(
        status.HTTP_200_OK,
        "Activity logs retrieved successfully.",
        [log.to_dict() for log in logs],
    )
