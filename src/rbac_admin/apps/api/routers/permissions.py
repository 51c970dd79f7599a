from typing import Any

from fastapi import Body, Depends, status
from fastapi.routing import APIRouter

from rbac_admin.audit import RequestContext
from rbac_admin.rbac.service import RbacService

from ..dependencies import get_rbac_service, get_request_context
from ..envelope import respond
from ..transport_types.responses import EnvelopeResponse

permission_router = APIRouter(tags=["permissions"])


@permission_router.post(
    "/permissions",
    status_code=status.HTTP_201_CREATED,
    response_model=EnvelopeResponse,
    summary="Create permissions",
    description="Creates one or more permissions. Names must be unique.",
)
def create_permissions(
    payload: Any = Body(None),
    ctx: RequestContext = Depends(get_request_context),
    service: RbacService = Depends(get_rbac_service),
):
    permissions = service.create_permissions(ctx, payload)
    return respond(
        status.HTTP_201_CREATED,
        "Permissions created successfully.",
        [permission.to_dict() for permission in permissions],
    )


@permission_router.get(
    "/permissions",
    response_model=EnvelopeResponse,
    summary="List permissions",
)
def get_permissions(
    ctx: RequestContext = Depends(get_request_context),
    service: RbacService = Depends(get_rbac_service),
):
    permissions = service.list_permissions(ctx)
    return respond(
        status.HTTP_200_OK,
        "Permissions retrieved successfully.",
        [permission.to_dict() for permission in permissions],
    )


@permission_router.get(
    "/permissions/{permission_id}",
    response_model=EnvelopeResponse,
    summary="Get a permission",
)
def get_permission(
    permission_id: int,
    ctx: RequestContext = Depends(get_request_context),
    service: RbacService = Depends(get_rbac_service),
):
    permission = service.get_permission(ctx, permission_id)
    return respond(
        status.HTTP_200_OK,
        "Permission retrieved successfully.",
        permission.to_dict(),
    )


@permission_router.put(
    "/permissions/{permission_id}",
    response_model=EnvelopeResponse,
    summary="Rename a permission",
    description="Only the name can change; the guard is fixed at creation.",
)
def update_permission(
    permission_id: int,
    payload: Any = Body(None),
    ctx: RequestContext = Depends(get_request_context),
    service: RbacService = Depends(get_rbac_service),
):
    permission = service.rename_permission(ctx, permission_id, payload)
    return respond(
        status.HTTP_200_OK,
        "Permission updated successfully.",
        permission.to_dict(),
    )


@permission_router.delete(
    "/permissions/{permission_id}",
    response_model=EnvelopeResponse,
    summary="Delete a permission",
    description="Also removes the permission from every role holding it.",
)
def delete_permission(
    permission_id: int,
    ctx: RequestContext = Depends(get_request_context),
    service: RbacService = Depends(get_rbac_service),
):
    service.delete_permission(ctx, permission_id)
    return respond(status.HTTP_200_OK, "Permission deleted successfully.")


@permission_router.delete(
    "/permissions",
    response_model=EnvelopeResponse,
    summary="Delete permissions",
    description=(
        "Deletes every permission listed in `ids`. Unknown ids are ignored "
        "unless none of them exist."
    ),
)
def delete_permissions(
    payload: Any = Body(None),
    ctx: RequestContext = Depends(get_request_context),
    service: RbacService = Depends(get_rbac_service),
):
    service.delete_permissions(ctx, payload)
    return respond(status.HTTP_200_OK, "Permissions deleted successfully.")
