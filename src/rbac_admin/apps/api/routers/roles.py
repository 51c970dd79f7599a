from typing import Any

from fastapi import Body, Depends, status
from fastapi.routing import APIRouter

from rbac_admin.audit import RequestContext
from rbac_admin.rbac.service import RbacService

from ..dependencies import get_rbac_service, get_request_context
from ..envelope import respond
from ..transport_types.responses import EnvelopeResponse

role_router = APIRouter(tags=["roles"])


@role_router.post(
    "/roles",
    status_code=status.HTTP_201_CREATED,
    response_model=EnvelopeResponse,
    summary="Create roles",
    description=(
        "Creates one or more roles, each with at least one existing permission "
        "referenced by name."
    ),
)
def create_roles(
    payload: Any = Body(None),
    ctx: RequestContext = Depends(get_request_context),
    service: RbacService = Depends(get_rbac_service),
):
    roles = service.create_roles(ctx, payload)
    return respond(
        status.HTTP_201_CREATED,
        "Roles created successfully.",
        [role.to_dict() for role in roles],
    )


@role_router.get(
    "/roles",
    response_model=EnvelopeResponse,
    summary="List roles with permission names",
)
def get_roles(
    ctx: RequestContext = Depends(get_request_context),
    service: RbacService = Depends(get_rbac_service),
):
    roles = service.list_roles(ctx)
    return respond(
        status.HTTP_200_OK,
        "Roles retrieved successfully.",
        [role.to_dict() for role in roles],
    )


# must be registered before /roles/{role_id}
@role_router.get(
    "/roles/with-permissions",
    response_model=EnvelopeResponse,
    summary="List roles with full permission records",
)
def get_roles_with_permissions(
    ctx: RequestContext = Depends(get_request_context),
    service: RbacService = Depends(get_rbac_service),
):
    roles = service.list_roles_with_permissions(ctx)
    return respond(
        status.HTTP_200_OK,
        "Roles retrieved successfully.",
        [role.to_dict(full=True) for role in roles],
    )


@role_router.get(
    "/roles/{role_id}",
    response_model=EnvelopeResponse,
    summary="Get a role with permission names",
)
def get_role(
    role_id: int,
    ctx: RequestContext = Depends(get_request_context),
    service: RbacService = Depends(get_rbac_service),
):
    role = service.get_role(ctx, role_id)
    return respond(
        status.HTTP_200_OK,
        "Role details retrieved successfully.",
        role.to_dict(),
    )


@role_router.get(
    "/roles/{role_id}/permissions",
    response_model=EnvelopeResponse,
    summary="Get a role with full permission records",
)
def get_role_with_permissions(
    role_id: int,
    ctx: RequestContext = Depends(get_request_context),
    service: RbacService = Depends(get_rbac_service),
):
    role = service.get_role_with_permissions(ctx, role_id)
    return respond(
        status.HTTP_200_OK,
        "Role retrieved successfully.",
        role.to_dict(full=True),
    )


@role_router.post(
    "/roles/{role_id}/permissions",
    response_model=EnvelopeResponse,
    summary="Assign permissions to a role",
    description=(
        "Adds the named permissions to the role. Permissions the role already "
        "holds are left as they are."
    ),
)
def assign_permissions_to_role(
    role_id: int,
    payload: Any = Body(None),
    ctx: RequestContext = Depends(get_request_context),
    service: RbacService = Depends(get_rbac_service),
):
    role = service.grant_permissions(ctx, role_id, payload)
    return respond(
        status.HTTP_200_OK,
        "Permissions assigned successfully.",
        role.to_dict(),
    )


@role_router.delete(
    "/roles/{role_id}/permissions",
    response_model=EnvelopeResponse,
    summary="Detach permissions from a role",
    description="Removes the permissions with the given ids from the role.",
)
def detach_permissions_from_role(
    role_id: int,
    payload: Any = Body(None),
    ctx: RequestContext = Depends(get_request_context),
    service: RbacService = Depends(get_rbac_service),
):
    service.revoke_permissions(ctx, role_id, payload)
    return respond(status.HTTP_200_OK, "Permissions detached successfully.")


@role_router.delete(
    "/roles/{role_id}",
    response_model=EnvelopeResponse,
    summary="Delete a role",
)
def delete_role(
    role_id: int,
    ctx: RequestContext = Depends(get_request_context),
    service: RbacService = Depends(get_rbac_service),
):
    service.delete_role(ctx, role_id)
    return respond(status.HTTP_200_OK, "Role deleted successfully.")


@role_router.put(
    "/roles/{role_id}",
    response_model=EnvelopeResponse,
    summary="Update a role's name and guard",
)
def update_role(
    role_id: int,
    payload: Any = Body(None),
    ctx: RequestContext = Depends(get_request_context),
    service: RbacService = Depends(get_rbac_service),
):
    role = service.update_role(ctx, role_id, payload)
    return respond(status.HTTP_200_OK, "Role updated successfully.", role.to_dict())


@role_router.put(
    "/roles/{role_id}/permissions",
    response_model=EnvelopeResponse,
    summary="Update a role and replace its permissions",
    description=(
        "Updates name and guard, then makes the role hold exactly the "
        "permissions with the given ids."
    ),
)
def update_role_with_permissions(
    role_id: int,
    payload: Any = Body(None),
    ctx: RequestContext = Depends(get_request_context),
    service: RbacService = Depends(get_rbac_service),
):
    role = service.update_role_with_permissions(ctx, role_id, payload)
    return respond(
        status.HTTP_200_OK,
        "Role updated and permissions updated successfully.",
        role.to_dict(),
    )
