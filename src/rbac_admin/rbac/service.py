"""
Permission and role management.

RbacService validates requests, applies them through RbacStore inside one
transaction per operation and records one audit entry per outcome. Three
different ways of changing a role's permission set are offered and must not be
confused:

1. synchronize: the role ends up holding exactly the given permissions
2. grant: the given permissions are added, everything already held stays
3. revoke: the given permissions are removed, everything else stays

All three compare the ids the role currently holds with the requested ids and
write the difference to the join table, so repeating a call is harmless.
"""

import functools
from typing import Any, Dict, Iterable, List, NamedTuple, Set, Tuple

from rbac_admin.audit import AuditSink, RequestContext
from rbac_admin.constants import LOG_NAME
from rbac_admin.errors import NotFound, ValidationFailed
from rbac_admin.models.permission import Permission, Role
from rbac_admin.rbac.requests import (
    PermissionBulkDeleteRequest,
    PermissionCreateRequest,
    PermissionUpdateRequest,
    RoleCreateRequest,
    RolePermissionGrantRequest,
    RolePermissionRevokeRequest,
    RoleUpdateRequest,
    RoleUpdateWithPermissionsRequest,
)
from rbac_admin.rbac.store import RbacStore
from rbac_admin.util.logging import get_logger
from rbac_admin.validation import ErrorBag, validate

logger = get_logger(__name__)


class RoleWithPermissions(NamedTuple):
    role: Role
    permissions: List[Permission]

    def to_dict(self, full=False):
        return self.role.to_dict(self.permissions, full=full)


def audit_rejections(log_name: str, action: str):
    """Record an audit entry whenever the wrapped operation fails validation."""

    def decorator(method):
        @functools.wraps(method)
        def wrapper(self, ctx: RequestContext, *args, **kwargs):
            try:
                return method(self, ctx, *args, **kwargs)
            except ValidationFailed as e:
                self.audit.record(
                    ctx,
                    log_name=log_name,
                    description=f"Rejected request to {action}.",
                    event="Validation Failed",
                    properties={"errors": e.errors},
                )
                raise

        return wrapper

    return decorator


def _require_items(items: list):
    if not items:
        raise ValidationFailed({"body": ["The body field must have at least 1 items."]})


class RbacService:
    def __init__(self, store: RbacStore, audit: AuditSink, default_guard_name: str):
        self.store = store
        self.audit = audit
        self.default_guard_name = default_guard_name

    # permission set primitives, run inside the caller's transaction

    def synchronize(
        self, role_id: int, permission_ids: Iterable[int]
    ) -> Tuple[Set[int], Set[int]]:
        current = self.store.permission_ids_for_role(role_id)
        desired = set(permission_ids)
        to_add = desired - current
        to_remove = current - desired
        self.store.attach_permissions(role_id, to_add)
        self.store.detach_permissions(role_id, to_remove)
        return to_add, to_remove

    def grant(self, role_id: int, permission_ids: Iterable[int]) -> Set[int]:
        current = self.store.permission_ids_for_role(role_id)
        to_add = set(permission_ids) - current
        self.store.attach_permissions(role_id, to_add)
        return to_add

    def revoke(self, role_id: int, permission_ids: Iterable[int]) -> Set[int]:
        current = self.store.permission_ids_for_role(role_id)
        to_remove = set(permission_ids) & current
        self.store.detach_permissions(role_id, to_remove)
        return to_remove

    # helpers

    def _not_found(
        self,
        ctx: RequestContext,
        log_name: str,
        message: str,
        description: str,
        properties: Dict[str, Any],
    ) -> NotFound:
        self.audit.record(
            ctx,
            log_name=log_name,
            description=description,
            event=f"{log_name} Not Found",
            properties=properties,
        )
        return NotFound(message, [description])

    def _missing_permission(self, ctx, permission_id: int, action: str) -> NotFound:
        return self._not_found(
            ctx,
            LOG_NAME.PERMISSION,
            "Permission not found.",
            f"Failed to {action} permission with ID: {permission_id}",
            {"permission_id": permission_id},
        )

    def _missing_role(self, ctx, role_id: int, action: str) -> NotFound:
        return self._not_found(
            ctx,
            LOG_NAME.ROLE,
            "Role not found.",
            f"Failed to {action} role with ID: {role_id}",
            {"role_id": role_id},
        )

    def _resolve_permission_names(
        self, errors: ErrorBag, names: List[str], prefix: str
    ) -> Dict[str, Permission]:
        known = {
            permission.name: permission
            for permission in self.store.find_permissions_by_names(names)
        }
        for index, name in enumerate(names):
            if name not in known:
                field = f"{prefix}{index}"
                errors.add(field, f"The selected {field} is invalid.")
        return known

    def _resolve_permission_ids(
        self, errors: ErrorBag, permission_ids: List[int], prefix: str
    ) -> Dict[int, Permission]:
        known = {
            permission.id: permission
            for permission in self.store.find_permissions_by_ids(permission_ids)
        }
        for index, permission_id in enumerate(permission_ids):
            if permission_id not in known:
                field = f"{prefix}{index}"
                errors.add(field, f"The selected {field} is invalid.")
        return known

    def _with_permissions(self, roles: List[Role]) -> List[RoleWithPermissions]:
        permissions = self.store.permissions_for_roles(role.id for role in roles)
        return [RoleWithPermissions(role, permissions[role.id]) for role in roles]

    # permissions

    @audit_rejections(LOG_NAME.PERMISSION, "create permissions")
    def create_permissions(self, ctx: RequestContext, payload: Any) -> List[Permission]:
        items = validate(List[PermissionCreateRequest], payload)
        _require_items(items)

        errors = ErrorBag()
        taken = self.store.existing_permission_names(item.name for item in items)
        seen = set()
        for index, item in enumerate(items):
            field = f"{index}.name"
            if item.name in taken:
                errors.add(field, f"The {field} has already been taken.")
            elif item.name in seen:
                errors.add(field, f"The {field} field has a duplicate value.")
            seen.add(item.name)
        errors.raise_if_any()

        with self.store.transaction():
            permissions = [
                self.store.create_permission(
                    item.name, item.guard_name or self.default_guard_name
                )
                for item in items
            ]

        logger.info(f"Created {len(permissions)} permissions")
        self.audit.record(
            ctx,
            log_name=LOG_NAME.PERMISSION,
            description="Created permissions.",
            event="Permissions Created",
            properties={"permissions": [p.to_dict() for p in permissions]},
        )
        return permissions

    def list_permissions(self, ctx: RequestContext) -> List[Permission]:
        permissions = self.store.list_permissions()
        self.audit.record(
            ctx,
            log_name=LOG_NAME.PERMISSION,
            description="Retrieved all permissions.",
            event="Permissions Retrieved",
            properties={"permissions_count": len(permissions)},
        )
        return permissions

    def get_permission(self, ctx: RequestContext, permission_id: int) -> Permission:
        permission = self.store.get_permission(permission_id)
        if permission is None:
            raise self._missing_permission(ctx, permission_id, "retrieve")

        self.audit.record(
            ctx,
            log_name=LOG_NAME.PERMISSION,
            description=f"Retrieved permission with ID: {permission_id}",
            event="Permission Retrieved",
            properties={"permission": permission.to_dict()},
        )
        return permission

    @audit_rejections(LOG_NAME.PERMISSION, "rename a permission")
    def rename_permission(
        self, ctx: RequestContext, permission_id: int, payload: Any
    ) -> Permission:
        request = validate(PermissionUpdateRequest, payload)
        if self.store.permission_name_taken(request.name, exclude_id=permission_id):
            raise ValidationFailed({"name": ["The name has already been taken."]})

        permission = self.store.get_permission(permission_id)
        if permission is None:
            raise self._missing_permission(ctx, permission_id, "find")

        old_name = permission.name
        with self.store.transaction():
            self.store.rename_permission(permission, request.name)

        logger.info(f"Renamed permission {permission_id} from {old_name} to {request.name}")
        self.audit.record(
            ctx,
            log_name=LOG_NAME.PERMISSION,
            description=f"Updated permission name to: {permission.name}",
            event="Permission Updated",
            properties={
                "permission_id": permission.id,
                "old_name": old_name,
                "new_name": permission.name,
            },
        )
        return permission

    def delete_permission(self, ctx: RequestContext, permission_id: int):
        permission = self.store.get_permission(permission_id)
        if permission is None:
            raise self._missing_permission(ctx, permission_id, "delete")

        permission_details = permission.to_dict()
        with self.store.transaction():
            self.store.delete_permissions([permission_id])

        logger.info(f"Deleted permission {permission_id}")
        self.audit.record(
            ctx,
            log_name=LOG_NAME.PERMISSION,
            description="Deleted a permission.",
            event="Permission Deleted",
            properties={"permission_details": permission_details},
        )

    @audit_rejections(LOG_NAME.PERMISSION, "delete permissions")
    def delete_permissions(self, ctx: RequestContext, payload: Any) -> List[Dict]:
        """
        Delete every permission whose id is listed.

        Ids that match nothing are ignored as long as at least one id matches;
        when none match a NotFound is raised and nothing is deleted.

        Returns:
            Snapshots of the deleted permissions
        """
        request = validate(
            PermissionBulkDeleteRequest, payload if payload is not None else {}
        )
        if not request.ids:
            raise ValidationFailed(
                {"ids": ["The ids field is required."]}, message="No IDs provided."
            )

        permissions = self.store.find_permissions_by_ids(request.ids)
        if not permissions:
            raise self._not_found(
                ctx,
                LOG_NAME.PERMISSION,
                "Permissions not found.",
                "None of the specified permissions exist.",
                {"requested_ids": request.ids},
            )

        permission_details = [permission.to_dict() for permission in permissions]
        with self.store.transaction():
            self.store.delete_permissions(permission.id for permission in permissions)

        logger.info(f"Deleted {len(permissions)} permissions")
        self.audit.record(
            ctx,
            log_name=LOG_NAME.PERMISSION,
            description="Deleted multiple permissions.",
            event="Permissions Deleted",
            properties={
                "requested_ids": request.ids,
                "permission_details": permission_details,
            },
        )
        return permission_details

    # roles

    @audit_rejections(LOG_NAME.ROLE, "create roles")
    def create_roles(self, ctx: RequestContext, payload: Any) -> List[RoleWithPermissions]:
        items = validate(List[RoleCreateRequest], payload)
        _require_items(items)

        errors = ErrorBag()
        taken = self.store.existing_role_names(item.name for item in items)
        known = {
            permission.name: permission
            for permission in self.store.find_permissions_by_names(
                name for item in items for name in item.permissions
            )
        }
        seen = set()
        for index, item in enumerate(items):
            field = f"{index}.name"
            if item.name in taken:
                errors.add(field, f"The {field} has already been taken.")
            elif item.name in seen:
                errors.add(field, f"The {field} field has a duplicate value.")
            seen.add(item.name)

            for position, name in enumerate(item.permissions):
                if name not in known:
                    field = f"{index}.permissions.{position}"
                    errors.add(field, f"The selected {field} is invalid.")
        errors.raise_if_any()

        created = []
        with self.store.transaction():
            for item in items:
                role = self.store.create_role(
                    item.name, item.guard_name or self.default_guard_name
                )
                self.synchronize(role.id, (known[name].id for name in item.permissions))
                created.append(role)
            roles = self._with_permissions(created)

        logger.info(f"Created {len(roles)} roles")
        self.audit.record(
            ctx,
            log_name=LOG_NAME.ROLE,
            description="Created roles with permissions.",
            event="Roles Created",
            properties={"roles": [role.to_dict() for role in roles]},
        )
        return roles

    def list_roles(self, ctx: RequestContext) -> List[RoleWithPermissions]:
        roles = self._with_permissions(self.store.list_roles())
        self.audit.record(
            ctx,
            log_name=LOG_NAME.ROLE,
            description="Retrieved all roles with permission names.",
            event="Roles Retrieved",
            properties={"role_count": len(roles)},
        )
        return roles

    def list_roles_with_permissions(self, ctx: RequestContext) -> List[RoleWithPermissions]:
        roles = self._with_permissions(self.store.list_roles())
        self.audit.record(
            ctx,
            log_name=LOG_NAME.ROLE,
            description="Retrieved all roles with permissions.",
            event="Roles Retrieved with Permissions",
            properties={"roles_count": len(roles)},
        )
        return roles

    def _get_role(self, ctx: RequestContext, role_id: int, full: bool) -> RoleWithPermissions:
        role = self.store.get_role(role_id)
        if role is None:
            raise self._missing_role(ctx, role_id, "retrieve")

        result = RoleWithPermissions(role, self.store.permissions_for_role(role_id))
        self.audit.record(
            ctx,
            log_name=LOG_NAME.ROLE,
            description=f"Retrieved role with ID: {role_id}",
            event="Role Retrieved with Permissions" if full else "Role Retrieved",
            properties={"role": result.to_dict(full=full)},
        )
        return result

    def get_role(self, ctx: RequestContext, role_id: int) -> RoleWithPermissions:
        return self._get_role(ctx, role_id, full=False)

    def get_role_with_permissions(
        self, ctx: RequestContext, role_id: int
    ) -> RoleWithPermissions:
        return self._get_role(ctx, role_id, full=True)

    def _check_role_name(self, name: str, role_id: int, errors: ErrorBag):
        if self.store.role_name_taken(name, exclude_id=role_id):
            errors.add("name", "The name has already been taken.")

    @audit_rejections(LOG_NAME.ROLE, "update a role")
    def update_role(self, ctx: RequestContext, role_id: int, payload: Any) -> Role:
        request = validate(RoleUpdateRequest, payload)
        errors = ErrorBag()
        self._check_role_name(request.name, role_id, errors)
        errors.raise_if_any()

        role = self.store.get_role(role_id)
        if role is None:
            raise self._missing_role(ctx, role_id, "find")

        with self.store.transaction():
            self.store.update_role(
                role, request.name, request.guard_name or role.guard_name
            )

        logger.info(f"Updated role {role_id}")
        self.audit.record(
            ctx,
            log_name=LOG_NAME.ROLE,
            description="Updated role details",
            event="Role Updated",
            properties={"role_details": role.to_dict()},
        )
        return role

    @audit_rejections(LOG_NAME.ROLE, "update a role and its permissions")
    def update_role_with_permissions(
        self, ctx: RequestContext, role_id: int, payload: Any
    ) -> RoleWithPermissions:
        request = validate(RoleUpdateWithPermissionsRequest, payload)
        errors = ErrorBag()
        self._check_role_name(request.name, role_id, errors)
        self._resolve_permission_ids(errors, request.permissions, "permissions.")
        errors.raise_if_any()

        role = self.store.get_role(role_id)
        if role is None:
            raise self._missing_role(ctx, role_id, "find")

        with self.store.transaction():
            self.store.update_role(
                role, request.name, request.guard_name or role.guard_name
            )
            added, removed = self.synchronize(role.id, request.permissions)
            result = RoleWithPermissions(role, self.store.permissions_for_role(role.id))

        logger.info(
            f"Updated role {role_id} and synchronized permissions "
            f"(+{len(added)}, -{len(removed)})"
        )
        self.audit.record(
            ctx,
            log_name=LOG_NAME.ROLE,
            description="Updated role and permissions",
            event="Role Updated with Permissions",
            properties={
                "role_details": role.to_dict(),
                "permissions": [p.name for p in result.permissions],
                "added_permission_ids": sorted(added),
                "removed_permission_ids": sorted(removed),
            },
        )
        return result

    @audit_rejections(LOG_NAME.ROLE, "assign permissions to a role")
    def grant_permissions(
        self, ctx: RequestContext, role_id: int, payload: Any
    ) -> RoleWithPermissions:
        request = validate(RolePermissionGrantRequest, payload)
        errors = ErrorBag()
        known = self._resolve_permission_names(errors, request.permissions, "permissions.")
        errors.raise_if_any()

        role = self.store.get_role(role_id)
        if role is None:
            raise self._missing_role(ctx, role_id, "assign permissions to")

        with self.store.transaction():
            added = self.grant(role.id, (known[name].id for name in request.permissions))
            result = RoleWithPermissions(role, self.store.permissions_for_role(role.id))

        logger.info(f"Granted {len(added)} new permissions to role {role_id}")
        self.audit.record(
            ctx,
            log_name=LOG_NAME.ROLE,
            description="Assigned permissions to role",
            event="Permissions Assigned to Role",
            properties={
                "role_id": role.id,
                "permissions": request.permissions,
                "granted_permission_ids": sorted(added),
            },
        )
        return result

    @audit_rejections(LOG_NAME.ROLE, "detach permissions from a role")
    def revoke_permissions(
        self, ctx: RequestContext, role_id: int, payload: Any
    ) -> RoleWithPermissions:
        request = validate(RolePermissionRevokeRequest, payload)
        errors = ErrorBag()
        known = self._resolve_permission_ids(errors, request.permissions, "permissions.")
        errors.raise_if_any()

        role = self.store.get_role(role_id)
        if role is None:
            raise self._missing_role(ctx, role_id, "detach permissions from")

        with self.store.transaction():
            removed = self.revoke(role.id, request.permissions)
            result = RoleWithPermissions(role, self.store.permissions_for_role(role.id))

        logger.info(f"Revoked {len(removed)} permissions from role {role_id}")
        self.audit.record(
            ctx,
            log_name=LOG_NAME.ROLE,
            description="Detached permissions from role.",
            event="Permissions Detached",
            properties={
                "role": role.name,
                "detached_permissions": sorted(
                    {known[permission_id].name for permission_id in request.permissions}
                ),
                "revoked_permission_ids": sorted(removed),
            },
        )
        return result

    def delete_role(self, ctx: RequestContext, role_id: int):
        role = self.store.get_role(role_id)
        if role is None:
            raise self._missing_role(ctx, role_id, "delete")

        with self.store.transaction():
            self.store.delete_role(role_id)

        logger.info(f"Deleted role {role_id}")
        self.audit.record(
            ctx,
            log_name=LOG_NAME.ROLE,
            description=f"Deleted role with ID: {role_id}",
            event="Role Deleted",
            properties={"role_id": role_id},
        )
