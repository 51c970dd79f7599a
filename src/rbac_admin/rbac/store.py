"""
Persistence for permissions, roles and the role_permission join table.

RbacStore is the only place that talks to the database on behalf of the service.
Lookups return the mapped row or None; nothing here commits on its own except
transaction(), which wraps a unit of work in a single commit or rollback.
"""

from collections import defaultdict
from contextlib import contextmanager
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import delete, insert, select
from sqlalchemy.orm import Session

from rbac_admin.models.permission import Permission, Role, RolePermission


class RbacStore:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def transaction(self):
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    # permissions

    def create_permission(self, name: str, guard_name: str) -> Permission:
        permission = Permission(name=name, guard_name=guard_name)
        self.db.add(permission)
        self.db.flush()
        self.db.refresh(permission)
        return permission

    def list_permissions(self) -> List[Permission]:
        return list(self.db.scalars(select(Permission).order_by(Permission.id)))

    def get_permission(self, permission_id: int) -> Optional[Permission]:
        return self.db.get(Permission, permission_id)

    def find_permissions_by_ids(self, permission_ids: Iterable[int]) -> List[Permission]:
        permission_ids = set(permission_ids)
        if not permission_ids:
            return []
        return list(
            self.db.scalars(
                select(Permission)
                .where(Permission.id.in_(permission_ids))
                .order_by(Permission.id)
            )
        )

    def find_permissions_by_names(self, names: Iterable[str]) -> List[Permission]:
        names = set(names)
        if not names:
            return []
        return list(
            self.db.scalars(
                select(Permission)
                .where(Permission.name.in_(names))
                .order_by(Permission.id)
            )
        )

    def existing_permission_names(self, names: Iterable[str]) -> Set[str]:
        return {permission.name for permission in self.find_permissions_by_names(names)}

    def permission_name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        query = select(Permission.id).where(Permission.name == name)
        if exclude_id is not None:
            query = query.where(Permission.id != exclude_id)
        return self.db.scalar(query.limit(1)) is not None

    def rename_permission(self, permission: Permission, name: str) -> Permission:
        permission.name = name
        self.db.flush()
        self.db.refresh(permission)
        return permission

    def delete_permissions(self, permission_ids: Iterable[int]):
        permission_ids = set(permission_ids)
        if not permission_ids:
            return
        self.db.execute(
            delete(RolePermission).where(
                RolePermission.permission_id.in_(permission_ids)
            )
        )
        self.db.execute(delete(Permission).where(Permission.id.in_(permission_ids)))

    # roles

    def create_role(self, name: str, guard_name: str) -> Role:
        role = Role(name=name, guard_name=guard_name)
        self.db.add(role)
        self.db.flush()
        self.db.refresh(role)
        return role

    def list_roles(self) -> List[Role]:
        return list(self.db.scalars(select(Role).order_by(Role.id)))

    def get_role(self, role_id: int) -> Optional[Role]:
        return self.db.get(Role, role_id)

    def existing_role_names(self, names: Iterable[str]) -> Set[str]:
        names = set(names)
        if not names:
            return set()
        return set(self.db.scalars(select(Role.name).where(Role.name.in_(names))))

    def role_name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        query = select(Role.id).where(Role.name == name)
        if exclude_id is not None:
            query = query.where(Role.id != exclude_id)
        return self.db.scalar(query.limit(1)) is not None

    def update_role(self, role: Role, name: str, guard_name: str) -> Role:
        role.name = name
        role.guard_name = guard_name
        self.db.flush()
        self.db.refresh(role)
        return role

    def delete_role(self, role_id: int):
        self.db.execute(delete(RolePermission).where(RolePermission.role_id == role_id))
        self.db.execute(delete(Role).where(Role.id == role_id))

    # role <-> permission

    def permission_ids_for_role(self, role_id: int) -> Set[int]:
        return set(
            self.db.scalars(
                select(RolePermission.permission_id).where(
                    RolePermission.role_id == role_id
                )
            )
        )

    def permissions_for_roles(self, role_ids: Iterable[int]) -> Dict[int, List[Permission]]:
        role_ids = set(role_ids)
        permissions = defaultdict(list)
        if not role_ids:
            return permissions

        rows = self.db.execute(
            select(RolePermission.role_id, Permission)
            .join(Permission, Permission.id == RolePermission.permission_id)
            .where(RolePermission.role_id.in_(role_ids))
            .order_by(RolePermission.role_id, Permission.id)
        )
        for role_id, permission in rows:
            permissions[role_id].append(permission)
        return permissions

    def permissions_for_role(self, role_id: int) -> List[Permission]:
        return self.permissions_for_roles([role_id])[role_id]

    def attach_permissions(self, role_id: int, permission_ids: Iterable[int]):
        rows = [
            {"role_id": role_id, "permission_id": permission_id}
            for permission_id in sorted(set(permission_ids))
        ]
        if rows:
            self.db.execute(insert(RolePermission), rows)

    def detach_permissions(self, role_id: int, permission_ids: Iterable[int]):
        permission_ids = set(permission_ids)
        if not permission_ids:
            return
        self.db.execute(
            delete(RolePermission).where(
                RolePermission.role_id == role_id,
                RolePermission.permission_id.in_(permission_ids),
            )
        )
