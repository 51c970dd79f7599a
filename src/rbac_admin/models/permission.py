from typing import List, Optional

import rbac_admin.schema.postgres as schema

from ._base import Base, isoformat


class Permission(Base):
    __table__ = schema.auth.permission

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "guard_name": self.guard_name,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }


class Role(Base):
    __table__ = schema.auth.role

    def to_dict(self, permissions: Optional[List[Permission]] = None, full=False):
        payload = {
            "id": self.id,
            "name": self.name,
            "guard_name": self.guard_name,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

        if permissions is not None:
            if full:
                payload["permissions"] = [
                    permission.to_dict() for permission in permissions
                ]
            else:
                payload["permissions"] = [permission.name for permission in permissions]

        return payload


class RolePermission(Base):
    __table__ = schema.auth.role_permission
