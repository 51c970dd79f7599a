from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

from rbac_admin.constants import NAME_MAX_LENGTH


class PermissionCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    guard_name: Optional[str] = Field(default=None, max_length=NAME_MAX_LENGTH)


class PermissionUpdateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)


class PermissionBulkDeleteRequest(BaseModel):
    ids: List[int] = Field(default_factory=list)


class RoleCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    guard_name: Optional[str] = Field(default=None, max_length=NAME_MAX_LENGTH)
    permissions: List[str] = Field(min_length=1)


class RoleUpdateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    guard_name: Optional[str] = Field(default=None, max_length=NAME_MAX_LENGTH)


class RoleUpdateWithPermissionsRequest(RoleUpdateRequest):
    permissions: List[int] = Field(min_length=1)


class RolePermissionGrantRequest(BaseModel):
    permissions: List[str] = Field(min_length=1)


class RolePermissionRevokeRequest(BaseModel):
    permissions: List[int] = Field(min_length=1)


class ActivityLogDateRangeRequest(BaseModel):
    start_date: date
    end_date: date
