"""Role and role-binding API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.domain.value_objects import ROLE_NAME_MAX_LENGTH


class RoleCreateRequest(BaseModel):
    """Request body for creating a role with optional initial permissions."""

    name: str = Field(..., min_length=1, max_length=ROLE_NAME_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=500)
    permission_ids: list[str] = Field(default_factory=list, max_length=500)


class RoleUpdate(BaseModel):
    """Request body for updating a role (partial)."""

    name: str | None = Field(default=None, min_length=1, max_length=ROLE_NAME_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=500)
    is_active: bool | None = None


class RoleResponse(BaseModel):
    """Role list/detail response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None
    is_active: bool
    is_system: bool = False
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RoleBindingResponse(BaseModel):
    """One permission bound to a role, with who bound it and when."""

    model_config = ConfigDict(from_attributes=True)

    permission_id: str
    code: str
    name: str
    category: str
    description: str | None = None
    granted_by: str | None = None
    granted_at: datetime | None = None


class RoleDetailResponse(BaseModel):
    """Role with its bindings (GET /roles/{role_id})."""

    role: RoleResponse
    permissions: list[RoleBindingResponse]


class RolePermissionAssign(BaseModel):
    """Request body for POST /roles/{role_id}/permissions.

    Either permission_id (single) or permission_ids (bulk). Bulk is strict
    unless idempotent is true, in which case already-bound ids are skipped.
    """

    permission_id: str | None = None
    permission_ids: list[str] | None = Field(default=None, max_length=500)
    idempotent: bool = False

    @model_validator(mode="after")
    def exactly_one_target(self) -> "RolePermissionAssign":
        if (self.permission_id is None) == (self.permission_ids is None):
            raise ValueError("Provide exactly one of permission_id or permission_ids")
        return self


class RolePermissionsReplace(BaseModel):
    """Request body for PUT /roles/{role_id}/permissions (full replacement)."""

    permission_ids: list[str] = Field(..., max_length=500)


class RolePermissionsAssignedResponse(BaseModel):
    """Response for POST /roles/{role_id}/permissions."""

    role_id: str
    added_permission_ids: list[str]


class RolePermissionsReplacedResponse(BaseModel):
    """Response for PUT /roles/{role_id}/permissions."""

    model_config = ConfigDict(from_attributes=True)

    role_id: str
    added_permission_ids: list[str]
    removed_permission_ids: list[str]
    bindings: list[RoleBindingResponse]
