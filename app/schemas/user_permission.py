"""User permission view, check and override API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.application.services.override_service import REASON_MAX_LENGTH
from app.domain.value_objects import PERMISSION_CODE_MAX_LENGTH
from app.shared.enums import CheckMode


class OverrideCreateRequest(BaseModel):
    """Request body for POST /users/{user_id}/permissions.

    granted=true grants the permission, granted=false denies it. Naive
    expires_at values are read as UTC.
    """

    permission_code: str = Field(..., min_length=1, max_length=PERMISSION_CODE_MAX_LENGTH)
    granted: bool
    reason: str | None = Field(default=None, max_length=REASON_MAX_LENGTH)
    expires_at: datetime | None = None


class OverrideUpdateRequest(BaseModel):
    """Request body for PATCH /users/{user_id}/permission-overrides/{override_id}."""

    granted: bool | None = None
    reason: str | None = Field(default=None, max_length=REASON_MAX_LENGTH)
    expires_at: datetime | None = None
    clear_expiry: bool = False

    @model_validator(mode="after")
    def expiry_not_both(self) -> "OverrideUpdateRequest":
        if self.clear_expiry and self.expires_at is not None:
            raise ValueError("expires_at and clear_expiry are mutually exclusive")
        return self


class OverrideResponse(BaseModel):
    """One override row, annotated with whether it has expired."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    permission_id: str
    permission_code: str
    granted: bool
    reason: str | None = None
    expires_at: datetime | None = None
    granted_by: str | None = None
    created_at: datetime
    is_expired: bool = False


class UserPermissionsResponse(BaseModel):
    """Response for GET /users/{user_id}/permissions."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    role: str | None
    effective_permissions: list[str]
    overrides: list[OverrideResponse]


class PermissionCheckResponse(BaseModel):
    """Response for GET /users/{user_id}/permissions/check."""

    user_id: str
    codes: list[str]
    mode: CheckMode
    allowed: bool


class OverridesRemovedResponse(BaseModel):
    """Response for override deletions (number of rows removed)."""

    removed: int
