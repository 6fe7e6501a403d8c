"""Permission catalog API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.domain.value_objects import (
    CATEGORY_MAX_LENGTH,
    PERMISSION_CODE_MAX_LENGTH,
)


class PermissionCreateRequest(BaseModel):
    """Request body for creating a permission. Code format is checked by the service."""

    code: str = Field(..., min_length=1, max_length=PERMISSION_CODE_MAX_LENGTH)
    name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=CATEGORY_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=500)


class PermissionUpdateRequest(BaseModel):
    """Request body for updating a permission (partial). Code is immutable."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=500)
    category: str | None = Field(
        default=None, min_length=1, max_length=CATEGORY_MAX_LENGTH
    )


class PermissionResponse(BaseModel):
    """Permission list/detail response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    name: str
    description: str | None
    category: str
    is_system: bool = False
    created_at: datetime | None = None


class PermissionListResponse(BaseModel):
    """Flat catalog ordered by (category, code) plus the same entries grouped by category."""

    items: list[PermissionResponse]
    by_category: dict[str, list[PermissionResponse]]
