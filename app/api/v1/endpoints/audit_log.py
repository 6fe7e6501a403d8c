"""Permission audit log API: newest-first queries by entity type and/or id."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.v1.dependencies import get_audit_reader, require_role_or_permission
from app.application.dtos.audit_log import ByEntity, build_audit_filter
from app.application.dtos.user import UserResult
from app.infrastructure.services import PermissionAuditLogger
from app.schemas.audit_log import AuditLogEntryResponse, AuditLogListResponse
from app.shared.enums import AuditEntityType

router = APIRouter()

_can_view = require_role_or_permission("audit.view")


def _to_response(entries, limit: int) -> AuditLogListResponse:
    return AuditLogListResponse(
        items=[AuditLogEntryResponse.model_validate(e) for e in entries],
        limit=limit,
    )


@router.get("", response_model=AuditLogListResponse)
async def list_audit_log(
    _: Annotated[UserResult, Depends(_can_view)],
    audit: Annotated[PermissionAuditLogger, Depends(get_audit_reader)],
    entity_type: AuditEntityType | None = None,
    entity_id: str | None = None,
    limit: Annotated[int | None, Query(ge=1)] = None,
):
    """List audit entries, optionally filtered by entity_type and/or entity_id."""
    applied = audit.clamp_limit(limit)
    entries = await audit.list(build_audit_filter(entity_type, entity_id), applied)
    return _to_response(entries, applied)


@router.get("/roles/{role_id}", response_model=AuditLogListResponse)
async def list_role_audit_log(
    role_id: str,
    _: Annotated[UserResult, Depends(_can_view)],
    audit: Annotated[PermissionAuditLogger, Depends(get_audit_reader)],
    limit: Annotated[int | None, Query(ge=1)] = None,
):
    """History of one role (creation, bindings, activation, deletion)."""
    applied = audit.clamp_limit(limit)
    entries = await audit.list(
        ByEntity(entity_type=AuditEntityType.ROLE, entity_id=role_id), applied
    )
    return _to_response(entries, applied)


@router.get("/users/{user_id}", response_model=AuditLogListResponse)
async def list_user_audit_log(
    user_id: str,
    _: Annotated[UserResult, Depends(_can_view)],
    audit: Annotated[PermissionAuditLogger, Depends(get_audit_reader)],
    limit: Annotated[int | None, Query(ge=1)] = None,
):
    """History of one user's overrides."""
    applied = audit.clamp_limit(limit)
    entries = await audit.list(
        ByEntity(entity_type=AuditEntityType.USER, entity_id=user_id), applied
    )
    return _to_response(entries, applied)
