"""DB session and audit logger dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.database import get_db, get_db_transactional
from app.infrastructure.services import PermissionAuditLogger


async def get_audit_logger(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> PermissionAuditLogger:
    """Audit logger for the write path (same session and transaction as the mutation)."""
    return PermissionAuditLogger(db)


async def get_audit_reader(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PermissionAuditLogger:
    """Audit logger for read-only queries (list)."""
    return PermissionAuditLogger(db)
