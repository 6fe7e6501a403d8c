"""Permission audit log ORM model. Append-only record of every RBAC mutation.

Rows carry no foreign keys so they outlive the roles, users and permissions
they describe and are never touched by cascades.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import Connection, DateTime, Index, String, Text, event, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, Mapper, mapped_column

from app.infrastructure.persistence.database import Base
from app.shared.utils.generators import generate_cuid


class PermissionAuditLog(Base):
    """Audit row: who changed which role/user/permission, how, and when. No update/delete."""

    __tablename__ = "permission_audit_log"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_cuid)
    entity_type: Mapped[str] = mapped_column(String(20), nullable=False)
    entity_id: Mapped[str] = mapped_column(String, nullable=False)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    permission_code: Mapped[str | None] = mapped_column(String(100), nullable=True)
    role_id: Mapped[str | None] = mapped_column(String, nullable=True)
    performed_by: Mapped[str | None] = mapped_column(String, nullable=True)
    # "metadata" is reserved on declarative classes.
    audit_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSONB, nullable=False, server_default=text("'{}'::jsonb")
    )
    ip_address: Mapped[str | None] = mapped_column(String, nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    request_id: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )

    __table_args__ = (
        Index("ix_permission_audit_entity", "entity_type", "entity_id", "created_at"),
        Index("ix_permission_audit_entity_id", "entity_id"),
        Index("ix_permission_audit_created_at", "created_at"),
    )


@event.listens_for(PermissionAuditLog, "before_update")
def _prevent_audit_log_updates(
    _mapper: Mapper[Any], _connection: Connection, _target: PermissionAuditLog
) -> None:
    """Audit log entries are append-only; updates are forbidden."""
    raise ValueError("Permission audit log entries are immutable and cannot be updated.")


@event.listens_for(PermissionAuditLog, "before_delete")
def _prevent_audit_log_deletes(
    _mapper: Mapper[Any], _connection: Connection, _target: PermissionAuditLog
) -> None:
    """Audit log entries are retained indefinitely."""
    raise ValueError("Permission audit log entries cannot be deleted.")
