"""Add trigger to enforce immutability of permission_audit_log.

Revision ID: 7c4d2b8e5a31
Revises: 3f1a9c2e7b10
Create Date: 2026-10-18

The permission audit trail is append-only and retained indefinitely. The
trigger rejects UPDATE and DELETE at the database level (in addition to the
ORM listeners on PermissionAuditLog).
"""

from typing import Sequence, Union

from alembic import op

revision: str = "7c4d2b8e5a31"
down_revision: Union[str, Sequence[str], None] = "3f1a9c2e7b10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _trigger_function() -> str:
    """Return SQL for trigger function that blocks permission_audit_log UPDATE/DELETE."""
    return """
    CREATE OR REPLACE FUNCTION prevent_permission_audit_log_mutation()
    RETURNS TRIGGER
    LANGUAGE plpgsql
    AS $$
    BEGIN
        RAISE EXCEPTION 'permission_audit_log rows are append-only and cannot be updated or deleted'
            USING ERRCODE = 'integrity_constraint_violation';
    END;
    $$
    """


def upgrade() -> None:
    op.execute(_trigger_function())
    op.execute(
        "CREATE TRIGGER prevent_permission_audit_log_update_delete "
        "BEFORE UPDATE OR DELETE ON permission_audit_log "
        "FOR EACH ROW EXECUTE PROCEDURE prevent_permission_audit_log_mutation()"
    )


def downgrade() -> None:
    op.execute(
        "DROP TRIGGER IF EXISTS prevent_permission_audit_log_update_delete "
        "ON permission_audit_log"
    )
    op.execute("DROP FUNCTION IF EXISTS prevent_permission_audit_log_mutation()")
