"""Infrastructure implementations of application service interfaces."""

from app.infrastructure.services.permission_audit_logger import PermissionAuditLogger
from app.infrastructure.services.rbac_catalog_seeder import (
    DEFAULT_ROLES,
    SYSTEM_PERMISSIONS,
    RbacCatalogSeeder,
    SeedResult,
)

__all__ = [
    "DEFAULT_ROLES",
    "PermissionAuditLogger",
    "RbacCatalogSeeder",
    "SYSTEM_PERMISSIONS",
    "SeedResult",
]
