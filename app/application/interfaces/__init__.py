"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import (
    IPermissionAuditLogRepository,
    IPermissionOverrideRepository,
    IPermissionRepository,
    IRolePermissionRepository,
    IRoleRepository,
    IUserRepository,
)
from app.application.interfaces.services import IAuditLogger, IPermissionResolver

__all__ = [
    "IAuditLogger",
    "IPermissionAuditLogRepository",
    "IPermissionOverrideRepository",
    "IPermissionRepository",
    "IPermissionResolver",
    "IRolePermissionRepository",
    "IRoleRepository",
    "IUserRepository",
]
