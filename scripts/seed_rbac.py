"""Seed the default permission catalog and system roles.

Usage:
    uv run python -m scripts.seed_rbac [actor_user_id]
Idempotent: existing permissions and roles are left as they are and only
missing bindings of system roles are added. Requires Postgres (run
`alembic upgrade head` first). All imports use app.*.
"""

import asyncio
import sys

from app.core.config import get_settings
from app.infrastructure.persistence.database import dispose_engine, session_scope
from app.infrastructure.services import RbacCatalogSeeder
from app.shared.telemetry.logging import setup_logging


async def main() -> None:
    """Seed catalog and roles in one transaction."""
    actor_id = sys.argv[1] if len(sys.argv) > 1 else None

    get_settings()
    setup_logging()
    try:
        async with session_scope() as session:
            result = await RbacCatalogSeeder(session).seed(actor_id=actor_id)
    finally:
        await dispose_engine()

    print(f"Permissions created: {len(result.permissions_created)}")
    print(f"Roles created: {', '.join(result.roles_created) or '-'}")
    for role_name, count in sorted(result.bindings_added.items()):
        print(f"  {role_name}: +{count} permissions")


if __name__ == "__main__":
    asyncio.run(main())
