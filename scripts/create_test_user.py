"""Create a test user holding a role and print a bearer token for it (Postgres only).

Usage:
    uv run python -m scripts.create_test_user <email> [role_name]
role_name defaults to the configured admin role. The role must exist
(see scripts.seed_rbac). All imports use app.*.
"""

import asyncio
import sys

from app.core.config import get_settings
from app.infrastructure.persistence.database import dispose_engine, session_scope
from app.infrastructure.persistence.repositories import RoleRepository, UserRepository
from app.infrastructure.security.jwt import create_access_token


async def main() -> None:
    """Create test user and print an access token."""
    if len(sys.argv) < 2:
        print(
            "Usage: uv run python -m scripts.create_test_user <email> [role_name]",
            file=sys.stderr,
        )
        sys.exit(1)
    email = sys.argv[1]
    role_name = sys.argv[2] if len(sys.argv) > 2 else get_settings().admin_role_name

    try:
        async with session_scope() as session:
            if not await RoleRepository(session).get_by_name(role_name):
                print(f"Role not found: {role_name}", file=sys.stderr)
                sys.exit(1)
            user = await UserRepository(session).create_user(email=email, role=role_name)
    finally:
        await dispose_engine()

    print(f"Created user: {user.id} ({email}) with role {role_name}")
    print(f"Token: {create_access_token(user.id, role=role_name)}")


if __name__ == "__main__":
    asyncio.run(main())
