"""Seed the built-in global system roles (idempotent).

Usage:
    python -m scripts.seed_system_roles
Creates the role and user_role tables if missing, then creates any system
role absent from the global scope. Uses DATABASE_URL from the environment.
"""

import asyncio
import sys

from rbac.application.services import SystemRoleInitializer
from rbac.core.config import get_settings
from rbac.infrastructure.persistence import database
from rbac.infrastructure.persistence.repositories import RoleRepository
from rbac.shared.telemetry import setup_logging


async def main() -> None:
    """Create tables and seed system roles."""
    get_settings()
    setup_logging()
    await database.init_models()
    if database.AsyncSessionLocal is None:
        print("AsyncSessionLocal not configured", file=sys.stderr)
        sys.exit(1)

    try:
        async with database.AsyncSessionLocal() as session:
            async with session.begin():
                initializer = SystemRoleInitializer(RoleRepository(session))
                created = await initializer.initialize_system_roles()
    finally:
        await database.dispose_engine()

    if created:
        print("Created system roles: " + ", ".join(role.name for role in created))
    else:
        print("System roles already present; nothing to do")


if __name__ == "__main__":
    asyncio.run(main())
