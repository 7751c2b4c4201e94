"""Bootstrap the administrative permissions, an ADMIN role and a first administrator.

Usage:
    python -m scripts.seed_rbac <admin_username>

Creates ROLE_MGMT and USER_MGMT if missing, an ADMIN role linking both, and
grants ADMIN to the user (provisioned if new). Services are built without a
guard, since no administrator exists yet. Safe to run repeatedly. Requires
Postgres (DATABASE_URL) with migrations applied.
"""

import asyncio
import sys

from authz.composition import services_for_session
from authz.core.config import get_settings
from authz.core.constants import USER_ADMIN_PERMISSION_KEY
from authz.domain.exceptions import AuthzException, ConflictError
from authz.infrastructure.persistence.database import transactional_session
from authz.shared.telemetry.logging import setup_logging

ADMIN_ROLE_NAME = "ADMIN"
SYSTEM_ACTOR = "sys"


def _admin_permissions() -> dict[str, str]:
    return {
        get_settings().admin_permission_key: "Manage roles, permissions and assignments",
        USER_ADMIN_PERMISSION_KEY: "Manage users",
    }


async def seed(admin_username: str) -> str:
    """Run the bootstrap in one transaction; return the administrator's user id."""
    async with transactional_session() as session:
        services = services_for_session(session, guarded=False)
        users = services.users
        permissions = services.permissions
        roles = services.roles
        ledger = services.ledger
        admin_permissions = _admin_permissions()

        for key, display_name in admin_permissions.items():
            if await permissions.get_by_key(key) is None:
                await permissions.create_permission(
                    key, display_name, actor_id=SYSTEM_ACTOR
                )
                print(f"Created permission {key}")

        role = await roles.get_role_by_name(ADMIN_ROLE_NAME)
        if role is None:
            role = await roles.create_role(
                ADMIN_ROLE_NAME,
                "Bootstrap administrator",
                list(admin_permissions),
                actor_id=SYSTEM_ACTOR,
            )
            print(f"Created role {ADMIN_ROLE_NAME} ({role.id})")
        else:
            for key in admin_permissions:
                try:
                    await roles.assign_permission(role.id, key, actor_id=SYSTEM_ACTOR)
                except ConflictError:
                    continue

        admin = await users.provision_user(admin_username)
        if role.id in await ledger.roles_of_user(admin.id):
            print(f"{admin.username} already holds {ADMIN_ROLE_NAME}")
        else:
            await ledger.grant(admin.id, role.id, granted_by=SYSTEM_ACTOR)
            print(f"Granted {ADMIN_ROLE_NAME} to {admin.username} ({admin.id})")
        return admin.id


async def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python -m scripts.seed_rbac <admin_username>", file=sys.stderr)
        sys.exit(1)
    setup_logging()
    try:
        await seed(sys.argv[1])
    except AuthzException as e:
        print(f"Seeding failed: {e.message}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
