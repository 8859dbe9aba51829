"""
Role setup utilities for initializing the system roles.

These are used during server startup, after the permission catalog has
been synced, so the protected roles exist with their default permissions.
"""

import logging
from typing import Generator, List, Tuple

from studio_backend.interface.roles import Role
from studio_backend.permissions.catalog import RoleTier, defaults_for
from studio_backend.permissions.store import InMemoryRoleStore
from studio_backend.settings import AuthorizationSettings

logger = logging.getLogger(__name__)


def system_role_permissions(settings: AuthorizationSettings) -> Generator[Tuple[str, List[str]], None, None]:
    """
    Get the default permissions of every system role.

    Yields:
        Tuples of (role_slug, permission_names). The super admin role yields
        an empty list; it holds every permission through the bypass.
    """
    yield settings.super_admin_role, []
    yield RoleTier.ADMIN.value, defaults_for(RoleTier.ADMIN)
    yield RoleTier.USER.value, defaults_for(RoleTier.USER)


async def seed_system_roles(store: InMemoryRoleStore) -> List[Role]:
    """
    Create the system roles that do not exist yet.

    Existing roles are left untouched so administrator changes survive a
    restart.

    Returns:
        The roles that were created
    """
    created = []

    for slug, permissions in system_role_permissions(store.settings):
        if store.get_role(slug) is not None:
            continue

        created.append(await store.create_role(slug, permissions=permissions))

    if created:
        logger.info(f"Seeded system roles: {', '.join(role.slug for role in created)}")

    return created
