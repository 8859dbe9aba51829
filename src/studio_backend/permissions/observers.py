"""
Cache invalidation hooks for role and permission writes.

The role/permission store calls these from its write paths and awaits
them before the write returns. All hooks are idempotent: invalidating
twice only costs an extra cache miss.
"""

import logging
from typing import Callable, Iterable, Optional

from studio_backend.interface.permissions import PermissionEntry
from studio_backend.interface.roles import Role
from studio_backend.permissions.cache import AuthorizationCache

logger = logging.getLogger(__name__)

RoleMembersLookup = Callable[[str], Iterable[str]]


class MutationObserver:
    """Translates role/permission mutations into cache invalidations

    Args:
        cache: The authorization cache to invalidate
        role_members: Optional lookup of principal ids holding a role slug.
            When present, role updates only invalidate those principals;
            otherwise everything is invalidated.
    """

    def __init__(self, cache: AuthorizationCache, role_members: Optional[RoleMembersLookup] = None):
        self.cache = cache
        self.role_members = role_members

    async def on_role_changed(self, role: Role):
        await self._invalidate_role_holders(role)

    async def on_role_permissions_changed(self, role: Role):
        # Permission membership of a role changes every holder's closure
        logger.info(f"Permissions of role {role.slug} changed")
        await self.cache.invalidate_all()

    async def on_role_deleted(self, role: Role):
        logger.info(f"Role {role.slug} deleted")
        await self.cache.invalidate_all()

    async def on_permission_renamed(self, permission: PermissionEntry, old_name: Optional[str] = None):
        logger.info(f"Permission {old_name or permission.name} renamed to {permission.name}")
        await self.cache.invalidate_all()

    async def on_permission_deleted(self, permission: PermissionEntry):
        logger.info(f"Permission {permission.name} deleted")
        await self.cache.invalidate_all()

    async def on_user_roles_changed(self, principal_id: str):
        await self.cache.invalidate(principal_id)

    async def _invalidate_role_holders(self, role: Role):
        if self.role_members is None:
            await self.cache.invalidate_all()
            return

        for principal_id in self.role_members(role.slug):
            await self.cache.invalidate(principal_id)
