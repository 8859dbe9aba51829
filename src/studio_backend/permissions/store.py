"""
In-memory role/permission store.

This is the system of record that the authorization cache sits in front
of: roles, the permission catalog, role -> permission attachments and
user -> role assignments. Every write path awaits the mutation observer
before returning, so a write is never reported complete while a stale
cached decision can still be served.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set
from uuid import uuid4
from pydantic import BaseModel, Field

from studio_backend.exceptions import InvalidPermissionError, ProtectedRoleError
from studio_backend.interface.permissions import PermissionEntry
from studio_backend.interface.roles import Role
from studio_backend.permissions import catalog
from studio_backend.permissions.observers import MutationObserver
from studio_backend.settings import AuthorizationSettings

logger = logging.getLogger(__name__)


class CatalogSyncResult(BaseModel):
    added: List[str] = Field(default_factory=list)
    updated: List[str] = Field(default_factory=list)
    removed: List[str] = Field(default_factory=list)


class InMemoryRoleStore:
    """Role/permission store and principal data source"""

    def __init__(self, settings: AuthorizationSettings, observer: Optional[MutationObserver] = None):
        self.settings = settings
        self.observer = observer
        self._roles: Dict[str, Role] = {}
        self._permissions: Dict[str, PermissionEntry] = {}
        self._user_roles: Dict[str, Set[str]] = defaultdict(set)

    # Reads

    def get_role(self, slug: str) -> Optional[Role]:
        role = self._roles.get(slug)
        return role.model_copy(deep=True) if role else None

    def roles(self) -> List[Role]:
        return [role.model_copy(deep=True) for role in self._roles.values()]

    def permissions(self) -> List[PermissionEntry]:
        return list(self._permissions.values())

    def role_members(self, slug: str) -> List[str]:
        """Principal ids holding a role"""
        return [user_id for user_id, slugs in self._user_roles.items() if slug in slugs]

    def roles_for(self, user_id: str) -> List[str]:
        return sorted(self._user_roles.get(user_id, set()))

    def permissions_for(self, user_id: str) -> Set[str]:
        """Transitive permission names of a user through its roles"""
        names: Set[str] = set()
        for slug in self._user_roles.get(user_id, set()):
            role = self._roles.get(slug)
            if role is not None:
                names.update(role.permissions)
        return names

    # Role writes

    async def create_role(self, slug: str, name: Optional[str] = None,
                          description: Optional[str] = None,
                          permissions: Iterable[str] = ()) -> Role:
        if slug in self._roles:
            raise ValueError(f"Role '{slug}' already exists")

        permissions = set(permissions)
        if permissions and self._is_super_admin_role(slug):
            raise ProtectedRoleError(slug, "given explicit permissions")

        role = Role(
            id=str(uuid4()),
            slug=slug,
            name=name,
            description=description,
            permissions=self._known_permissions(permissions),
        )
        self._roles[slug] = role
        logger.info(f"Created role {role.display_name} ({slug})")

        await self._notify("on_role_changed", role)
        return role.model_copy(deep=True)

    async def update_role(self, slug: str, name: Optional[str] = None,
                          description: Optional[str] = None) -> Role:
        role = self._require_role(slug)
        if self._is_super_admin_role(slug):
            raise ProtectedRoleError(slug, "modified")

        if name is not None:
            role.name = name
        if description is not None:
            role.description = description

        await self._notify("on_role_changed", role)
        return role.model_copy(deep=True)

    async def delete_role(self, slug: str):
        role = self._require_role(slug)
        if slug in self.settings.system_roles:
            raise ProtectedRoleError(slug, "deleted")

        del self._roles[slug]
        for slugs in self._user_roles.values():
            slugs.discard(slug)

        await self._notify("on_role_deleted", role)

    # Role -> permission attachments

    async def attach_permissions(self, slug: str, names: Iterable[str]) -> Role:
        role = self._require_mutable_permissions(slug)
        role.permissions |= self._known_permissions(names)
        await self._notify("on_role_permissions_changed", role)
        return role.model_copy(deep=True)

    async def detach_permissions(self, slug: str, names: Iterable[str]) -> Role:
        role = self._require_mutable_permissions(slug)
        role.permissions -= set(names)
        await self._notify("on_role_permissions_changed", role)
        return role.model_copy(deep=True)

    async def sync_role_permissions(self, slug: str, names: Iterable[str]) -> Role:
        """Replace the permission set of a role"""
        role = self._require_mutable_permissions(slug)
        role.permissions = self._known_permissions(names)
        await self._notify("on_role_permissions_changed", role)
        return role.model_copy(deep=True)

    # User -> role assignments

    async def assign_role(self, user_id: str, slug: str):
        self._require_role(slug)
        self._user_roles[user_id].add(slug)
        await self._notify("on_user_roles_changed", user_id)

    async def revoke_role(self, user_id: str, slug: str):
        self._user_roles[user_id].discard(slug)
        await self._notify("on_user_roles_changed", user_id)

    # Permission catalog

    async def sync_catalog(self, entries: Optional[Iterable[PermissionEntry]] = None,
                           prune: bool = True) -> CatalogSyncResult:
        """Bring stored permissions in line with the static catalog

        New entries are added, changed display names or groups are updated
        in place, and with `prune` entries no longer in the catalog are
        removed and detached from every role.
        """
        entries = list(entries if entries is not None else catalog.entries())
        result = CatalogSyncResult()

        for entry in entries:
            existing = self._permissions.get(entry.name)
            if existing is None:
                result.added.append(entry.name)
            elif existing != entry:
                result.updated.append(entry.name)
            self._permissions[entry.name] = entry

        if prune:
            defined = {entry.name for entry in entries}
            for name in [n for n in self._permissions if n not in defined]:
                logger.warning(f"Removing orphaned permission {name}")
                await self._delete_permission(name)
                result.removed.append(name)

        logger.info(
            f"Permission catalog synced: {len(result.added)} added, "
            f"{len(result.updated)} updated, {len(result.removed)} removed"
        )
        return result

    async def rename_permission(self, old_name: str, new_name: str) -> PermissionEntry:
        if not catalog.is_well_formed(new_name):
            raise InvalidPermissionError(new_name, "malformed permission name")
        if old_name not in self._permissions:
            raise InvalidPermissionError(old_name)

        entry = self._permissions.pop(old_name).model_copy(update={"name": new_name})
        self._permissions[new_name] = entry
        for role in self._roles.values():
            if old_name in role.permissions:
                role.permissions = (role.permissions - {old_name}) | {new_name}

        await self._notify("on_permission_renamed", entry, old_name)
        return entry

    async def _delete_permission(self, name: str):
        entry = self._permissions.pop(name)
        for role in self._roles.values():
            role.permissions.discard(name)
        await self._notify("on_permission_deleted", entry)

    # Helpers

    def _is_super_admin_role(self, slug: str) -> bool:
        return slug == self.settings.super_admin_role

    def _require_role(self, slug: str) -> Role:
        role = self._roles.get(slug)
        if role is None:
            raise KeyError(f"Role '{slug}' does not exist")
        return role

    def _require_mutable_permissions(self, slug: str) -> Role:
        role = self._require_role(slug)
        # Super admin holds everything implicitly
        if self._is_super_admin_role(slug):
            raise ProtectedRoleError(slug, "modified")
        return role

    def _known_permissions(self, names: Iterable[str]) -> Set[str]:
        known = set()
        for name in names:
            if name in self._permissions:
                known.add(name)
            else:
                logger.warning(f"Ignoring unknown permission {name}")
        return known

    async def _notify(self, hook: str, *args):
        if self.observer is not None:
            await getattr(self.observer, hook)(*args)
