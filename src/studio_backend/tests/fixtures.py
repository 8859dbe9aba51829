"""
Shared test helpers: principal factories and a seeded store.
"""

from typing import Iterable

from studio_backend.permissions.auth import PrincipalBuilder
from studio_backend.permissions.principal import Principal
from studio_backend.permissions.role_setup import seed_system_roles
from studio_backend.permissions.store import InMemoryRoleStore


def make_principal(user_id: str = "u1", roles: Iterable[str] = ("user",),
                   permissions: Iterable[str] = ()) -> Principal:
    return Principal(user_id=user_id, roles=list(roles), permissions=set(permissions))


def make_super_admin(user_id: str = "root") -> Principal:
    return Principal(user_id=user_id, roles=["super_admin"])


async def seed(store: InMemoryRoleStore) -> InMemoryRoleStore:
    """Sync the catalog and create the system roles."""
    await store.sync_catalog()
    await seed_system_roles(store)
    return store


def principal_for(store: InMemoryRoleStore, user_id: str) -> Principal:
    return PrincipalBuilder(store).build(user_id)
