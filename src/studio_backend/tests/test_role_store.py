"""
Role/permission store tests: protected roles, catalog sync, principal
building and the cache invalidation fired by every write.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from studio_backend.exceptions import InvalidPermissionError, ProtectedRoleError
from studio_backend.interface.permissions import PermissionEntry
from studio_backend.permissions import catalog
from studio_backend.permissions.catalog import RoleTier
from studio_backend.permissions.observers import MutationObserver
from studio_backend.permissions.role_setup import seed_system_roles, system_role_permissions
from studio_backend.permissions.store import InMemoryRoleStore
from studio_backend.tests.fixtures import principal_for, seed


def make_observer():
    observer = MagicMock(spec=MutationObserver)
    for hook in ("on_role_changed", "on_role_permissions_changed", "on_role_deleted",
                 "on_permission_renamed", "on_permission_deleted", "on_user_roles_changed"):
        setattr(observer, hook, AsyncMock())
    return observer


@pytest.fixture
def observed_store(settings):
    return InMemoryRoleStore(settings, observer=make_observer())


class TestCatalogSync:
    @pytest.mark.asyncio
    async def test_initial_sync_adds_everything(self, observed_store):
        result = await observed_store.sync_catalog()

        assert set(result.added) == set(catalog.names())
        assert result.updated == []
        assert result.removed == []

    @pytest.mark.asyncio
    async def test_resync_is_a_no_op(self, observed_store):
        await observed_store.sync_catalog()
        result = await observed_store.sync_catalog()

        assert result.added == result.updated == result.removed == []

    @pytest.mark.asyncio
    async def test_orphans_pruned_and_detached(self, observed_store):
        entries = list(catalog.entries())
        extra = PermissionEntry(name="orders.refund", display_name="Refund Orders", group="Orders")
        await observed_store.sync_catalog(entries + [extra])
        await observed_store.create_role("clerk", permissions=["orders.refund", "users.view"])

        result = await observed_store.sync_catalog()

        assert result.removed == ["orders.refund"]
        assert observed_store.get_role("clerk").permissions == {"users.view"}
        observed_store.observer.on_permission_deleted.assert_awaited_once_with(extra)

    @pytest.mark.asyncio
    async def test_changed_display_name_updated(self, observed_store):
        await observed_store.sync_catalog()
        renamed = PermissionEntry(name="users.view", display_name="See Users", group="Users")

        result = await observed_store.sync_catalog([renamed], prune=False)

        assert result.updated == ["users.view"]
        assert "users.view" in {entry.name for entry in observed_store.permissions()}


class TestRoles:
    @pytest.mark.asyncio
    async def test_seed_system_roles(self, observed_store):
        await observed_store.sync_catalog()
        created = await seed_system_roles(observed_store)

        assert [role.slug for role in created] == ["super_admin", "admin", "user"]
        assert observed_store.get_role("super_admin").permissions == set()
        assert observed_store.get_role("admin").permissions == set(catalog.defaults_for(RoleTier.ADMIN))
        assert observed_store.get_role("user").permissions == {"users.view"}
        assert all(role.is_system_role for role in created)

        assert await seed_system_roles(observed_store) == []

    def test_system_role_permissions_follow_settings(self, settings):
        slugs = [slug for slug, _ in system_role_permissions(settings)]
        assert slugs == [settings.super_admin_role, "admin", "user"]

    @pytest.mark.asyncio
    async def test_unknown_permissions_ignored(self, observed_store):
        await observed_store.sync_catalog()
        role = await observed_store.create_role("editor", permissions=["media.create", "orders.create"])
        assert role.permissions == {"media.create"}

    @pytest.mark.asyncio
    async def test_duplicate_role(self, observed_store):
        await observed_store.create_role("editor")
        with pytest.raises(ValueError):
            await observed_store.create_role("editor")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("slug", ["super_admin", "admin", "user"])
    async def test_system_roles_cannot_be_deleted(self, observed_store, slug):
        await seed(observed_store)
        with pytest.raises(ProtectedRoleError):
            await observed_store.delete_role(slug)
        assert observed_store.get_role(slug) is not None

    @pytest.mark.asyncio
    async def test_super_admin_role_is_immutable(self, observed_store):
        await seed(observed_store)

        with pytest.raises(ProtectedRoleError):
            await observed_store.update_role("super_admin", name="Root")
        with pytest.raises(ProtectedRoleError):
            await observed_store.attach_permissions("super_admin", ["users.view"])
        with pytest.raises(ProtectedRoleError):
            await observed_store.sync_role_permissions("super_admin", [])

    @pytest.mark.asyncio
    async def test_super_admin_role_cannot_enumerate_permissions(self, settings):
        store = InMemoryRoleStore(settings)
        await store.sync_catalog()
        with pytest.raises(ProtectedRoleError):
            await store.create_role("super_admin", permissions=["users.view"])

    @pytest.mark.asyncio
    async def test_delete_custom_role_revokes_assignments(self, observed_store):
        await observed_store.create_role("editor")
        await observed_store.assign_role("u1", "editor")

        await observed_store.delete_role("editor")

        assert observed_store.roles_for("u1") == []
        assert observed_store.role_members("editor") == []

    @pytest.mark.asyncio
    async def test_assign_unknown_role(self, observed_store):
        with pytest.raises(KeyError):
            await observed_store.assign_role("u1", "ghost")

    @pytest.mark.asyncio
    async def test_returned_roles_are_copies(self, observed_store):
        await observed_store.sync_catalog()
        role = await observed_store.create_role("editor", permissions=["media.view"])
        role.permissions.add("users.delete")

        assert observed_store.get_role("editor").permissions == {"media.view"}

    @pytest.mark.asyncio
    async def test_display_name(self, observed_store):
        role = await observed_store.create_role("content_editor")
        assert role.display_name == "Content Editor"


class TestObserverNotifications:
    @pytest.mark.asyncio
    async def test_write_paths_notify(self, observed_store):
        observer = observed_store.observer
        await observed_store.sync_catalog()

        await observed_store.create_role("editor")
        observer.on_role_changed.assert_awaited_once()

        await observed_store.attach_permissions("editor", ["media.view"])
        await observed_store.detach_permissions("editor", ["media.view"])
        assert observer.on_role_permissions_changed.await_count == 2

        await observed_store.assign_role("u1", "editor")
        await observed_store.revoke_role("u1", "editor")
        assert observer.on_user_roles_changed.await_count == 2
        observer.on_user_roles_changed.assert_awaited_with("u1")

        await observed_store.delete_role("editor")
        observer.on_role_deleted.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rename_permission(self, observed_store):
        await observed_store.sync_catalog()
        await observed_store.create_role("editor", permissions=["media.view"])

        entry = await observed_store.rename_permission("media.view", "media.show")

        assert entry.name == "media.show"
        assert observed_store.get_role("editor").permissions == {"media.show"}
        observed_store.observer.on_permission_renamed.assert_awaited_once_with(entry, "media.view")

    @pytest.mark.asyncio
    async def test_rename_rejects_bad_names(self, observed_store):
        await observed_store.sync_catalog()

        with pytest.raises(InvalidPermissionError):
            await observed_store.rename_permission("media.view", "Media View")
        with pytest.raises(InvalidPermissionError):
            await observed_store.rename_permission("orders.view", "orders.show")


class TestMutationObserver:
    @pytest.mark.asyncio
    async def test_targeted_invalidation(self, store, cache):
        await seed(store)
        await store.create_role("editor")
        await store.assign_role("u1", "editor")
        await cache.put("u1", "media.view", False)
        await cache.put("u2", "media.view", True)

        await store.update_role("editor", description="Edits content")

        assert await cache.get("u1", "media.view") is None
        assert await cache.get("u2", "media.view") is True

    @pytest.mark.asyncio
    async def test_global_invalidation_without_members_lookup(self, cache):
        observer = MutationObserver(cache)
        role = (await seed(InMemoryRoleStore(cache.settings))).get_role("admin")
        await cache.put("u2", "media.view", True)

        await observer.on_role_changed(role)

        assert await cache.get("u2", "media.view") is None

    @pytest.mark.asyncio
    async def test_permission_changes_invalidate_everyone(self, store, cache):
        await seed(store)
        await cache.put("u1", "media.view", True)
        await cache.put("u2", "media.view", False)

        await store.attach_permissions("user", ["media.view"])

        assert await cache.get("u1", "media.view") is None
        assert await cache.get("u2", "media.view") is None


class TestPrincipalBuilder:
    @pytest.mark.asyncio
    async def test_resolves_role_permission_closure(self, store):
        await seed(store)
        await store.create_role("editor", permissions=["media.create"])
        await store.assign_role("u1", "editor")
        await store.assign_role("u1", "user")

        principal = principal_for(store, "u1")

        assert principal.roles == ["editor", "user"]
        assert principal.permissions == {"media.create", "users.view"}
        assert not principal.is_super_admin

    @pytest.mark.asyncio
    async def test_super_admin(self, store):
        await seed(store)
        await store.assign_role("root", "super_admin")

        principal = principal_for(store, "root")

        assert principal.is_super_admin
        assert principal.permissions == set()
        assert principal.has_permission("anything.at_all")

    def test_unknown_user(self, store):
        principal = principal_for(store, "nobody")
        assert principal.roles == []
        assert principal.permissions == set()
