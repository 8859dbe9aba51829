"""
Static permission catalog for the studio RBAC system.

Permission naming convention: ``{resource}.{action}``
- resource: lowercase plural (users, roles, settings)
- action: lowercase verb, optionally dotted (view, update.email, bulk.delete)

The catalog is versioned with the code. Changing it is a deployment
concern; it is never mutated at runtime. Databases are brought in line
with it through the store's catalog sync.
"""

from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from studio_backend.exceptions import InvalidPermissionError
from studio_backend.interface.permissions import PERMISSION_NAME_PATTERN, PermissionEntry


class Permission:
    """Permission name constants"""

    # Users
    USERS_LIST = "users.list"
    USERS_VIEW = "users.view"
    USERS_CREATE = "users.create"
    USERS_UPDATE = "users.update"
    USERS_DELETE = "users.delete"
    USERS_UPDATE_EMAIL = "users.update.email"
    USERS_UPDATE_PASSWORD = "users.update.password"
    USERS_UPDATE_ROLES = "users.update.roles"
    USERS_IMPERSONATE = "users.impersonate"
    USERS_EXPORT = "users.export"
    USERS_BULK_DELETE = "users.bulk.delete"
    USERS_BULK_UPDATE = "users.bulk.update"

    # Roles
    ROLES_LIST = "roles.list"
    ROLES_VIEW = "roles.view"
    ROLES_CREATE = "roles.create"
    ROLES_UPDATE = "roles.update"
    ROLES_DELETE = "roles.delete"
    ROLES_ASSIGN = "roles.assign"

    # Permissions
    PERMISSIONS_VIEW = "permissions.view"
    PERMISSIONS_MANAGE = "permissions.manage"
    PERMISSIONS_SYNC = "permissions.sync"

    # Settings
    SETTINGS_LIST = "settings.list"
    SETTINGS_VIEW = "settings.view"
    SETTINGS_UPDATE = "settings.update"
    SETTINGS_UPDATE_SYSTEM = "settings.update.system"
    SETTINGS_UPDATE_MAIL = "settings.update.mail"

    # Activities
    ACTIVITIES_LIST = "activities.list"
    ACTIVITIES_VIEW = "activities.view"
    ACTIVITIES_DELETE = "activities.delete"
    ACTIVITIES_EXPORT = "activities.export"

    # Panel
    PANEL_ADMIN_ACCESS = "panel.admin.access"

    # Media
    MEDIA_LIST = "media.list"
    MEDIA_VIEW = "media.view"
    MEDIA_CREATE = "media.create"
    MEDIA_UPDATE = "media.update"
    MEDIA_DELETE = "media.delete"

    # Notifications
    NOTIFICATIONS_LIST = "notifications.list"
    NOTIFICATIONS_VIEW = "notifications.view"
    NOTIFICATIONS_CREATE = "notifications.create"
    NOTIFICATIONS_UPDATE = "notifications.update"
    NOTIFICATIONS_DELETE = "notifications.delete"
    NOTIFICATIONS_SEND = "notifications.send"


class RoleTier(str, Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    USER = "user"


# Group name -> {permission name -> display name}
PERMISSION_GROUPS: Dict[str, Dict[str, str]] = {
    "Users": {
        Permission.USERS_LIST: "View Users List",
        Permission.USERS_VIEW: "View User Details",
        Permission.USERS_CREATE: "Create User",
        Permission.USERS_UPDATE: "Update User",
        Permission.USERS_DELETE: "Delete User",
        Permission.USERS_UPDATE_EMAIL: "Update User Email",
        Permission.USERS_UPDATE_PASSWORD: "Update User Password",
        Permission.USERS_UPDATE_ROLES: "Update User Roles",
        Permission.USERS_IMPERSONATE: "Impersonate User",
        Permission.USERS_EXPORT: "Export Users",
        Permission.USERS_BULK_DELETE: "Bulk Delete Users",
        Permission.USERS_BULK_UPDATE: "Bulk Update Users",
    },
    "Roles": {
        Permission.ROLES_LIST: "View Roles List",
        Permission.ROLES_VIEW: "View Role Details",
        Permission.ROLES_CREATE: "Create Role",
        Permission.ROLES_UPDATE: "Update Role",
        Permission.ROLES_DELETE: "Delete Role",
        Permission.ROLES_ASSIGN: "Assign Roles",
    },
    "Permissions": {
        Permission.PERMISSIONS_VIEW: "View Permissions",
        Permission.PERMISSIONS_MANAGE: "Manage Permissions",
        Permission.PERMISSIONS_SYNC: "Sync Permissions",
    },
    "Settings": {
        Permission.SETTINGS_LIST: "View Settings List",
        Permission.SETTINGS_VIEW: "View Settings",
        Permission.SETTINGS_UPDATE: "Update Settings",
        Permission.SETTINGS_UPDATE_SYSTEM: "Update System Settings",
        Permission.SETTINGS_UPDATE_MAIL: "Update Mail Settings",
    },
    "Activities": {
        Permission.ACTIVITIES_LIST: "View Activity Log",
        Permission.ACTIVITIES_VIEW: "View Activity Details",
        Permission.ACTIVITIES_DELETE: "Delete Activity Logs",
        Permission.ACTIVITIES_EXPORT: "Export Activity Logs",
    },
    "Panel": {
        Permission.PANEL_ADMIN_ACCESS: "Access Admin Panel",
    },
    "Media": {
        Permission.MEDIA_LIST: "View Media List",
        Permission.MEDIA_VIEW: "View Media Details",
        Permission.MEDIA_CREATE: "Upload Media",
        Permission.MEDIA_UPDATE: "Update Media",
        Permission.MEDIA_DELETE: "Delete Media",
    },
    "Notifications": {
        Permission.NOTIFICATIONS_LIST: "View Notifications List",
        Permission.NOTIFICATIONS_VIEW: "View Notification Templates",
        Permission.NOTIFICATIONS_CREATE: "Create Notification Template",
        Permission.NOTIFICATIONS_UPDATE: "Update Notification Template",
        Permission.NOTIFICATIONS_DELETE: "Delete Notification Template",
        Permission.NOTIFICATIONS_SEND: "Send Notifications",
    },
}

_ALL: Dict[str, str] = {
    name: display
    for permissions in PERMISSION_GROUPS.values()
    for name, display in permissions.items()
}

_GROUP_OF: Dict[str, str] = {
    name: group
    for group, permissions in PERMISSION_GROUPS.items()
    for name in permissions
}

PERMISSION_MANAGEMENT = (Permission.PERMISSIONS_MANAGE, Permission.PERMISSIONS_SYNC)


def all_permissions() -> Dict[str, str]:
    """All permissions as name -> display name"""
    return dict(_ALL)


def grouped() -> Dict[str, Dict[str, str]]:
    return {group: dict(permissions) for group, permissions in PERMISSION_GROUPS.items()}


def names() -> List[str]:
    return list(_ALL)


def build(resource: str, action: str) -> str:
    """Build a permission name from resource and action"""
    return f"{resource}.{action}"


def parse(permission: str) -> Optional[Tuple[str, str]]:
    """Split a permission name into (resource, action) on the first dot.

    Returns None when the name carries no dot at all.
    """
    parts = permission.split(".", 1)
    if len(parts) != 2:
        return None
    return parts[0], parts[1]


def is_valid(permission: str) -> bool:
    """Check membership in the static catalog"""
    return permission in _ALL


def is_well_formed(permission: str) -> bool:
    return PERMISSION_NAME_PATTERN.match(permission) is not None


def validate_name(permission: str) -> str:
    """Return the name if it is well formed and catalogued, raise otherwise"""
    if not is_well_formed(permission):
        raise InvalidPermissionError(permission, "malformed permission name")
    if not is_valid(permission):
        raise InvalidPermissionError(permission)
    return permission


def for_resource(resource: str) -> Dict[str, str]:
    """Catalog entries whose resource segment equals `resource`"""
    prefix = f"{resource}."
    return {name: display for name, display in _ALL.items() if name.startswith(prefix)}


def group(permission: str) -> Optional[str]:
    return _GROUP_OF.get(permission)


def display_name(permission: str) -> str:
    return _ALL.get(permission, permission)


def defaults_for(tier: RoleTier | str) -> List[str]:
    """
    Default permission set for a role tier.

    - super admin: the whole catalog
    - admin: everything except permission management
    - user: view own profile; ownership is enforced by the user policy
    """
    tier = RoleTier(tier)

    if tier is RoleTier.SUPER_ADMIN:
        return names()

    if tier is RoleTier.ADMIN:
        return [name for name in _ALL if name not in PERMISSION_MANAGEMENT]

    return [Permission.USERS_VIEW]


def entries() -> Iterator[PermissionEntry]:
    """Yield catalog entries as records, in catalog order"""
    for group_name, permissions in PERMISSION_GROUPS.items():
        for name, display in permissions.items():
            yield PermissionEntry(name=name, display_name=display, group=group_name)
