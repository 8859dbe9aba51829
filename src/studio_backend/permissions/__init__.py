"""
Authorization and panel-access core for Studio.

Main components:
- catalog: permission name registry and default role permissions
- principal: authenticated actor with resolved roles and permissions
- cache: generation-based decision cache over aiocache
- handlers / handlers_impl: per-resource policy guards and overrides
- core: the decision chain (AuthorizationEngine)
- panels: panel registry and role-based panel entry
- observers: cache invalidation on role/permission writes
- store: in-memory role/permission store
- role_setup: system role seeding
- auth: Principal creation
- integration: FastAPI dependencies
"""

from .principal import (
    Principal,
    is_same_principal,
    target_id,
)

from .catalog import (
    Permission,
    RoleTier,
)

from .cache import (
    AuthorizationCache,
    CacheGeneration,
)

from .handlers import (
    PolicyHandler,
    PolicyRegistry,
)

from .core import (
    AuthorizationEngine,
    Decision,
    initialize_policy_handlers,
)

from .panels import (
    PanelAccessResolver,
    PanelEntry,
    PanelRegistry,
)

from .observers import MutationObserver

from .store import (
    CatalogSyncResult,
    InMemoryRoleStore,
)

from .role_setup import seed_system_roles

from .auth import (
    PrincipalBuilder,
    get_current_principal,
)

from .integration import (
    raise_for_decision,
    require_panel,
    require_permission,
)

__all__ = [
    # Principal
    "Principal",
    "is_same_principal",
    "target_id",

    # Catalog
    "Permission",
    "RoleTier",

    # Caching
    "AuthorizationCache",
    "CacheGeneration",

    # Policies
    "PolicyHandler",
    "PolicyRegistry",
    "AuthorizationEngine",
    "Decision",
    "initialize_policy_handlers",

    # Panels
    "PanelAccessResolver",
    "PanelEntry",
    "PanelRegistry",

    # Store and invalidation
    "MutationObserver",
    "CatalogSyncResult",
    "InMemoryRoleStore",
    "seed_system_roles",

    # Authentication and HTTP
    "PrincipalBuilder",
    "get_current_principal",
    "raise_for_decision",
    "require_panel",
    "require_permission",
]
