"""
Authorization decision engine.

A decision is an ordered chain of steps; each step returns a Decision to
stop or None to continue:

1. no principal                       -> UNAUTHENTICATED
2. authorization disabled             -> ALLOW
3. protected-entity guards            -> DENY (holds for super admins)
4. super admin bypass                 -> ALLOW
5. resource-specific overrides        -> ALLOW / DENY
6. permission lookup (cached)         -> ALLOW / DENY
"""

import logging
from enum import Enum
from typing import Any, Callable, List, Optional

from studio_backend.permissions import catalog
from studio_backend.permissions.cache import AuthorizationCache
from studio_backend.permissions.handlers import PolicyRegistry
from studio_backend.permissions.handlers_impl import (
    GenericPolicyHandler,
    PermissionPolicyHandler,
    RolePolicyHandler,
    UserPolicyHandler,
)
from studio_backend.permissions.principal import Principal
from studio_backend.settings import AuthorizationSettings

logger = logging.getLogger(__name__)


class Decision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"
    UNAUTHENTICATED = "unauthenticated"

    @property
    def allowed(self) -> bool:
        return self is Decision.ALLOW


def _from_bool(result: Optional[bool]) -> Optional[Decision]:
    if result is None:
        return None
    return Decision.ALLOW if result else Decision.DENY


def initialize_policy_handlers(settings: AuthorizationSettings) -> PolicyRegistry:
    """Build the registry with the built-in resource policies"""
    registry = PolicyRegistry(GenericPolicyHandler("*", settings))

    registry.register("users", UserPolicyHandler("users", settings))
    registry.register("roles", RolePolicyHandler("roles", settings))
    registry.register("permissions", PermissionPolicyHandler("permissions", settings))

    return registry


class AuthorizationEngine:
    """Per-resource policy dispatch in front of the authorization cache"""

    def __init__(
        self,
        settings: AuthorizationSettings,
        cache: Optional[AuthorizationCache] = None,
        registry: Optional[PolicyRegistry] = None,
    ):
        self.settings = settings
        self.cache = cache if cache is not None else AuthorizationCache(settings)
        self.registry = registry if registry is not None else initialize_policy_handlers(settings)

        self._steps: List[Callable[[Optional[Principal], str, str, Any], Optional[Decision]]] = [
            self._check_authenticated,
            self._check_enabled,
            self._check_guards,
            self._check_super_admin,
            self._check_overrides,
        ]

    async def authorize(self, principal: Optional[Principal], resource: str, action: str,
                        target: Any = None) -> Decision:
        """Decide whether `principal` may perform `action` on `resource` (or on `target`)"""
        for step in self._steps:
            decision = step(principal, resource, action, target)
            if decision is not None:
                logger.debug(f"{step.__name__} decided {decision.value} for {resource}.{action}")
                return decision

        return await self._check_permission(principal, resource, action)

    async def can(self, principal: Optional[Principal], resource: str, action: str,
                  target: Any = None) -> bool:
        return (await self.authorize(principal, resource, action, target)).allowed

    def _check_authenticated(self, principal, resource, action, target) -> Optional[Decision]:
        if principal is None:
            return Decision.UNAUTHENTICATED
        return None

    def _check_enabled(self, principal, resource, action, target) -> Optional[Decision]:
        # Deployment kill-switch, never cached
        if not self.settings.enabled:
            return Decision.ALLOW
        return None

    def _check_guards(self, principal, resource, action, target) -> Optional[Decision]:
        handler = self.registry.get_handler(resource)
        decision = _from_bool(handler.guard(principal, action, target))
        if decision is Decision.ALLOW:
            logger.warning(f"Guard of {handler.resource_name} returned allow; guards may only deny")
            return None
        return decision

    def _check_super_admin(self, principal, resource, action, target) -> Optional[Decision]:
        if principal.is_super_admin:
            return Decision.ALLOW
        return None

    def _check_overrides(self, principal, resource, action, target) -> Optional[Decision]:
        handler = self.registry.get_handler(resource)
        return _from_bool(handler.override(principal, action, target))

    async def _check_permission(self, principal: Principal, resource: str, action: str) -> Decision:
        permission = catalog.build(resource, action)

        if not catalog.is_valid(permission):
            # Diagnostic only; the lookup below can never match
            logger.warning(f"Invalid permission checked: '{permission}' is not in the catalog")

        generation = await self.cache.generation(principal.user_id)
        cached = await self.cache.get(principal.user_id, permission, generation)
        if cached is not None:
            return _from_bool(cached)

        result = principal.has_permission(permission)
        await self.cache.put(principal.user_id, permission, result, generation)

        if not result:
            logger.info(f"Denied {permission} for principal {principal.user_id}")

        return _from_bool(result)
