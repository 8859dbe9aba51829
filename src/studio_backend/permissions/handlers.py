from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from studio_backend.interface.roles import Role
from studio_backend.permissions.principal import Principal
from studio_backend.settings import AuthorizationSettings


def role_slug(target: Any) -> Optional[str]:
    """Slug of a role target given as a Role or a raw slug"""
    if isinstance(target, Role):
        return target.slug
    if isinstance(target, str):
        return target
    return None


class PolicyHandler(ABC):
    """Base class for resource-specific policies

    A handler contributes two kinds of rules to the decision chain. Each
    returns True/False to decide, or None to pass to the next step:

    - ``guard``: protected-entity rules evaluated before the super admin
      bypass; they hold for every actor.
    - ``override``: resource rules evaluated after the bypass and before
      the permission lookup fallback.
    """

    def __init__(self, resource: str, settings: AuthorizationSettings):
        self.resource_name = resource
        self.settings = settings

    def guard(self, principal: Principal, action: str, target: Any = None) -> Optional[bool]:
        return None

    @abstractmethod
    def override(self, principal: Principal, action: str, target: Any = None) -> Optional[bool]:
        """Resource rules that run before falling back to the permission lookup"""
        pass

    def is_super_admin_role(self, role: Any) -> bool:
        return role_slug(role) == self.settings.super_admin_role

    def is_system_role(self, role: Any) -> bool:
        return role_slug(role) in self.settings.system_roles

    def is_super_admin_target(self, target: Any) -> bool:
        """Whether the target is a super admin: a Principal or any user record exposing is_super_admin"""
        flag = getattr(target, "is_super_admin", False)
        if callable(flag):
            flag = flag()
        return bool(flag)


class PolicyRegistry:
    """Registry mapping resource keys to their policy handlers"""

    def __init__(self, default_handler: PolicyHandler):
        self._handlers: Dict[str, PolicyHandler] = {}
        self.default_handler = default_handler

    def register(self, resource: str, handler: PolicyHandler):
        """Register a policy handler for a resource"""
        self._handlers[resource] = handler

    def get_handler(self, resource: str) -> PolicyHandler:
        """Get the handler for a resource, or the generic one if none is registered"""
        return self._handlers.get(resource, self.default_handler)

    def resources(self):
        return list(self._handlers)
