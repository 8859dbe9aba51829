from typing import Iterable, List, Optional, Set
from pydantic import BaseModel, Field, model_validator

from studio_backend.permissions import catalog


class Principal(BaseModel):
    """Authenticated actor with resolved role and permission membership"""

    user_id: str
    roles: List[str] = Field(default_factory=list)
    permissions: Set[str] = Field(default_factory=set)
    is_super_admin: bool = False

    super_admin_role: str = Field("super_admin", exclude=True)

    @model_validator(mode='after')
    def set_super_admin_from_roles(self):
        """Holding the super admin role makes the principal a super admin"""
        if self.super_admin_role and self.super_admin_role in self.roles:
            self.is_super_admin = True
        return self

    def has_role(self, slug: str) -> bool:
        return slug in self.roles

    def has_any_role(self, slugs: Iterable[str]) -> bool:
        return any(slug in self.roles for slug in slugs)

    def has_permission(self, permission: str) -> bool:
        """Check a permission against the resolved role -> permission closure"""
        # Super admin bypasses all checks
        if self.is_super_admin:
            return True
        return permission in self.permissions

    def has_any_permission(self, permissions: Iterable[str]) -> bool:
        return any(self.has_permission(p) for p in permissions)

    def has_all_permissions(self, permissions: Iterable[str]) -> bool:
        return all(self.has_permission(p) for p in permissions)

    def can_resource(self, resource: str, action: str) -> bool:
        return self.has_permission(catalog.build(resource, action))


def target_id(target) -> Optional[str]:
    """Identifier of a policy target: a principal, a record with an id, or a raw id"""
    if target is None:
        return None
    if isinstance(target, str):
        return target
    if isinstance(target, Principal):
        return target.user_id
    value = getattr(target, "id", None)
    return str(value) if value is not None else None


def is_same_principal(principal: Principal, target) -> bool:
    other = target_id(target)
    return other is not None and other == principal.user_id
