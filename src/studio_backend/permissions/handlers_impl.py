from typing import Any, Optional

from studio_backend.permissions.handlers import PolicyHandler
from studio_backend.permissions.principal import Principal, is_same_principal


class GenericPolicyHandler(PolicyHandler):
    """Policy for resources without bespoke rules: permission lookup only"""

    def override(self, principal: Principal, action: str, target: Any = None) -> Optional[bool]:
        return None


class UserPolicyHandler(PolicyHandler):
    """Policy for the users resource"""

    SELF_SERVICE_ACTIONS = ("view", "update", "update.email", "update.password")
    SELF_DENIED_ACTIONS = ("update.roles", "impersonate")
    SUPER_ADMIN_PROTECTED_ACTIONS = ("delete", "impersonate")

    def guard(self, principal: Principal, action: str, target: Any = None) -> Optional[bool]:
        # Nobody deletes themselves, super admins included
        if action == "delete" and is_same_principal(principal, target):
            return False
        return None

    def override(self, principal: Principal, action: str, target: Any = None) -> Optional[bool]:
        if is_same_principal(principal, target):
            # Users can view and update their own profile
            if action in self.SELF_SERVICE_ACTIONS:
                return True

            # No role escalation or impersonation of self
            if action in self.SELF_DENIED_ACTIONS:
                return False

        # Only super admins may delete or impersonate super admins
        if action in self.SUPER_ADMIN_PROTECTED_ACTIONS and self.is_super_admin_target(target):
            return False

        return None


class RolePolicyHandler(PolicyHandler):
    """Policy for the roles resource"""

    def guard(self, principal: Principal, action: str, target: Any = None) -> Optional[bool]:
        # System roles cannot be deleted
        if action == "delete" and self.is_system_role(target):
            return False

        # Super admin role cannot be modified
        if action in ("update", "update.permissions") and self.is_super_admin_role(target):
            return False

        return None

    def override(self, principal: Principal, action: str, target: Any = None) -> Optional[bool]:
        # Only super admins can modify system roles
        if action == "update" and self.is_system_role(target):
            return False

        # Super admin role can only be assigned by super admins
        if action == "assign" and self.is_super_admin_role(target):
            return False

        # Only super admins can manage role permissions
        if action == "update.permissions":
            return False

        return None


class PermissionPolicyHandler(PolicyHandler):
    """Policy for the permission catalog"""

    CATALOG_WRITE_ACTIONS = ("create", "update", "delete")

    def guard(self, principal: Principal, action: str, target: Any = None) -> Optional[bool]:
        # Permissions are created and removed by catalog sync only
        if action in self.CATALOG_WRITE_ACTIONS:
            return False
        return None

    def override(self, principal: Principal, action: str, target: Any = None) -> Optional[bool]:
        return None
