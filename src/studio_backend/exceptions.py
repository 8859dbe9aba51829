class AuthorizationError(Exception):
    """Base class for authorization core errors"""


class ConfigurationError(AuthorizationError):
    """Authorization configuration is malformed; detected at startup"""


class InvalidPermissionError(AuthorizationError, ValueError):
    """A permission name is malformed or not part of the catalog"""

    def __init__(self, permission: str, reason: str = "unknown permission"):
        self.permission = permission
        self.reason = reason
        super().__init__(f"Invalid permission '{permission}': {reason}")


class ProtectedRoleError(AuthorizationError):
    """Attempted to mutate or delete a protected system role"""

    def __init__(self, slug: str, operation: str):
        self.slug = slug
        self.operation = operation
        super().__init__(f"Role '{slug}' is protected and cannot be {operation}")


class PanelConfigurationError(AuthorizationError):
    """Panel registry would end up in an invalid state"""
