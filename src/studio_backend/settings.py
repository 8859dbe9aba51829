import os
from typing import Literal, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from studio_backend.exceptions import ConfigurationError

SYSTEM_ROLES = ("super_admin", "admin", "user")


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ["true", "1", "yes", "on"]


class AuthorizationSettings(BaseModel):
    """Immutable authorization configuration, built once at startup"""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    super_admin_role: str = "super_admin"
    system_roles: Tuple[str, ...] = SYSTEM_ROLES

    cache_enabled: bool = True
    cache_ttl: int = Field(3600, ge=0, description="Decision TTL in seconds")
    cache_prefix: str = "studio_"
    cache_backend: Literal["memory", "redis"] = "memory"

    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: Optional[str] = None

    @classmethod
    def from_env(cls) -> "AuthorizationSettings":
        """Build settings from STUDIO_* / REDIS_* environment variables"""
        try:
            settings = cls(
                enabled=_env_flag("STUDIO_AUTH_ENABLED", "true"),
                super_admin_role=os.environ.get("STUDIO_SUPER_ADMIN_ROLE", "super_admin"),
                cache_enabled=_env_flag("STUDIO_CACHE_ENABLED", "true"),
                cache_ttl=int(os.environ.get("STUDIO_CACHE_TTL", "3600")),
                cache_prefix=os.environ.get("STUDIO_CACHE_PREFIX", "studio_"),
                cache_backend=os.environ.get("STUDIO_CACHE_BACKEND", "memory"),
                redis_host=os.environ.get("REDIS_HOST", "localhost"),
                redis_port=int(os.environ.get("REDIS_PORT", "6379")),
                redis_password=os.environ.get("REDIS_PASSWORD") or None,
            )
        except (ValidationError, ValueError) as e:
            raise ConfigurationError(f"Invalid authorization configuration: {e}") from e

        validate_settings(settings)
        return settings


def validate_settings(settings: AuthorizationSettings) -> AuthorizationSettings:
    """Reject configurations that cannot be served safely.

    Run at startup; never consulted while deciding a request.
    """
    if settings.enabled and not settings.super_admin_role:
        raise ConfigurationError(
            "super_admin_role must be set when authorization is enabled"
        )

    if settings.enabled and settings.super_admin_role not in settings.system_roles:
        raise ConfigurationError(
            f"super_admin_role '{settings.super_admin_role}' must be one of the system roles"
        )

    return settings
