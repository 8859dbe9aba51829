"""
Principal creation from the role/permission store.

Authentication itself happens outside this package; whatever resolved
the user id hands it to `PrincipalBuilder`, which loads role membership
and the role -> permission closure.
"""

import logging
from typing import Optional
from fastapi import Request

from studio_backend.permissions.principal import Principal
from studio_backend.permissions.store import InMemoryRoleStore

logger = logging.getLogger(__name__)


class PrincipalBuilder:
    """Builder for creating Principal objects with resolved permissions"""

    def __init__(self, store: InMemoryRoleStore):
        self.store = store

    def build(self, user_id: str) -> Principal:
        """Build a Principal for an authenticated user id"""
        roles = self.store.roles_for(user_id)
        permissions = self.store.permissions_for(user_id)

        principal = Principal(
            user_id=user_id,
            roles=roles,
            permissions=permissions,
            super_admin_role=self.store.settings.super_admin_role,
        )

        logger.debug(
            f"Built principal {user_id} with roles {roles} "
            f"({len(permissions)} permissions, super admin: {principal.is_super_admin})"
        )
        return principal


def get_current_principal(request: Request) -> Optional[Principal]:
    """
    Principal attached to the request by the authentication layer.

    Returns None for anonymous requests; the engine turns that into an
    UNAUTHENTICATED decision.
    """
    return getattr(request.state, "principal", None)
