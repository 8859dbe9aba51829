"""
FastAPI adapters for the authorization core.

The core only returns decisions; these helpers turn them into the 401/403
exceptions and panel redirects the HTTP layer responds with.
"""

from typing import Optional
from fastapi import Depends, Request

from studio_backend.api.exceptions import ForbiddenException, RedirectException, UnauthorizedException
from studio_backend.interface.panels import Panel
from studio_backend.permissions.auth import get_current_principal
from studio_backend.permissions.core import AuthorizationEngine, Decision
from studio_backend.permissions.panels import PanelAccessResolver, PanelEntry
from studio_backend.permissions.principal import Principal


def raise_for_decision(decision: Decision, detail: Optional[str] = None):
    """Raise the HTTP exception matching a non-allow decision"""
    if decision is Decision.UNAUTHENTICATED:
        raise UnauthorizedException()
    if decision is Decision.DENY:
        raise ForbiddenException(detail)


def raise_for_panel_entry(entry: PanelEntry):
    if entry.allowed:
        return
    if entry.unauthenticated:
        raise UnauthorizedException()
    if entry.redirect_path is not None:
        raise RedirectException(entry.redirect_path)
    raise ForbiddenException(f"No accessible panel for {entry.panel}")


def require_permission(engine: AuthorizationEngine, resource: str, action: str):
    """
    Dependency factory guarding an endpoint with `resource.action`.

    Example:
        @router.get("/users", dependencies=[Depends(require_permission(engine, "users", "list"))])
    """
    async def dependency(principal: Optional[Principal] = Depends(get_current_principal)) -> Principal:
        decision = await engine.authorize(principal, resource, action)
        raise_for_decision(decision)
        return principal

    return dependency


def require_panel(resolver: PanelAccessResolver, panel_key: str):
    """Dependency factory resolving entry into a panel

    On success the panel is attached to ``request.state`` and returned.
    """
    async def dependency(request: Request,
                         principal: Optional[Principal] = Depends(get_current_principal)) -> Panel:
        entry = resolver.resolve_entry(principal, panel_key, request.state)
        raise_for_panel_entry(entry)
        return request.state.panel_config

    return dependency
