"""
Panel access resolution.

Panels are gated by role membership, not by permission names. The
resolver answers three questions for a principal: may it enter a given
panel, which panel is its landing target, and what to do when it
navigates somewhere it may not enter.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional
from pydantic import BaseModel

from studio_backend.exceptions import PanelConfigurationError
from studio_backend.interface.panels import Panel
from studio_backend.permissions.principal import Principal

logger = logging.getLogger(__name__)


class PanelRegistry:
    """Panel configuration source, kept in resolution order"""

    def __init__(self, panels: Optional[Iterable[Panel]] = None):
        self._panels: Dict[str, Panel] = {}
        for panel in panels or []:
            self.add(panel)

    def add(self, panel: Panel):
        if panel.key in self._panels:
            raise PanelConfigurationError(f"Panel '{panel.key}' is already registered")
        self._panels[panel.key] = panel

    def replace(self, panel: Panel):
        if panel.key not in self._panels:
            raise PanelConfigurationError(f"Panel '{panel.key}' is not registered")
        self._check_default_kept(panel.key, remaining_default=panel.is_default and panel.is_active)
        self._panels[panel.key] = panel

    def remove(self, key: str):
        """Remove a panel; the sole active default panel cannot be removed"""
        if key not in self._panels:
            raise PanelConfigurationError(f"Panel '{key}' is not registered")
        self._check_default_kept(key, remaining_default=False)
        del self._panels[key]

    def _check_default_kept(self, key: str, remaining_default: bool):
        current = self._panels[key]
        if not (current.is_default and current.is_active) or remaining_default:
            return

        other_defaults = [
            p for p in self._panels.values()
            if p.key != key and p.is_default and p.is_active
        ]
        if not other_defaults:
            raise PanelConfigurationError(f"Panel '{key}' is the only default panel")

    def get(self, key: str) -> Optional[Panel]:
        return self._panels.get(key)

    def ordered(self) -> List[Panel]:
        """Panels by priority; default panels first within the same priority"""
        return sorted(
            self._panels.values(),
            key=lambda p: (p.priority, not p.is_default, p.label),
        )

    def keys(self) -> List[str]:
        return [panel.key for panel in self.ordered()]

    # Resource and feature scoping; an unknown panel exposes nothing

    def panel_resources(self, key: str) -> List[str]:
        panel = self.get(key)
        return list(panel.resources) if panel else []

    def panel_has_resource(self, key: str, resource: str) -> bool:
        return resource in self.panel_resources(key)

    def panel_features(self, key: str) -> List[str]:
        panel = self.get(key)
        return list(panel.features) if panel else []

    def panel_has_feature(self, key: str, feature: str) -> bool:
        return feature in self.panel_features(key)

    def panel_settings(self, key: str) -> Dict[str, Any]:
        panel = self.get(key)
        return dict(panel.settings) if panel else {}


class PanelEntry(BaseModel):
    """Outcome of a panel entry attempt"""

    allowed: bool
    panel: Optional[str] = None
    redirect_to: Optional[str] = None
    redirect_path: Optional[str] = None
    unauthenticated: bool = False


class PanelAccessResolver:
    """Role-based panel entry decisions"""

    def __init__(self, panels: PanelRegistry):
        self.panels = panels

    def can_access(self, principal: Optional[Principal], panel_key: str) -> bool:
        """
        True iff the panel exists, is active, and either declares no role
        restriction or shares at least one role with the principal
        """
        if principal is None:
            return False

        panel = self.panels.get(panel_key)
        if panel is None or not panel.is_active:
            return False

        # Super admin can access all panels
        if principal.is_super_admin:
            return True

        if not panel.is_restricted:
            return True

        return principal.has_any_role(panel.allowed_roles)

    def accessible_panels(self, principal: Optional[Principal]) -> List[Panel]:
        if principal is None:
            return []
        return [panel for panel in self.panels.ordered() if self.can_access(principal, panel.key)]

    def default_panel_for(self, principal: Optional[Principal]) -> Optional[str]:
        """First accessible panel in priority order"""
        for panel in self.accessible_panels(principal):
            return panel.key
        return None

    def resolve_entry(self, principal: Optional[Principal], panel_key: str,
                      context: Any = None) -> PanelEntry:
        """
        Decide what happens when a principal navigates to a panel

        On success the panel key and configuration are attached to
        `context` (e.g. ``request.state``) as ``panel`` and ``panel_config``.
        """
        if principal is None:
            return PanelEntry(allowed=False, panel=panel_key, unauthenticated=True)

        if self.can_access(principal, panel_key):
            panel = self.panels.get(panel_key)
            if context is not None:
                context.panel = panel.key
                context.panel_config = panel
            return PanelEntry(allowed=True, panel=panel.key)

        redirect_key = self.default_panel_for(principal)
        if redirect_key is None:
            logger.info(f"Principal {principal.user_id} has no accessible panel")
            return PanelEntry(allowed=False, panel=panel_key)

        logger.debug(f"Redirecting principal {principal.user_id} from {panel_key} to {redirect_key}")
        return PanelEntry(
            allowed=False,
            panel=panel_key,
            redirect_to=redirect_key,
            redirect_path=self.panels.get(redirect_key).path,
        )
