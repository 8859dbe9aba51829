from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional


class Panel(BaseModel):
    key: str = Field(description="Unique panel key, e.g. 'admin'")
    label: str = Field(description="Panel label")
    path: str = Field(description="URL path of the panel")
    role: Optional[str] = Field(None, description="Single role allowed to enter")
    roles: List[str] = Field(default_factory=list, description="Roles allowed to enter")
    is_default: bool = False
    is_active: bool = True
    priority: int = Field(100, description="Lower values are resolved first")
    resources: List[str] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    settings: Dict[str, Any] = Field(default_factory=lambda: {"layout": "classic", "theme": "light"})

    model_config = ConfigDict(frozen=True, from_attributes=True)

    @property
    def allowed_roles(self) -> List[str]:
        """Role slugs allowed to enter; empty means unrestricted"""
        allowed = list(self.roles)
        if self.role and self.role not in allowed:
            allowed.insert(0, self.role)
        return allowed

    @property
    def is_restricted(self) -> bool:
        return bool(self.allowed_roles)
