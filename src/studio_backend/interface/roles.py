from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Set

from studio_backend.settings import SYSTEM_ROLES


class Role(BaseModel):
    id: str = Field(description="Role unique identifier")
    slug: str = Field(description="Unique role slug")
    name: Optional[str] = Field(None, description="Role display name")
    description: Optional[str] = Field(None, description="Role description")
    permissions: Set[str] = Field(default_factory=set, description="Assigned permission names")

    model_config = ConfigDict(from_attributes=True)

    @property
    def display_name(self) -> str:
        return self.name or self.slug.replace("_", " ").title()

    @property
    def is_system_role(self) -> bool:
        """Protected slugs under the default configuration"""
        return self.slug in SYSTEM_ROLES

    @property
    def is_super_admin(self) -> bool:
        return self.slug == SYSTEM_ROLES[0]
