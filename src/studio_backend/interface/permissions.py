import re
from pydantic import BaseModel, ConfigDict, Field, field_validator

PERMISSION_NAME_PATTERN = re.compile(r"^[a-z0-9_]+(\.[a-z0-9_]+)+$")


class PermissionEntry(BaseModel):
    name: str = Field(description="Permission name, resource.action")
    display_name: str = Field(description="Human readable permission name")
    group: str = Field(description="Display group the permission belongs to")

    model_config = ConfigDict(frozen=True, from_attributes=True)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not PERMISSION_NAME_PATTERN.match(value):
            raise ValueError(f"'{value}' is not a valid permission name (resource.action)")
        return value

    @property
    def resource(self) -> str:
        """Resource segment of the name"""
        return self.name.split(".", 1)[0]
