from pydantic import BaseModel, Field
from typing import Literal

from rolegate.access.models import GrantName, RoleDefinition


class RolegateConfig(BaseModel):
    roles: dict[GrantName, RoleDefinition] = Field(default_factory=dict)
    roles_file: str | None = None
    include_default_roles: bool = False
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
