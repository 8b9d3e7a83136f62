"""Role source interface and the permission token model."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict


class Permission(BaseModel):
    """A single permission token scoped to a resource and action."""

    model_config = ConfigDict(frozen=True)

    resource: str
    action: str

    def __str__(self) -> str:
        return f"{self.resource}:{self.action}"


@runtime_checkable
class RoleSource(Protocol):
    """Read-only lookup from role id to the permissions it grants."""

    def lookup(self, role_id: str) -> frozenset[Permission]: ...
