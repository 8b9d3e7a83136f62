"""Role definitions, permission requests, and decisions."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, ValidationError

from rolegate.errors import PermissionRequestError
from rolegate.interfaces.registry import Permission

# resource -> actions
Statements = dict[str, list[str]]

# Role grants reject blank resources and actions
GrantName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
GrantStatements = dict[GrantName, list[GrantName]]


def flatten_statements(statements: Mapping[str, list[str]] | None) -> list[Permission]:
    """Flatten a resource -> actions mapping into tokens, keeping duplicates."""
    if not statements:
        return []
    return [
        Permission(resource=resource, action=action)
        for resource, actions in statements.items()
        for action in actions
    ]


class RoleDefinition(BaseModel):
    """Permissions granted by one role.

    ``permission`` is the older field name. Roles written against either
    schema are accepted and both fields are unioned by :meth:`grants`.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    permissions: GrantStatements | None = None
    permission: GrantStatements | None = None
    description: str | None = None

    def grants(self) -> frozenset[Permission]:
        return frozenset(flatten_statements(self.permissions)) | frozenset(
            flatten_statements(self.permission)
        )


class PermissionRequest(BaseModel):
    """Permissions required to authorize an action.

    Exactly one of ``permissions`` (current) or ``permission`` (legacy) must be
    set. The model itself accepts any combination so that the shape check in
    :meth:`required` can report a :class:`PermissionRequestError` instead of a
    generic validation error.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    permissions: Statements | None = None
    permission: Statements | None = None

    @classmethod
    def coerce(cls, request: PermissionRequest | Mapping[str, Any]) -> PermissionRequest:
        """Accept a model instance or a plain mapping with one of the two keys."""
        if isinstance(request, cls):
            return request
        if not isinstance(request, Mapping):
            raise PermissionRequestError(
                "invalid", f"expected a mapping, got {type(request).__name__}"
            )
        try:
            return cls.model_validate(dict(request))
        except ValidationError as e:
            raise PermissionRequestError("invalid", str(e)) from e

    @property
    def shape(self) -> Literal["current", "legacy"]:
        has_current = self.permissions is not None
        has_legacy = self.permission is not None
        if has_current and has_legacy:
            raise PermissionRequestError("ambiguous")
        if not has_current and not has_legacy:
            raise PermissionRequestError("missing")
        return "current" if has_current else "legacy"

    def required(self) -> list[Permission]:
        """Flattened list of required tokens from whichever shape was supplied."""
        if self.shape == "current":
            return flatten_statements(self.permissions)
        return flatten_statements(self.permission)


class Decision(BaseModel):
    """Outcome of one evaluation."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    roles: list[str] = Field(default_factory=list)
    required: list[Permission] = Field(default_factory=list)
    missing: list[Permission] = Field(default_factory=list)

    def __bool__(self) -> bool:
        return self.allowed
