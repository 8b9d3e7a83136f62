"""Built-in statements and baseline organization roles."""

from __future__ import annotations

from rolegate.access.models import RoleDefinition, Statements
from rolegate.access.registry import RoleRegistry

# Every resource/action pair the baseline roles know about.
DEFAULT_STATEMENTS: dict[str, tuple[str, ...]] = {
    "organization": ("update", "delete"),
    "member": ("create", "update", "delete"),
    "invitation": ("create", "cancel"),
    "team": ("create", "update", "delete"),
    "ac": ("create", "read", "update", "delete"),
}


def _statements(**overrides: tuple[str, ...]) -> Statements:
    return {resource: list(overrides.get(resource, actions)) for resource, actions in DEFAULT_STATEMENTS.items()}


DEFAULT_ROLES: dict[str, RoleDefinition] = {
    "owner": RoleDefinition(
        permissions=_statements(),
        description="Full control of the organization, including deleting it.",
    ),
    "admin": RoleDefinition(
        permissions=_statements(organization=("update",)),
        description="Manages members, invitations and teams; cannot delete the organization.",
    ),
    "member": RoleDefinition(
        permissions={"ac": ["read"]},
        description="Regular member with read access to role definitions.",
    ),
}


_DEFAULT_REGISTRY = RoleRegistry(DEFAULT_ROLES)


def default_registry() -> RoleRegistry:
    """Registry used when the caller does not supply one."""
    return _DEFAULT_REGISTRY
