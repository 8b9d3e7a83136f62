"""Immutable role registry and a swappable handle for hot reloads."""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from rolegate.access.models import PermissionRequest, RoleDefinition, Statements
from rolegate.interfaces.registry import Permission

if TYPE_CHECKING:
    from rolegate.access.models import Decision

logger = logging.getLogger(__name__)

_EMPTY: frozenset[Permission] = frozenset()


class RoleRegistry:
    """Read-only mapping from role id to the permissions it grants.

    Grants are normalized once at construction; lookups never raise and
    unknown roles resolve to the empty set.
    """

    def __init__(self, roles: Mapping[str, RoleDefinition | Mapping[str, Any]] | None = None) -> None:
        definitions: dict[str, RoleDefinition] = {}
        for role_id, definition in (roles or {}).items():
            if not isinstance(role_id, str) or not role_id.strip():
                raise ValueError(f"Role id must be a non-empty string, got {role_id!r}")
            if not isinstance(definition, RoleDefinition):
                definition = RoleDefinition.model_validate(definition)
            definitions[role_id] = definition

        self._definitions = MappingProxyType(definitions)
        self._grants: Mapping[str, frozenset[Permission]] = MappingProxyType(
            {role_id: d.grants() for role_id, d in definitions.items()}
        )
        self._fingerprint: str | None = None

    @classmethod
    def from_statements(cls, statements: Mapping[str, Statements]) -> RoleRegistry:
        """Build a registry from ``{role: {resource: [actions]}}``."""
        return cls({role_id: RoleDefinition(permissions=dict(s)) for role_id, s in statements.items()})

    def lookup(self, role_id: str) -> frozenset[Permission]:
        return self._grants.get(role_id, _EMPTY)

    def definition(self, role_id: str) -> RoleDefinition | None:
        return self._definitions.get(role_id)

    def roles(self) -> list[str]:
        return sorted(self._definitions)

    def merged(self, other: RoleRegistry) -> RoleRegistry:
        """Return a new registry where ``other`` overrides same-named roles."""
        return RoleRegistry({**self._definitions, **other._definitions})

    @property
    def fingerprint(self) -> str:
        """SHA-256 over the normalized grants; equal grants give equal prints."""
        if self._fingerprint is None:
            canonical = {
                role_id: sorted(str(p) for p in grants)
                for role_id, grants in sorted(self._grants.items())
            }
            payload = json.dumps(canonical, sort_keys=True, separators=(",", ":"))
            self._fingerprint = hashlib.sha256(payload.encode("utf-8")).hexdigest()
        return self._fingerprint

    def __contains__(self, role_id: object) -> bool:
        return role_id in self._definitions

    def __iter__(self) -> Iterator[str]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __repr__(self) -> str:
        return f"RoleRegistry(roles={self.roles()!r})"


class RegistryHandle:
    """Holds the current registry snapshot and swaps it atomically.

    Readers grab the reference once per evaluation, so a reload never
    exposes a half-built registry.
    """

    def __init__(self, registry: RoleRegistry | None = None) -> None:
        if registry is None:
            from rolegate.access.defaults import default_registry

            registry = default_registry()
        self._registry = registry
        self._lock = threading.Lock()

    @property
    def current(self) -> RoleRegistry:
        return self._registry

    def swap(self, registry: RoleRegistry) -> RoleRegistry:
        """Install ``registry`` and return the one it replaced."""
        with self._lock:
            previous = self._registry
            self._registry = registry
        logger.info(
            "Role registry swapped: %s -> %s (%d roles)",
            previous.fingerprint[:12],
            registry.fingerprint[:12],
            len(registry),
        )
        return previous

    def reload(self, path: str | Path) -> RoleRegistry:
        """Load a roles file and swap it in. The old registry stays on error."""
        from rolegate.config.loader import load_roles_file

        registry = load_roles_file(path)
        self.swap(registry)
        return registry

    def evaluate_detailed(
        self, role_assignment: str, request: PermissionRequest | Mapping[str, Any]
    ) -> Decision:
        from rolegate.access.evaluator import evaluate_detailed

        return evaluate_detailed(role_assignment, request, self._registry)

    def evaluate(self, role_assignment: str, request: PermissionRequest | Mapping[str, Any]) -> bool:
        return self.evaluate_detailed(role_assignment, request).allowed
