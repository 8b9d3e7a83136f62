"""Permission evaluation: resolve roles, aggregate grants, check the demand.

Satisfaction is conjunctive. A request is allowed only when every required
``(resource, action)`` token is granted by at least one of the actor's roles.
Unknown roles grant nothing. A request with no required tokens is allowed.

Malformed requests (neither or both of ``permissions``/``permission``) raise
:class:`~rolegate.errors.PermissionRequestError` on every entry point; they
are never turned into a silent ``False``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from rolegate.access.defaults import default_registry
from rolegate.access.models import Decision, PermissionRequest, Statements
from rolegate.interfaces.registry import Permission, RoleSource

logger = logging.getLogger(__name__)

ROLE_DELIMITER = ","


def resolve_roles(role_assignment: str) -> list[str]:
    """Split a comma-delimited assignment into role ids.

    Surrounding whitespace is stripped and empty segments are dropped.
    Duplicates are kept; aggregation absorbs them.
    """
    return [r.strip() for r in role_assignment.split(ROLE_DELIMITER) if r.strip()]


def aggregate_grants(roles: Iterable[str], registry: RoleSource) -> frozenset[Permission]:
    """Union of the grants of every role in ``roles``."""
    granted: set[Permission] = set()
    for role_id in roles:
        grants = registry.lookup(role_id)
        if not grants:
            logger.debug("Role %r grants no permissions", role_id)
        granted |= grants
    return frozenset(granted)


def normalize_request(request: PermissionRequest | Mapping[str, Any]) -> list[Permission]:
    """Validate the request shape and flatten it into required tokens."""
    return PermissionRequest.coerce(request).required()


def evaluate_detailed(
    role_assignment: str,
    request: PermissionRequest | Mapping[str, Any],
    registry: RoleSource | None = None,
) -> Decision:
    """Evaluate and return the full :class:`Decision`."""
    required = normalize_request(request)
    if registry is None:
        registry = default_registry()

    roles = resolve_roles(role_assignment)
    granted = aggregate_grants(roles, registry)

    missing: list[Permission] = []
    for perm in required:
        if perm not in granted and perm not in missing:
            missing.append(perm)

    if missing:
        logger.debug(
            "Denied %r: missing %s", role_assignment, ", ".join(str(p) for p in missing)
        )
    return Decision(allowed=not missing, roles=roles, required=required, missing=missing)


def evaluate(
    role_assignment: str,
    request: PermissionRequest | Mapping[str, Any],
    registry: RoleSource | None = None,
) -> bool:
    """Return True iff every requested permission is granted."""
    return evaluate_detailed(role_assignment, request, registry).allowed


def has_permission(
    role: str,
    *,
    permissions: Statements | None = None,
    permission: Statements | None = None,
    registry: RoleSource | None = None,
) -> bool:
    """Keyword form of :func:`evaluate`, as called by the membership layer.

    ``permission`` is the legacy spelling of ``permissions``; pass exactly one.
    """
    request = PermissionRequest.coerce({"permissions": permissions, "permission": permission})
    return evaluate(role, request, registry)
