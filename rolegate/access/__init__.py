"""Role registry and permission evaluation."""

from rolegate.access.defaults import DEFAULT_ROLES, DEFAULT_STATEMENTS, default_registry
from rolegate.access.evaluator import (
    aggregate_grants,
    evaluate,
    evaluate_detailed,
    has_permission,
    normalize_request,
    resolve_roles,
)
from rolegate.access.models import Decision, PermissionRequest, RoleDefinition
from rolegate.access.registry import RegistryHandle, RoleRegistry

__all__ = [
    "DEFAULT_ROLES",
    "DEFAULT_STATEMENTS",
    "Decision",
    "PermissionRequest",
    "RegistryHandle",
    "RoleDefinition",
    "RoleRegistry",
    "aggregate_grants",
    "default_registry",
    "evaluate",
    "evaluate_detailed",
    "has_permission",
    "normalize_request",
    "resolve_roles",
]
