"""rolegate - role-based permission evaluation for organization members."""

from rolegate.access import (
    Decision,
    PermissionRequest,
    RegistryHandle,
    RoleDefinition,
    RoleRegistry,
    default_registry,
    evaluate,
    evaluate_detailed,
    has_permission,
)
from rolegate.config import RolegateConfig, build_registry, load_config
from rolegate.errors import PermissionRequestError, RoleConfigError, RolegateError
from rolegate.interfaces import Permission, RoleSource

__version__ = "0.1.0"

__all__ = [
    "Decision",
    "Permission",
    "PermissionRequest",
    "PermissionRequestError",
    "RegistryHandle",
    "RoleConfigError",
    "RoleDefinition",
    "RoleRegistry",
    "RoleSource",
    "RolegateConfig",
    "RolegateError",
    "build_registry",
    "default_registry",
    "evaluate",
    "evaluate_detailed",
    "has_permission",
    "load_config",
]
