"""YAML config and roles-file loading with env var expansion."""

import logging
import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from rolegate.access.defaults import default_registry
from rolegate.access.models import RoleDefinition
from rolegate.access.registry import RoleRegistry
from rolegate.errors import RoleConfigError

from .models import RolegateConfig

logger = logging.getLogger(__name__)


def load_config(cli_path: str | None = None) -> RolegateConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./rolegate.yaml"),
        Path.home() / ".rolegate" / "config.yaml",
    ]

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    continue
                raw = _expand_env_vars(raw)
                return RolegateConfig(**raw)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e

    return RolegateConfig()


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


_ROLE_FIELDS = frozenset(RoleDefinition.model_fields)


def _is_roles_wrapper(raw: dict) -> bool:
    """True when ``raw`` is a lone ``roles:`` key holding role definitions.

    A role that is itself named ``roles`` has definition fields directly
    under it and is left alone.
    """
    if list(raw) != ["roles"] or not isinstance(raw["roles"], dict):
        return False
    return not (_ROLE_FIELDS & set(raw["roles"]))


def load_roles_file(path: str | Path) -> RoleRegistry:
    """Load a YAML roles file into a registry.

    The file is either a mapping of role id -> definition, or a single
    ``roles:`` key holding that mapping.
    """
    path = Path(path)
    if not path.exists():
        raise RoleConfigError(str(path), "file not found")

    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise RoleConfigError(str(path), f"invalid YAML: {e}") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise RoleConfigError(str(path), f"expected a mapping, got {type(raw).__name__}")
    if _is_roles_wrapper(raw):
        raw = raw["roles"]
    raw = _expand_env_vars(raw)

    definitions: dict[str, RoleDefinition] = {}
    for role_id, body in raw.items():
        if role_id is None or not str(role_id).strip():
            raise RoleConfigError(str(path), f"empty role id {role_id!r}")
        try:
            definitions[str(role_id)] = RoleDefinition.model_validate(body or {})
        except ValidationError as e:
            raise RoleConfigError(str(path), f"role {role_id!r}: {e}") from e

    logger.debug("Loaded %d roles from %s", len(definitions), path)
    return RoleRegistry(definitions)


def build_registry(config: RolegateConfig) -> RoleRegistry:
    """Resolve the registry a config describes.

    Inline ``roles`` override same-named roles from ``roles_file``. With no
    custom roles at all the default registry is returned.
    """
    registry: RoleRegistry | None = None
    if config.roles_file:
        registry = load_roles_file(config.roles_file)
    if config.roles:
        inline = RoleRegistry(config.roles)
        registry = registry.merged(inline) if registry is not None else inline

    if registry is None:
        return default_registry()
    if config.include_default_roles:
        return default_registry().merged(registry)
    return registry


# Default YAML template for `rolegate config init`
DEFAULT_CONFIG_TEMPLATE = """\
# rolegate.yaml

# Roles file (optional). Same format as the inline `roles` block below.
# roles_file: "roles.yaml"

# Keep the built-in owner/admin/member roles alongside custom ones.
# Custom roles replace them unless this is true.
include_default_roles: false

# Inline role definitions. `permission` (singular) is still accepted.
# roles:
#   editor:
#     description: "Edits documents"
#     permissions:
#       docs: ["read", "update"]

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
