from .loader import build_registry, load_config, load_roles_file
from .models import RolegateConfig

__all__ = [
    "RolegateConfig",
    "build_registry",
    "load_config",
    "load_roles_file",
]
