"""Interfaces shared by the evaluator and role sources."""

from rolegate.interfaces.registry import Permission, RoleSource

__all__ = [
    "Permission",
    "RoleSource",
]
