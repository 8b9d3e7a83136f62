"""Shared test fixtures for rolegate."""

import pytest

from rolegate.access.models import RoleDefinition
from rolegate.access.registry import RoleRegistry
from rolegate.config.models import RolegateConfig


@pytest.fixture
def sample_registry():
    """admin manages users, editor updates docs, reader reads docs."""
    return RoleRegistry.from_statements({
        "admin": {"users": ["create", "delete"]},
        "editor": {"docs": ["update"]},
        "reader": {"docs": ["read"]},
    })


@pytest.fixture
def legacy_registry():
    """Roles written against both schema generations."""
    return RoleRegistry({
        "legacy-only": RoleDefinition(permission={"docs": ["read"]}),
        "mixed": RoleDefinition(
            permissions={"docs": ["update"]},
            permission={"docs": ["read"], "users": ["create"]},
        ),
    })


@pytest.fixture
def sample_config():
    return RolegateConfig()


@pytest.fixture
def roles_yaml(tmp_path):
    """A roles file on disk with one current-schema and one legacy-schema role."""
    path = tmp_path / "roles.yaml"
    path.write_text(
        "editor:\n"
        "  description: Edits documents\n"
        "  permissions:\n"
        "    docs: [read, update]\n"
        "auditor:\n"
        "  permission:\n"
        "    logs: [read]\n"
    )
    return path
