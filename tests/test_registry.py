"""Tests for RoleRegistry, RegistryHandle, and the default roles."""

from __future__ import annotations

import threading

import pytest
from pydantic import ValidationError

from rolegate.access.defaults import DEFAULT_ROLES, DEFAULT_STATEMENTS, default_registry
from rolegate.access.models import RoleDefinition
from rolegate.access.registry import RegistryHandle, RoleRegistry
from rolegate.errors import RoleConfigError
from rolegate.interfaces.registry import Permission, RoleSource


# -- Lookup -------------------------------------------------------------------


def test_lookup_known_role(sample_registry: RoleRegistry):
    assert sample_registry.lookup("editor") == {Permission(resource="docs", action="update")}


def test_lookup_unknown_role_is_empty(sample_registry: RoleRegistry):
    assert sample_registry.lookup("ghost") == frozenset()


def test_lookup_returns_frozenset(sample_registry: RoleRegistry):
    assert isinstance(sample_registry.lookup("admin"), frozenset)


def test_container_protocol(sample_registry: RoleRegistry):
    assert "admin" in sample_registry
    assert "ghost" not in sample_registry
    assert len(sample_registry) == 3
    assert set(sample_registry) == {"admin", "editor", "reader"}
    assert sample_registry.roles() == ["admin", "editor", "reader"]


def test_definition_access(sample_registry: RoleRegistry):
    assert sample_registry.definition("editor") == RoleDefinition(permissions={"docs": ["update"]})
    assert sample_registry.definition("ghost") is None


def test_accepts_plain_mappings():
    registry = RoleRegistry({"ops": {"permission": {"servers": ["restart"]}}})
    assert registry.lookup("ops") == {Permission(resource="servers", action="restart")}


def test_rejects_unknown_definition_keys():
    with pytest.raises(ValidationError):
        RoleRegistry({"ops": {"grants": {"servers": ["restart"]}}})


@pytest.mark.parametrize("role_id", ["", "   "])
def test_rejects_blank_role_ids(role_id):
    with pytest.raises(ValueError, match="non-empty"):
        RoleRegistry({role_id: {"permissions": {"docs": ["read"]}}})


def test_empty_registry():
    registry = RoleRegistry()
    assert len(registry) == 0
    assert registry.lookup("anything") == frozenset()


def test_registry_is_not_affected_by_source_mutation():
    source = {"ops": {"servers": ["restart"]}}
    registry = RoleRegistry.from_statements(source)
    source["ops"]["servers"].append("delete")
    source["intruder"] = {"servers": ["delete"]}
    assert registry.lookup("ops") == {Permission(resource="servers", action="restart")}
    assert "intruder" not in registry


def test_merged_overrides_same_named_roles(sample_registry: RoleRegistry):
    override = RoleRegistry.from_statements({"editor": {"docs": ["read"]}, "ops": {"servers": ["restart"]}})
    merged = sample_registry.merged(override)
    assert merged.lookup("editor") == {Permission(resource="docs", action="read")}
    assert "ops" in merged
    assert "admin" in merged
    # receiver untouched
    assert sample_registry.lookup("editor") == {Permission(resource="docs", action="update")}


def test_fingerprint_tracks_grants():
    a = RoleRegistry.from_statements({"r": {"docs": ["read", "update"]}})
    b = RoleRegistry.from_statements({"r": {"docs": ["update", "read"]}})
    c = RoleRegistry.from_statements({"r": {"docs": ["read"]}})
    assert a.fingerprint == b.fingerprint
    assert a.fingerprint != c.fingerprint


def test_legacy_and_current_role_fields_share_fingerprint():
    current = RoleRegistry({"r": RoleDefinition(permissions={"docs": ["read"]})})
    legacy = RoleRegistry({"r": RoleDefinition(permission={"docs": ["read"]})})
    assert current.fingerprint == legacy.fingerprint


def test_protocol_conformance(sample_registry: RoleRegistry):
    assert isinstance(sample_registry, RoleSource)


# -- Defaults -------------------------------------------------------------------


def test_default_roles_present():
    assert default_registry().roles() == ["admin", "member", "owner"]


def test_default_registry_is_shared():
    assert default_registry() is default_registry()


def test_owner_has_every_statement():
    owner = default_registry().lookup("owner")
    for resource, actions in DEFAULT_STATEMENTS.items():
        for action in actions:
            assert Permission(resource=resource, action=action) in owner


def test_admin_cannot_delete_organization():
    admin = default_registry().lookup("admin")
    assert Permission(resource="organization", action="update") in admin
    assert Permission(resource="organization", action="delete") not in admin
    assert Permission(resource="member", action="delete") in admin


def test_member_is_read_only():
    assert default_registry().lookup("member") == {Permission(resource="ac", action="read")}


def test_default_roles_have_descriptions():
    assert all(d.description for d in DEFAULT_ROLES.values())


# -- RegistryHandle -------------------------------------------------------------


def test_handle_defaults_to_default_registry():
    assert RegistryHandle().current is default_registry()


def test_handle_swap_returns_previous(sample_registry: RoleRegistry):
    handle = RegistryHandle(sample_registry)
    replacement = RoleRegistry.from_statements({"editor": {"users": ["create"]}})
    previous = handle.swap(replacement)
    assert previous is sample_registry
    assert handle.current is replacement


def test_handle_evaluate_uses_current_snapshot(sample_registry: RoleRegistry):
    handle = RegistryHandle(sample_registry)
    request = {"permissions": {"users": ["create"]}}
    assert handle.evaluate("editor", request) is False
    handle.swap(RoleRegistry.from_statements({"editor": {"users": ["create"]}}))
    assert handle.evaluate("editor", request) is True


def test_handle_evaluate_detailed(sample_registry: RoleRegistry):
    decision = RegistryHandle(sample_registry).evaluate_detailed(
        "reader", {"permission": {"docs": ["read", "update"]}}
    )
    assert decision.missing == [Permission(resource="docs", action="update")]


def test_handle_reload_from_file(sample_registry: RoleRegistry, roles_yaml):
    handle = RegistryHandle(sample_registry)
    loaded = handle.reload(roles_yaml)
    assert handle.current is loaded
    assert handle.evaluate("auditor", {"permissions": {"logs": ["read"]}}) is True


def test_handle_reload_failure_keeps_previous(sample_registry: RoleRegistry, tmp_path):
    handle = RegistryHandle(sample_registry)
    bad = tmp_path / "bad.yaml"
    bad.write_text("editor: [not, a, mapping]\n")
    with pytest.raises(RoleConfigError):
        handle.reload(bad)
    assert handle.current is sample_registry


def test_concurrent_readers_see_whole_snapshots():
    """Readers racing a writer always see one of the two complete registries."""
    old = RoleRegistry.from_statements({"r": {"docs": ["read", "update"]}})
    new = RoleRegistry.from_statements({"r": {"users": ["create", "delete"]}})
    handle = RegistryHandle(old)
    errors: list[str] = []
    request = {"permissions": {"docs": ["read"], "users": ["create"]}}

    def reader():
        for _ in range(500):
            # each call sees a full registry, so partial grants never show up
            decision = handle.evaluate_detailed("r", request)
            if decision.allowed or len(decision.missing) != 1:
                errors.append("mixed snapshot")

    def writer():
        for i in range(200):
            handle.swap(new if i % 2 == 0 else old)

    threads = [threading.Thread(target=reader) for _ in range(4)] + [threading.Thread(target=writer)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
