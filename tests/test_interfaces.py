"""Tests for the permission token model and RoleSource protocol."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from rolegate.access.evaluator import evaluate
from rolegate.interfaces import Permission, RoleSource


class TestPermission:
    def test_frozen(self):
        p = Permission(resource="docs", action="read")
        with pytest.raises(ValidationError):
            p.action = "write"

    def test_hashable_and_equal_by_value(self):
        a = Permission(resource="docs", action="read")
        b = Permission(resource="docs", action="read")
        assert a == b
        assert len({a, b}) == 1

    def test_resource_scoped(self):
        assert Permission(resource="docs", action="read") != Permission(resource="users", action="read")

    def test_str(self):
        assert str(Permission(resource="docs", action="read")) == "docs:read"

    def test_requires_both_fields(self):
        with pytest.raises(ValidationError):
            Permission(resource="docs")


class _StaticSource:
    """Minimal role source that is not a RoleRegistry."""

    def __init__(self, grants: dict[str, frozenset[Permission]]):
        self._grants = grants

    def lookup(self, role_id: str) -> frozenset[Permission]:
        return self._grants.get(role_id, frozenset())


class TestRoleSource:
    def test_custom_source_conforms(self):
        assert isinstance(_StaticSource({}), RoleSource)

    def test_object_without_lookup_does_not_conform(self):
        assert not isinstance(object(), RoleSource)

    def test_evaluator_accepts_any_source(self):
        source = _StaticSource({"bot": frozenset({Permission(resource="jobs", action="run")})})
        assert evaluate("bot", {"permissions": {"jobs": ["run"]}}, source) is True
        assert evaluate("human", {"permissions": {"jobs": ["run"]}}, source) is False
