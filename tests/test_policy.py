"""
Tests for the field inclusion policy.

These tests verify:
    - group filtering and the include_untagged flag
    - inclusive since/until version bounds
    - custom field filters replacing the built-in rules
    - inherited groups from embedding fields
    - empty-value detection for omit_empty
"""

from dataclasses import dataclass
from decimal import Decimal

import pytest
from packaging.version import Version

from apiview.fields import NEVER, InvalidVersionSpec, describe, expose
from apiview.policy import ProjectionPolicy, is_empty_value


@dataclass
class Sample:
    api: str = expose(groups="api", default="")
    api_admin: str = expose(groups="api,admin", default="")
    untagged: str = ""
    since_2: str = expose(since="2", default="")
    until_2: str = expose(until="2", default="")
    window: str = expose(since="1.5", until="2.5", default="")
    hidden: str = expose(key=NEVER, default="")
    typed: str = expose(type="public", default="")


FIELDS = {d.name: d for d in describe(Sample)}


class TestConstruction:
    """Test ProjectionPolicy normalisation."""

    def test_defaults(self):
        policy = ProjectionPolicy()
        assert policy.groups == frozenset()
        assert policy.version is None
        assert not policy.include_untagged
        assert policy.field_filter is None
        assert policy.group_key == "groups"
        assert not policy.strict

    def test_groups_from_list_or_string(self):
        assert ProjectionPolicy(groups=["a", "b"]).groups == frozenset({"a", "b"})
        assert ProjectionPolicy(groups="a,b").groups == frozenset({"a", "b"})

    def test_version_parsed(self):
        assert ProjectionPolicy(version="2").version == Version("2.0.0")

    def test_invalid_version(self):
        with pytest.raises(InvalidVersionSpec):
            ProjectionPolicy(version="latest")

    def test_immutable(self):
        policy = ProjectionPolicy()
        with pytest.raises(AttributeError):
            policy.groups = frozenset({"x"})

    def test_with_options(self):
        policy = ProjectionPolicy(groups={"api"})
        changed = policy.with_options(version="3")
        assert changed.groups == frozenset({"api"})
        assert changed.version == Version("3")
        assert policy.version is None


class TestGroups:
    """Test group filtering."""

    def test_no_groups_includes_everything(self):
        policy = ProjectionPolicy()
        assert policy.should_include(FIELDS["api"])
        assert policy.should_include(FIELDS["untagged"])

    def test_matching_group(self):
        policy = ProjectionPolicy(groups={"admin"})
        assert policy.should_include(FIELDS["api_admin"])
        assert not policy.should_include(FIELDS["api"])

    def test_untagged_excluded_by_default(self):
        policy = ProjectionPolicy(groups={"api"})
        assert not policy.should_include(FIELDS["untagged"])

    def test_untagged_with_flag(self):
        policy = ProjectionPolicy(groups={"api"}, include_untagged=True)
        assert policy.should_include(FIELDS["untagged"])
        assert policy.should_include(FIELDS["api"])
        assert not ProjectionPolicy(groups={"other"}, include_untagged=True).should_include(
            FIELDS["api"]
        )

    def test_inherited_groups(self):
        """A field without groups uses the groups of its embedding field."""
        policy = ProjectionPolicy(groups={"public"})
        assert policy.should_include(FIELDS["untagged"], frozenset({"public"}))
        assert not policy.should_include(FIELDS["untagged"], frozenset({"private"}))

    def test_own_groups_beat_inherited(self):
        policy = ProjectionPolicy(groups={"public"})
        assert not policy.should_include(FIELDS["api"], frozenset({"public"}))

    def test_custom_group_key(self):
        policy = ProjectionPolicy(groups={"public"}, group_key="type")
        assert policy.should_include(FIELDS["typed"])
        assert not policy.should_include(FIELDS["api"])


class TestVersions:
    """Test since/until bounds."""

    @pytest.mark.parametrize(
        "version, expected",
        [("1.0.0", False), ("2", True), ("2.0.0", True), ("3.0.0", True)],
    )
    def test_since(self, version, expected):
        assert ProjectionPolicy(version=version).should_include(FIELDS["since_2"]) is expected

    @pytest.mark.parametrize(
        "version, expected",
        [("1.0.0", True), ("2.0.0", True), ("2.0.1", False), ("3", False)],
    )
    def test_until(self, version, expected):
        assert ProjectionPolicy(version=version).should_include(FIELDS["until_2"]) is expected

    def test_window(self):
        assert not ProjectionPolicy(version="1.4").should_include(FIELDS["window"])
        assert ProjectionPolicy(version="1.5").should_include(FIELDS["window"])
        assert ProjectionPolicy(version="2.5").should_include(FIELDS["window"])
        assert not ProjectionPolicy(version="2.6").should_include(FIELDS["window"])

    def test_no_version_ignores_bounds(self):
        policy = ProjectionPolicy()
        assert policy.should_include(FIELDS["since_2"])
        assert policy.should_include(FIELDS["until_2"])

    def test_groups_and_version_combined(self):
        policy = ProjectionPolicy(groups={"api"}, version="1")
        assert policy.should_include(FIELDS["api"])
        assert not policy.should_include(FIELDS["since_2"])


class TestCustomFilter:
    """Test custom field filters."""

    def test_replaces_builtin_rules(self):
        policy = ProjectionPolicy(
            groups={"nothing-matches"},
            version="1",
            field_filter=lambda d: d.name.startswith("since"),
        )
        assert policy.should_include(FIELDS["since_2"])
        assert not policy.should_include(FIELDS["api"])

    def test_errors_propagate(self):
        def explode(descriptor):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            ProjectionPolicy(field_filter=explode).should_include(FIELDS["api"])

    def test_never_emit(self):
        assert not ProjectionPolicy().should_include(FIELDS["hidden"])


class TestIsEmptyValue:
    """Test omit_empty detection."""

    @pytest.mark.parametrize(
        "value", [None, False, 0, 0.0, Decimal("0"), "", b"", [], (), {}, set()]
    )
    def test_empty(self, value):
        assert is_empty_value(value)

    @pytest.mark.parametrize("value", [True, 1, -1, 0.5, "x", [0], {"a": None}, Sample()])
    def test_not_empty(self, value):
        assert not is_empty_value(value)
