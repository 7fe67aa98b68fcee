"""
Projection Policy

The caller-supplied options governing one projection:
    - which visibility groups are active
    - which API version is being served
    - whether fields without groups are shown
    - an optional custom field filter replacing the built-in rules

A policy is immutable. It holds no traversal state, so a single policy
can be reused across calls and threads.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from numbers import Number
from collections.abc import Sized
from typing import Callable, FrozenSet, Optional, Tuple

from packaging.version import Version

from apiview.fields import FieldDescriptor, parse_version, split_groups

FieldFilter = Callable[[FieldDescriptor], bool]


def is_empty_value(value) -> bool:
    """
    True when a value counts as empty for omit_empty.

    Empty means None, False, numeric zero, or a zero-length
    string/container. Dataclass instances are never empty.
    """
    if value is None:
        return True
    if isinstance(value, bool):
        return not value
    if isinstance(value, Number):
        return value == 0
    if isinstance(value, Sized) and not hasattr(value, "__dataclass_fields__"):
        return len(value) == 0
    return False


@dataclass(frozen=True)
class ProjectionPolicy:
    """
    Options for one projection.

    Properties:
        groups:
            Active visibility groups. Empty means no group filtering.

        version:
            API version being served, parsed from a string if needed.
            None means since/until bounds are not evaluated.

        include_untagged:
            With active groups, also show fields that declare no groups.

        field_filter:
            Custom predicate over FieldDescriptor. When set it alone
            decides inclusion; groups and version are ignored.

        group_key:
            Annotation vocabulary holding the groups (default "groups").
            Lets one model carry independent groupings, e.g. type="api".

        strict:
            Reject top-level input that is not a dataclass or
            self-projecting value (InvalidInputType).

        opaque_types:
            Extra types passed through unchanged by this policy only,
            on top of the built-in and registered opaque types.

    Example:
        ProjectionPolicy(groups={"api"}, version="2.0.0")
    """

    groups: FrozenSet[str] = field(default_factory=frozenset)
    version: Optional[Version] = None
    include_untagged: bool = False
    field_filter: Optional[FieldFilter] = field(default=None, compare=False)
    group_key: str = "groups"
    strict: bool = False
    opaque_types: Tuple[type, ...] = ()

    def __post_init__(self):
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "groups", split_groups(self.groups))
        object.__setattr__(self, "opaque_types", tuple(self.opaque_types))
        if self.version is not None:
            object.__setattr__(self, "version", parse_version(self.version, "policy"))

    @property
    def filters_groups(self) -> bool:
        return bool(self.groups)

    def resolve_groups(
        self, descriptor: FieldDescriptor, inherited: Optional[FrozenSet[str]] = None
    ) -> FrozenSet[str]:
        """Groups of a field, falling back to groups inherited from an embedding field."""
        own = descriptor.groups_for(self.group_key)
        if not own and inherited:
            return inherited
        return own

    def should_include(
        self, descriptor: FieldDescriptor, inherited: Optional[FrozenSet[str]] = None
    ) -> bool:
        """
        Decide whether a field contributes to the output.

        Args:
            descriptor: Field being visited
            inherited: Groups of the enclosing embedded field, if any

        Returns:
            True if the field is projected
        """
        if self.field_filter is not None:
            return bool(self.field_filter(descriptor))

        if descriptor.is_never_emit:
            return False

        if self.filters_groups:
            resolved = self.resolve_groups(descriptor, inherited)
            if not resolved:
                if not self.include_untagged:
                    return False
            elif not (resolved & self.groups):
                return False

        if self.version is not None:
            if descriptor.since is not None and self.version < descriptor.since:
                return False
            if descriptor.until is not None and self.version > descriptor.until:
                return False

        return True

    def with_options(self, **changes) -> "ProjectionPolicy":
        """Copy of this policy with some options replaced."""
        return replace(self, **changes)

