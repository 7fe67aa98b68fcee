"""
Field Annotations and Descriptor Table

Attaches projection metadata to dataclass fields and derives a read-only
FieldDescriptor for every field of a dataclass type.

Annotations (all optional):
    key         output key (defaults to the attribute name, "-" never emits)
    omit_empty  drop the field when its value is empty
    quoted      render bool/number/str values as their text
    embedded    splice the children of a nested dataclass into the parent
    visible     project a private (underscore) field anyway
    groups      visibility groups, comma-separated string or iterable
    since       first API version the field exists in (inclusive)
    until       last API version the field exists in (inclusive)
    **tags      extra group vocabularies, e.g. type="api"

ARCHITECTURAL RULE:
    Descriptors are derived once per type and cached.
    Version bounds are kept as text and parsed on first use, so a malformed
    bound only fails a projection that actually compares versions.
"""

from __future__ import annotations

import dataclasses
import functools
from dataclasses import dataclass, field
from collections.abc import Iterable
from typing import Any, Dict, FrozenSet, Optional, Tuple, Union

from packaging.version import InvalidVersion, Version

METADATA_KEY = "apiview"

NEVER = "-"
"""Output key sentinel: the field is never projected."""

_RESERVED = ("key", "omit_empty", "quoted", "embedded", "visible", "since", "until")


class ProjectionError(Exception):
    """Base class for all projection failures."""
    pass


class InvalidVersionSpec(ProjectionError, ValueError):
    """Raised when a version string cannot be parsed."""

    def __init__(self, text: str, owner: str = ""):
        self.text = text
        self.owner = owner
        where = f" on {owner}" if owner else ""
        super().__init__(f"Invalid version {text!r}{where}")


def parse_version(text: Union[str, Version], owner: str = "") -> Version:
    """
    Parse a version string into a comparable Version.

    Accepts anything PEP 440 accepts, which covers plain semantic versions
    ("2", "2.1", "1.0.0"). Version("2") == Version("2.0.0").

    Raises:
        InvalidVersionSpec: If the string is not a version
    """
    if isinstance(text, Version):
        return text
    try:
        return Version(str(text).strip())
    except InvalidVersion:
        raise InvalidVersionSpec(str(text), owner) from None


def split_groups(raw: Any) -> FrozenSet[str]:
    """Normalise a groups annotation into a set of non-empty group names."""
    if raw is None:
        return frozenset()
    if isinstance(raw, str):
        parts: Iterable[str] = raw.split(",")
    elif isinstance(raw, Iterable):
        parts = [str(p) for p in raw]
    else:
        parts = [str(raw)]
    return frozenset(p.strip() for p in parts if p and p.strip())


def expose(
    *,
    key: Optional[str] = None,
    omit_empty: bool = False,
    quoted: bool = False,
    embedded: bool = False,
    visible: bool = False,
    groups: Union[str, Iterable[str], None] = None,
    since: Optional[str] = None,
    until: Optional[str] = None,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
    **tags: Any,
):
    """
    Declare a dataclass field with projection annotations.

    Example:
        @dataclass
        class User:
            username: str = expose(key="username", groups="api")
            roles: List[str] = expose(groups=["api"], since="2", default_factory=list)
            password: str = expose(key=NEVER, default="")
    """
    annotations: Dict[str, Any] = dict(tags)
    annotations.update(
        key=key,
        omit_empty=omit_empty,
        quoted=quoted,
        embedded=embedded,
        visible=visible,
        since=since,
        until=until,
    )
    if groups is not None:
        annotations["groups"] = groups
    return field(
        default=default,
        default_factory=default_factory,
        metadata={METADATA_KEY: annotations},
    )


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Static projection metadata for one dataclass field.

    Properties:
        name: Attribute name on the dataclass
        key: Declared output key, None when not declared
        omit_empty: Skip the field when its value is empty
        quoted: Render primitive values as text
        embedded: Field is a composed dataclass to flatten
        visible: Project even though the name is private
        since_text: Lowest API version (inclusive) as declared, or None
        until_text: Highest API version (inclusive) as declared, or None
        tags: Every group vocabulary declared on the field
        owner: Qualified field name used in error messages

    since/until parse the declared text on first access and raise
    InvalidVersionSpec when it is not a version.
    """

    name: str
    key: Optional[str] = None
    omit_empty: bool = False
    quoted: bool = False
    embedded: bool = False
    visible: bool = False
    since_text: Optional[str] = None
    until_text: Optional[str] = None
    tags: Tuple[Tuple[str, FrozenSet[str]], ...] = ()
    owner: str = field(default="", compare=False)

    @functools.cached_property
    def since(self) -> Optional[Version]:
        return parse_version(self.since_text, self.owner) if self.since_text else None

    @functools.cached_property
    def until(self) -> Optional[Version]:
        return parse_version(self.until_text, self.owner) if self.until_text else None

    @property
    def output_key(self) -> str:
        return self.key if self.key else self.name

    @property
    def is_never_emit(self) -> bool:
        return self.key == NEVER

    @property
    def is_private(self) -> bool:
        return self.name.startswith("_")

    @property
    def groups(self) -> FrozenSet[str]:
        return self.groups_for("groups")

    def groups_for(self, group_key: str) -> FrozenSet[str]:
        """Return the groups declared under a vocabulary (empty if none)."""
        for name, values in self.tags:
            if name == group_key:
                return values
        return frozenset()

    def tag(self, name: str) -> FrozenSet[str]:
        return self.groups_for(name)


def descriptor_from_field(f: dataclasses.Field, owner: str = "") -> FieldDescriptor:
    """Build the descriptor for a single dataclasses.Field."""
    annotations = dict(f.metadata.get(METADATA_KEY, {}))
    where = f"{owner}.{f.name}" if owner else f.name

    since = annotations.get("since")
    until = annotations.get("until")

    tags = tuple(
        sorted(
            (name, split_groups(value))
            for name, value in annotations.items()
            if name not in _RESERVED
        )
    )

    return FieldDescriptor(
        name=f.name,
        key=annotations.get("key") or None,
        omit_empty=bool(annotations.get("omit_empty", False)),
        quoted=bool(annotations.get("quoted", False)),
        embedded=bool(annotations.get("embedded", False)),
        visible=bool(annotations.get("visible", False)),
        since_text=str(since) if since else None,
        until_text=str(until) if until else None,
        tags=tags,
        owner=where,
    )


@functools.lru_cache(maxsize=None)
def _describe_type(cls: type) -> Tuple[FieldDescriptor, ...]:
    return tuple(descriptor_from_field(f, cls.__qualname__) for f in dataclasses.fields(cls))


def describe(cls_or_instance: Any) -> Tuple[FieldDescriptor, ...]:
    """
    Return the descriptors of a dataclass type in declaration order.

    Args:
        cls_or_instance: A dataclass type or instance

    Raises:
        TypeError: If the argument is not a dataclass
    """
    cls = cls_or_instance if isinstance(cls_or_instance, type) else type(cls_or_instance)
    if not dataclasses.is_dataclass(cls):
        raise TypeError(f"{cls.__qualname__} is not a dataclass")
    return _describe_type(cls)
