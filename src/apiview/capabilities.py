"""
Value Capabilities

Decides how the projector treats a runtime value, before any structural
handling takes place.

Capability kinds:
    SELF_PROJECTING  value defines __project__(policy) and renders itself
    OPAQUE           value already has a faithful encoding (dates, UUIDs,
                     IP addresses, enums...) and is passed through untouched
    STRUCTURED       dataclass instance, projected field by field
    MAPPING          dict-like, projected value by value
    SEQUENCE         list-like, projected element by element
    SCALAR           anything else, passed through
"""

import dataclasses
import datetime
import decimal
import fractions
import ipaddress
import pathlib
import uuid
from collections.abc import Mapping, Sequence, Set
from enum import Enum
from typing import Any, Protocol, Tuple, runtime_checkable


class Capability(Enum):
    SELF_PROJECTING = "self_projecting"
    OPAQUE = "opaque"
    STRUCTURED = "structured"
    MAPPING = "mapping"
    SEQUENCE = "sequence"
    SCALAR = "scalar"


@runtime_checkable
class SelfProjecting(Protocol):
    """
    Override hook: a type that knows how to project itself.

    The hook receives the active ProjectionPolicy and returns the
    projected value. To project its own fields with the standard rules,
    call apiview.project_fields(policy, self) (calling marshal on self
    would dispatch back into the hook).
    """

    def __project__(self, policy: Any) -> Any:
        ...


_OPAQUE_TYPES = (
    datetime.date,
    datetime.time,
    datetime.timedelta,
    decimal.Decimal,
    fractions.Fraction,
    uuid.UUID,
    ipaddress.IPv4Address,
    ipaddress.IPv6Address,
    ipaddress.IPv4Network,
    ipaddress.IPv6Network,
    ipaddress.IPv4Interface,
    ipaddress.IPv6Interface,
    pathlib.PurePath,
    Enum,
)

_registered_opaque: set = set()

_TEXT_TYPES = (str, bytes, bytearray, memoryview)


def register_opaque(cls: type) -> type:
    """
    Mark a type as opaque for every projection: its instances are passed
    through unchanged.

    The registry is process-wide, so call this at import time only.
    To treat a type as opaque for some projections only, list it in
    ProjectionPolicy.opaque_types instead.

    Usable as a class decorator:

        @register_opaque
        @dataclass
        class Money:
            amount: int
            currency: str
    """
    _registered_opaque.add(cls)
    return cls


def is_opaque(value: Any, extra_opaque: Tuple[type, ...] = ()) -> bool:
    if isinstance(value, _OPAQUE_TYPES) or (extra_opaque and isinstance(value, extra_opaque)):
        return True
    return any(isinstance(value, cls) for cls in _registered_opaque)


def is_self_projecting(value: Any) -> bool:
    return not isinstance(value, type) and callable(getattr(type(value), "__project__", None))


def is_structured(value: Any) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def resolve_capability(value: Any, extra_opaque: Tuple[type, ...] = ()) -> Capability:
    """Classify a non-None value. Order matters: hooks beat structure."""
    if is_self_projecting(value):
        return Capability.SELF_PROJECTING
    if is_opaque(value, extra_opaque):
        return Capability.OPAQUE
    if is_structured(value):
        return Capability.STRUCTURED
    if isinstance(value, Mapping):
        return Capability.MAPPING
    if isinstance(value, _TEXT_TYPES):
        return Capability.SCALAR
    if isinstance(value, (Sequence, Set)):
        return Capability.SEQUENCE
    return Capability.SCALAR
