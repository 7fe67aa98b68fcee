"""
Projector: converts runtime values into plain dict/list/scalar trees.

Entry point:
    marshal(policy, value)

Traversal rules, in order:
    1. None projects to None.
    2. Self-projecting values (__project__) render themselves.
    3. Opaque values (dates, UUIDs, enums, registered types) pass through.
    4. Dataclass instances become dicts of their included fields.
    5. Mappings become dicts; every key must be a string.
    6. Sequences and sets become lists, order and length preserved.
    7. Anything else passes through as a scalar.

The first error raised anywhere aborts the whole projection.
"""

from __future__ import annotations

import math
import warnings
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from apiview.capabilities import (
    Capability,
    is_opaque,
    is_self_projecting,
    is_structured,
    resolve_capability,
)
from apiview.fields import FieldDescriptor, ProjectionError, describe
from apiview.policy import ProjectionPolicy, is_empty_value

_QUOTABLE = (bool, int, float, str)


def _is_quotable(value: Any) -> bool:
    return isinstance(value, _QUOTABLE) and not isinstance(value, Enum) and not is_self_projecting(value)


class UnsupportedKeyType(ProjectionError, TypeError):
    """Raised when a mapping uses keys that are not strings."""

    def __init__(self, key_type: type):
        self.key_type = key_type
        super().__init__(
            f"Unable to project mapping with {key_type.__qualname__} keys. String keys required."
        )


class InvalidInputType(ProjectionError, TypeError):
    """Raised in strict mode when the top-level value is not a dataclass."""

    def __init__(self, value_type: type):
        self.value_type = value_type
        super().__init__(
            f"Unable to project type {value_type.__qualname__}. Dataclass required."
        )


def marshal(policy: Optional[ProjectionPolicy], value: Any) -> Any:
    """
    Project a value according to a policy.

    Args:
        policy: Options for this projection (None means default options)
        value: Any value, typically a dataclass instance or a list of them

    Returns:
        dict for dataclasses and mappings, list for sequences,
        the value itself for scalars and opaque types, None for None

    Raises:
        InvalidVersionSpec: A version-filtered field declares a malformed since/until
        UnsupportedKeyType: A mapping has non-string keys
        InvalidInputType: Strict policy and a non-dataclass top-level value
    """
    if policy is None:
        policy = ProjectionPolicy()
    if value is None:
        return None
    if policy.strict and not (is_structured(value) or is_self_projecting(value)):
        raise InvalidInputType(type(value))
    return project(policy, value)


def project(policy: ProjectionPolicy, value: Any) -> Any:
    """Project one value of any shape."""
    if value is None:
        return None

    capability = resolve_capability(value, policy.opaque_types)

    if capability is Capability.SELF_PROJECTING:
        return value.__project__(policy)
    if capability is Capability.OPAQUE or capability is Capability.SCALAR:
        return value
    if capability is Capability.STRUCTURED:
        return project_fields(policy, value)
    if capability is Capability.MAPPING:
        return _project_mapping(policy, value)
    return [project(policy, item) for item in value]


def project_fields(
    policy: ProjectionPolicy, value: Any, inherited: Optional[FrozenSet[str]] = None
) -> Dict[str, Any]:
    """
    Project the fields of a dataclass instance into a dict.

    Bypasses the capability checks on `value` itself, so a __project__
    hook can call this on its own instance.

    Args:
        policy: Active options
        value: Dataclass instance
        inherited: Groups handed down by an embedding field
    """
    dest: Dict[str, Any] = {}

    for descriptor in describe(value):
        if descriptor.is_private and not descriptor.visible:
            continue
        if descriptor.is_never_emit:
            continue

        raw = getattr(value, descriptor.name)

        if descriptor.embedded:
            if raw is None:
                continue
            renders_itself = is_self_projecting(raw) or is_opaque(raw, policy.opaque_types)
            if is_structured(raw) and not renders_itself:
                _project_embedded(policy, descriptor, raw, inherited, dest)
                continue
            if is_structured(raw) or renders_itself:
                # renders itself, so it keeps its own key
                dest[descriptor.output_key] = project(policy, raw)
                continue
            warnings.warn(
                f"Field {type(value).__qualname__}.{descriptor.name} is marked embedded "
                f"but holds {type(raw).__qualname__}; projecting it as a plain field",
                UserWarning,
            )

        if descriptor.omit_empty and is_empty_value(raw):
            continue
        if not policy.should_include(descriptor, inherited):
            continue

        projected = project(policy, raw)
        if descriptor.quoted and _is_quotable(raw):
            projected = format_scalar(raw)
        dest[descriptor.output_key] = projected

    return dest


def _project_embedded(
    policy: ProjectionPolicy,
    descriptor: FieldDescriptor,
    raw: Any,
    inherited: Optional[FrozenSet[str]],
    dest: Dict[str, Any],
) -> None:
    # children without groups of their own take the embedding field's groups
    child_groups = policy.resolve_groups(descriptor, inherited)
    nested = project_fields(policy, raw, child_groups)
    if descriptor.key:
        dest[descriptor.key] = nested
    else:
        dest.update(nested)


def _project_mapping(policy: ProjectionPolicy, value: Any) -> Dict[str, Any]:
    dest: Dict[str, Any] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            raise UnsupportedKeyType(type(key))
        dest[str.__str__(key)] = project(policy, item)
    return dest


def format_scalar(value: Any) -> str:
    """
    Text form of a primitive for quoted fields.

    True/False become "true"/"false". Floats use the shortest digits that
    round-trip, switching to exponent form below 1e-4 and from 1e6 upwards:
    12.0 -> "12", 0.5 -> "0.5", 1e6 -> "1e+06", 1234567.0 -> "1.234567e+06".
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_float(value)
    return str(value)


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"

    sign, digits, exponent = Decimal(repr(value)).normalize().as_tuple()
    text = "".join(str(d) for d in digits)
    point = len(text) + exponent
    magnitude = point - 1

    if magnitude < -4 or magnitude >= 6:
        mantissa = text[0] + ("." + text[1:] if len(text) > 1 else "")
        body = f"{mantissa}e{'-' if magnitude < 0 else '+'}{abs(magnitude):02d}"
    elif point <= 0:
        body = "0." + "0" * -point + text
    elif point >= len(text):
        body = text + "0" * (point - len(text))
    else:
        body = text[:point] + "." + text[point:]
    return ("-" if sign else "") + body
