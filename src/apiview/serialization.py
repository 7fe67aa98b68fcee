"""
Serialization helpers for projected values and projection policies.

Provides JSON/YAML text output via the intermediate dict representation
produced by marshal(), and loads ProjectionPolicy objects from plain
configuration data (dict, JSON or YAML).
"""
from __future__ import annotations

import dataclasses
import datetime
import functools
import json
from enum import Enum
from typing import Any, Dict, Tuple

import yaml
from packaging.version import Version

from apiview.capabilities import is_opaque
from apiview.policy import ProjectionPolicy
from apiview.projector import marshal


def opaque_to_plain(value: Any) -> Any:
    """Render an opaque leaf (date, UUID, enum, ...) as a JSON-friendly scalar."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, datetime.timedelta):
        return value.total_seconds()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    return str(value)


def _json_default(value: Any, extra_opaque: Tuple[type, ...] = ()) -> Any:
    if is_opaque(value, extra_opaque):
        return opaque_to_plain(value)
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    raise TypeError(f"Object of type {type(value).__qualname__} is not JSON serializable")


def _plain(value: Any, extra_opaque: Tuple[type, ...] = ()) -> Any:
    if isinstance(value, dict):
        return {k: _plain(v, extra_opaque) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v, extra_opaque) for v in value]
    if is_opaque(value, extra_opaque):
        return _plain(opaque_to_plain(value), extra_opaque)
    return value


def to_json(policy: ProjectionPolicy | None, value: Any, **kwargs: Any) -> str:
    """Project `value` and encode it as JSON. Extra kwargs go to json.dumps."""
    extra_opaque = policy.opaque_types if policy is not None else ()
    kwargs.setdefault("default", functools.partial(_json_default, extra_opaque=extra_opaque))
    return json.dumps(marshal(policy, value), **kwargs)


def to_yaml(policy: ProjectionPolicy | None, value: Any) -> str:
    """Project `value` and encode it as YAML, keeping field order."""
    extra_opaque = policy.opaque_types if policy is not None else ()
    return yaml.safe_dump(_plain(marshal(policy, value), extra_opaque), sort_keys=False)


def policy_to_dict(policy: ProjectionPolicy) -> Dict[str, Any]:
    return {
        "groups": sorted(policy.groups),
        "version": str(policy.version) if policy.version is not None else None,
        "include_untagged": policy.include_untagged,
        "group_key": policy.group_key,
        "strict": policy.strict,
    }


def policy_from_dict(d: Dict[str, Any] | None, **overrides: Any) -> ProjectionPolicy:
    """
    Build a policy from configuration data.

    Unknown keys are rejected so typos in config files surface early.
    A fractional version must be quoted, since YAML reads 2.10 as 2.1, and
    flags must be real booleans. Both raise ValueError otherwise.
    Keyword overrides (e.g. field_filter=..., opaque_types=...) win over
    the data.
    """
    d = dict(d or {})
    known = {"groups", "version", "include_untagged", "group_key", "strict"}
    unknown = set(d) - known
    if unknown:
        raise ValueError(f"Unknown policy options: {sorted(unknown)}")
    d.update(overrides)
    return ProjectionPolicy(
        groups=d.get("groups") or frozenset(),
        version=_config_version(d.get("version")),
        include_untagged=_config_flag(d, "include_untagged"),
        field_filter=d.get("field_filter"),
        group_key=d.get("group_key") or "groups",
        strict=_config_flag(d, "strict"),
        opaque_types=d.get("opaque_types") or (),
    )


def _config_version(version: Any) -> Any:
    if version is None or isinstance(version, (str, Version)):
        return version
    if isinstance(version, bool) or not isinstance(version, int):
        raise ValueError(
            f"Policy version must be a string, got {type(version).__qualname__} "
            f"{version!r}; quote it in the config file so that e.g. 2.10 is not read as 2.1"
        )
    return str(version)


def _config_flag(d: Dict[str, Any], name: str) -> bool:
    value = d.get(name, False)
    if not isinstance(value, bool):
        raise ValueError(f"Policy option {name!r} must be true or false, got {value!r}")
    return value


def policy_to_json(policy: ProjectionPolicy) -> str:
    return json.dumps(policy_to_dict(policy), sort_keys=True)


def policy_from_json(s: str, **overrides: Any) -> ProjectionPolicy:
    return policy_from_dict(json.loads(s), **overrides)


def policy_to_yaml(policy: ProjectionPolicy) -> str:
    return yaml.safe_dump(policy_to_dict(policy))


def policy_from_yaml(s: str, **overrides: Any) -> ProjectionPolicy:
    return policy_from_dict(yaml.safe_load(s), **overrides)
