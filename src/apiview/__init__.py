"""
apiview: versioned, group-aware projection of dataclasses

Turns dataclass instances into plain dict/list/scalar trees ready for
json.dumps, keeping only the fields visible under a ProjectionPolicy:
    - visibility groups (api, personal, admin, ...)
    - API version bounds (since / until)
    - a custom field filter

One data model serves every API version and every audience.

    @dataclass
    class User:
        username: str = expose(groups="api")
        email: str = expose(groups="personal")
        roles: List[str] = expose(groups="api", since="2", default_factory=list)

    marshal(ProjectionPolicy(groups={"api"}, version="1.0.0"), user)
    # {"username": "alice"}
"""

from apiview.capabilities import SelfProjecting, is_opaque, register_opaque
from apiview.fields import (
    NEVER,
    FieldDescriptor,
    InvalidVersionSpec,
    ProjectionError,
    describe,
    expose,
)
from apiview.policy import ProjectionPolicy
from apiview.projector import InvalidInputType, UnsupportedKeyType, marshal, project_fields
from apiview.serialization import policy_from_dict, policy_from_yaml, to_json, to_yaml

__version__ = "0.1.0"

__all__ = [
    "NEVER",
    "FieldDescriptor",
    "InvalidInputType",
    "InvalidVersionSpec",
    "ProjectionError",
    "ProjectionPolicy",
    "SelfProjecting",
    "UnsupportedKeyType",
    "describe",
    "expose",
    "is_opaque",
    "marshal",
    "policy_from_dict",
    "policy_from_yaml",
    "project_fields",
    "register_opaque",
    "to_json",
    "to_yaml",
]
