"""
Example user model for proof-of-concept projections.

Builds a small user list whose fields are split across the "api" and
"personal" groups, with roles only exposed from API version 2 onwards.
"""
from dataclasses import dataclass
from typing import List

from apiview.fields import NEVER, expose


@dataclass
class User:
    username: str = expose(key="username", groups="api")
    email: str = expose(key="email", groups="personal")
    name: str = expose(key="name", groups="api")
    roles: List[str] = expose(key="roles", groups="api", since="2", default_factory=list)
    password_hash: str = expose(key=NEVER, default="")


@dataclass
class UserType:
    """Same model, grouped under a custom `type` vocabulary."""

    username: str = expose(key="username", type="api")
    email: str = expose(key="email", type="personal")
    name: str = expose(key="name", type="api")
    roles: List[str] = expose(key="roles", type="api", since="2", default_factory=list)


def build_example_users() -> List[User]:
    return [
        User(
            username="alice",
            email="alice@example.org",
            name="Alice",
            roles=["user", "admin"],
            password_hash="x1",
        ),
        User(
            username="bob",
            email="bob@example.org",
            name="Bob",
            roles=["user"],
            password_hash="x2",
        ),
    ]


def build_example_user_types() -> List[UserType]:
    return [
        UserType(username=u.username, email=u.email, name=u.name, roles=list(u.roles))
        for u in build_example_users()
    ]
