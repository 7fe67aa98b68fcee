"""
Test the example user model across API versions and audiences.

Validates the canonical scenario: usernames and names are public API
fields, emails are personal, and roles only exist from version 2.
"""

import json

from apiview import ProjectionPolicy, marshal, to_json
from apiview.examples import User, build_example_user_types, build_example_users


def test_version_1_api_group():
    policy = ProjectionPolicy(groups=["api"], version="1.0.0")
    assert marshal(policy, build_example_users()) == [
        {"username": "alice", "name": "Alice"},
        {"username": "bob", "name": "Bob"},
    ]


def test_version_2_api_group():
    policy = ProjectionPolicy(groups=["api"], version="2.0.0")
    assert marshal(policy, build_example_users()) == [
        {"username": "alice", "name": "Alice", "roles": ["user", "admin"]},
        {"username": "bob", "name": "Bob", "roles": ["user"]},
    ]


def test_version_2_with_personal_group():
    policy = ProjectionPolicy(groups=["api", "personal"], version="2.0.0")
    output = json.loads(to_json(policy, build_example_users()))
    assert output[0] == {
        "username": "alice",
        "email": "alice@example.org",
        "name": "Alice",
        "roles": ["user", "admin"],
    }


def test_single_user_scenario():
    user = User(username="alice", email="a@x.com", name="", roles=["user"])
    policy = ProjectionPolicy(groups=["api"], version="1")
    assert marshal(policy, user) == {"username": "alice", "name": ""}

    policy = policy.with_options(version="2")
    assert marshal(policy, user)["roles"] == ["user"]
    assert "email" not in marshal(policy, user)

    policy = policy.with_options(groups=["api", "personal"])
    assert set(marshal(policy, user)) == {"username", "email", "name", "roles"}


def test_password_hash_never_projected():
    output = to_json(ProjectionPolicy(), build_example_users())
    assert "password_hash" not in output
    assert "x1" not in output


def test_custom_type_vocabulary():
    policy = ProjectionPolicy(groups=["api"], version="2.0.0", group_key="type")
    assert marshal(policy, build_example_user_types())[1] == {
        "username": "bob",
        "name": "Bob",
        "roles": ["user"],
    }
