#!/usr/bin/env python3
"""
Demo: project the example user list for several API versions and audiences.

Shows the same model rendered as:
1. API v1, "api" group only
2. API v2, "api" group only (roles appear)
3. API v2, "api" and "personal" groups (email appears)
4. YAML output using the custom "type" group vocabulary
"""

from apiview import ProjectionPolicy, to_json, to_yaml
from apiview.examples import build_example_user_types, build_example_users


def main():
    users = build_example_users()

    runs = [
        ("Version 1 output", ProjectionPolicy(groups={"api"}, version="1.0.0")),
        ("Version 2 output", ProjectionPolicy(groups={"api"}, version="2.0.0")),
        (
            "Version 2 output with personal group too",
            ProjectionPolicy(groups={"api", "personal"}, version="2.0.0"),
        ),
    ]

    print("=" * 70)
    print("PROJECTION DEMO: one model, many views")
    print("=" * 70)

    for title, policy in runs:
        print(f"\n{title}:")
        print(to_json(policy, users, indent=2))

    print("\nVersion 2 YAML output, grouped by `type`:")
    policy = ProjectionPolicy(groups={"api"}, version="2.0.0", group_key="type")
    print(to_yaml(policy, build_example_user_types()))


if __name__ == "__main__":
    main()
