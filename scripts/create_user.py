"""Utility script to create a user identity and print a bearer token."""

from __future__ import annotations

import argparse
from uuid import uuid4

from clario.domain.entities import User
from clario.domain.exceptions import StoreError
from clario.infrastructure.database import SessionLocal, initialize_database
from clario.infrastructure.repositories import UserRepository
from clario.infrastructure.security import create_access_token


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for user creation."""

    parser = argparse.ArgumentParser(
        description="Create a user identity for local testing of the notification API.",
    )
    parser.add_argument("--username", required=True, help="Public username of the user")
    parser.add_argument("--avatar-url", default=None, help="Avatar URL (optional)")
    parser.add_argument(
        "--id",
        default=None,
        help="Identity issued by the auth provider (defaults to a new UUID)",
    )
    return parser.parse_args()


def main() -> None:
    """Create the user and print its id and an access token."""

    args = parse_args()
    initialize_database()

    session = SessionLocal()
    try:
        user = UserRepository(session).create(
            User(id=args.id or str(uuid4()), username=args.username, avatar_url=args.avatar_url)
        )
    except StoreError as exc:
        raise SystemExit(f"Could not create the user: {exc}") from exc
    finally:
        session.close()

    print(
        "User created:\n"
        f"  ID: {user.id}\n"
        f"  Username: {user.username}\n"
        f"  Token: {create_access_token(user.id)}"
    )


if __name__ == "__main__":
    main()
