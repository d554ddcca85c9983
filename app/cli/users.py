# app/cli/users.py
"""
CLI commands for API consumers.

Usage:
    python -m app.cli.users create --name "Ada" --email ada@example.com
    python -m app.cli.users create --name "Ada" --email ada@example.com --permission articles.view
    python -m app.cli.users grant ada@example.com preferences.view
    python -m app.cli.users list
"""

import argparse
import sys

from dotenv import load_dotenv

load_dotenv()

from app.models import Permission  # noqa: E402

ALL_PERMISSIONS = [p.value for p in Permission]


def get_db_session():
    """Get a database session."""
    from app.database import SessionLocal

    return SessionLocal()


def create_user(db, name: str, email: str, permissions: list[str]) -> tuple:
    """Create a user with the given permissions. Returns (user, plaintext API key)."""
    from app import models
    from app.auth import generate_api_key, hash_api_key

    api_key = generate_api_key()
    user = models.User(name=name, email=email, api_key_hash=hash_api_key(api_key))
    user.permissions = [models.UserPermission(name=p) for p in dict.fromkeys(permissions)]
    db.add(user)
    db.commit()
    db.refresh(user)
    return user, api_key


def cmd_create(args):
    """Create a user and print their API key once."""
    from app import models

    db = get_db_session()
    try:
        if db.query(models.User).filter(models.User.email == args.email).first():
            print(f"Error: a user with email '{args.email}' already exists")
            sys.exit(1)

        permissions = args.permission or ALL_PERMISSIONS
        user, api_key = create_user(db, args.name, args.email, permissions)

        print(f"\nCreated user {user.id} ({user.email})")
        print(f"Permissions: {', '.join(sorted(p.name for p in user.permissions))}")
        print(f"API key (shown once): {api_key}\n")
    finally:
        db.close()


def cmd_grant(args):
    """Grant a permission to an existing user."""
    from app import models

    db = get_db_session()
    try:
        user = db.query(models.User).filter(models.User.email == args.email).first()
        if not user:
            print(f"Error: user '{args.email}' not found")
            sys.exit(1)

        if user.has_permission(args.permission):
            print(f"{args.email} already has {args.permission}")
            return

        user.permissions.append(models.UserPermission(name=args.permission))
        db.commit()
        print(f"Granted {args.permission} to {args.email}")
    finally:
        db.close()


def cmd_list(args):
    """List users and their permissions."""
    from app import models

    db = get_db_session()
    try:
        users = db.query(models.User).order_by(models.User.id).all()
        print(f"\n=== Users ({len(users)}) ===\n")
        for user in users:
            permissions = ", ".join(sorted(p.name for p in user.permissions)) or "-"
            print(f"  {user.id}: {user.name} <{user.email}> [{permissions}]")
        print()
    finally:
        db.close()


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(description="News API user management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # create command
    create_parser = subparsers.add_parser("create", help="Create a user and issue an API key")
    create_parser.add_argument("--name", required=True)
    create_parser.add_argument("--email", required=True)
    create_parser.add_argument(
        "--permission",
        action="append",
        choices=ALL_PERMISSIONS,
        help="Permission to grant (repeatable; default: all)",
    )
    create_parser.set_defaults(func=cmd_create)

    # grant command
    grant_parser = subparsers.add_parser("grant", help="Grant a permission")
    grant_parser.add_argument("email")
    grant_parser.add_argument("permission", choices=ALL_PERMISSIONS)
    grant_parser.set_defaults(func=cmd_grant)

    # list command
    list_parser = subparsers.add_parser("list", help="List users")
    list_parser.set_defaults(func=cmd_list)

    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
