"""Command-line account management.

This module provides a small management interface for the accounts database:
creating the tables, adding accounts, and listing, unlocking or deleting them.
It goes through the same AuthService the API uses.

Usage:
    python src/main.py init-db
    python src/main.py add-user alice 2008-04-01 --access-level TEACHER
    python src/main.py list-users
    python src/main.py unlock alice
    python src/main.py delete alice
"""

import argparse
import getpass
import logging
import sys
from datetime import date
from typing import List, Optional

from core.database import SessionLocal, init_db
from core.exceptions import UserReqError
from core.logging_config import setup_logging
from schemas.user import AccessLevel
from utils.auth_service import AuthService
from utils.review_store import ReviewStore
from utils.user_store import SqlUserStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage quiz tool accounts.")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init-db", help="Create the database tables.")

    add = commands.add_parser("add-user", help="Create an account.")
    add.add_argument("username")
    add.add_argument("date_of_birth", type=date.fromisoformat, help="YYYY-MM-DD")
    add.add_argument(
        "--access-level",
        choices=[level.value for level in AccessLevel],
        default=AccessLevel.USER.value,
    )
    add.add_argument(
        "--password",
        help="Password for the account. Prompted for when omitted.",
    )

    commands.add_parser("list-users", help="List every account.")

    unlock = commands.add_parser("unlock", help="Reset an account's failed logins.")
    unlock.add_argument("username")

    delete = commands.add_parser("delete", help="Delete an account and its reviews.")
    delete.add_argument("username")
    return parser


def run(args: argparse.Namespace, service: AuthService) -> None:
    """Execute one parsed command against the service."""
    if args.command == "add-user":
        password = args.password or getpass.getpass("Password: ")
        user = service.add_user(
            username=args.username,
            password=password,
            date_of_birth=args.date_of_birth,
            access_level=AccessLevel(args.access_level),
        )
        print(f"Created {user.access_level.value} account '{user.username}'")
    elif args.command == "list-users":
        for user in service.list_users():
            state = "locked" if service.is_locked(user) else "active"
            print(
                f"{user.username:<20} {user.access_level.value:<8} "
                f"strikes={user.strikes} ({state})"
            )
    elif args.command == "unlock":
        service.unlock_user(args.username)
        print(f"Unlocked '{args.username}'")
    elif args.command == "delete":
        service.delete_user(args.username)
        print(f"Deleted '{args.username}'")


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)

    init_db()
    if args.command == "init-db":
        print("Database ready")
        return 0

    db = SessionLocal()
    try:
        service = AuthService(SqlUserStore(db), review_store=ReviewStore(db))
        run(args, service)
    except UserReqError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
