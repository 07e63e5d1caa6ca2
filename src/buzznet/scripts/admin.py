"""Operator tooling: create tables and assign roles.

Roles are fixed at registration; this is the only path that changes one.

Usage:
    python -m buzznet.scripts.admin init-db
    python -m buzznet.scripts.admin promote alice@example.com
    python -m buzznet.scripts.admin demote alice@example.com
"""
from __future__ import annotations

import argparse
import sys

from sqlalchemy import select
from sqlalchemy.orm import Session

from buzznet.db.session import SessionLocal, create_tables
from buzznet.models import User, UserRole
from buzznet.services.accounts import normalize_email


def set_role(db: Session, email: str, role: UserRole) -> User:
    """Assign ``role`` to the account registered under ``email``.

    Raises:
        LookupError: If no account uses that email.
    """
    user = db.scalars(select(User).where(User.email == normalize_email(email))).first()
    if user is None:
        raise LookupError(f"no account registered for {email!r}")
    user.role = role
    db.commit()
    return user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="BuzzNet operator commands")
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("init-db", help="Create all tables in the configured database")
    for name in ("promote", "demote"):
        sub = commands.add_parser(name, help=f"{name.capitalize()} an account (by email)")
        sub.add_argument("email")
    args = parser.parse_args(argv)

    if args.command == "init-db":
        create_tables()
        print("[admin] tables created")
        return 0

    role = UserRole.ADMIN if args.command == "promote" else UserRole.USER
    with SessionLocal() as db:
        try:
            user = set_role(db, args.email, role)
        except LookupError as exc:
            print(f"[admin] ERROR: {exc}", file=sys.stderr)
            return 1
        print(f"[admin] {user.email} is now {role.value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
