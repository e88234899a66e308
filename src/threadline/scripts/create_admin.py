# src/threadline/scripts/create_admin.py
"""Create (or promote) an ADMIN account from the command line.

Self-registration always yields USER accounts, so the first administrator is
bootstrapped with this script.
"""
from __future__ import annotations

import argparse
import getpass
import logging
import sys

from sqlalchemy.orm import Session

from threadline.core import security
from threadline.core.enums import Role, UserStatus
from threadline.core.settings import settings
from threadline.db.session import session_scope
from threadline.models import User
from threadline.repositories.users import UserRepository

logger = logging.getLogger(__name__)


def ensure_admin(db: Session, *, login: str, email: str, full_name: str, password: str) -> User:
    """Return an ADMIN account for ``login``, creating or promoting it as needed."""
    repo = UserRepository(db)
    user = repo.find_by_login_or_email(login=login)
    if user is None:
        if repo.email_taken(email):
            raise ValueError(f"Email {email} is already used by another account")
        user = repo.add(
            User(
                login=login,
                email=email,
                full_name=full_name,
                password_hash=security.hash_password(password),
                role=Role.ADMIN,
                status=UserStatus.ACTIVE,
            )
        )
        logger.info("Created admin account %s", login)
    else:
        user.role = Role.ADMIN
        logger.info("Promoted %s to ADMIN", login)
    db.commit()
    db.refresh(user)
    return user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("login")
    parser.add_argument("email")
    parser.add_argument("--full-name", default="Administrator")
    args = parser.parse_args(argv)

    password = getpass.getpass("Password: ")
    if len(password) < 8:
        print("Password must be at least 8 characters", file=sys.stderr)
        return 1

    try:
        with session_scope() as db:
            ensure_admin(
                db,
                login=args.login,
                email=args.email,
                full_name=args.full_name,
                password=password,
            )
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level.upper())
    sys.exit(main())
