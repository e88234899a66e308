"""Data access helpers for working with user accounts."""
from __future__ import annotations

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from threadline.models.user import User

__all__ = ["UserRepository"]


class UserRepository:
    """Thin wrapper around database access for user entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def find_by_id(self, user_id: int) -> User | None:
        """Return a user by identifier."""
        return self.session.get(User, user_id)

    def find_by_login_or_email(
        self,
        login: str | None = None,
        email: str | None = None,
    ) -> User | None:
        """Return the first user matching ``login`` or ``email``.

        Either argument may be omitted; with both omitted nothing matches.
        Emails are compared case-insensitively.
        """
        clauses = []
        if login:
            clauses.append(User.login == login)
        if email:
            clauses.append(func.lower(User.email) == email.strip().lower())
        if not clauses:
            return None
        result = self.session.execute(select(User).where(or_(*clauses)).limit(1))
        return result.scalars().first()

    def login_taken(self, login: str, *, exclude_id: int | None = None) -> bool:
        """Return True if another account already uses ``login``."""
        stmt = select(User.id).where(User.login == login)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return self.session.execute(stmt.limit(1)).first() is not None

    def email_taken(self, email: str, *, exclude_id: int | None = None) -> bool:
        """Return True if another account already uses ``email``."""
        stmt = select(User.id).where(func.lower(User.email) == email.strip().lower())
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return self.session.execute(stmt.limit(1)).first() is not None

    def list(self, skip: int = 0, limit: int = 100) -> list[User]:
        """Return users ordered by id with simple offset-based pagination."""
        result = self.session.execute(
            select(User).order_by(User.id).offset(skip).limit(limit)
        )
        return list(result.scalars())

    def add(self, user: User) -> User:
        """Stage a new user and flush to obtain its identifier."""
        self.session.add(user)
        self.session.flush()
        return user
