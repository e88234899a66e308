"""Account helpers: registration, login, password reset and administration."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from threadline.core import security
from threadline.core.claims import Actor, ClaimVerifier
from threadline.core.enums import Role, UserStatus
from threadline.core.errors import Forbidden, InvalidInput, NotFound, Unauthenticated
from threadline.core.policy import RoleRequirement, require
from threadline.core.settings import settings
from threadline.models import PasswordReset, Post, User
from threadline.repositories.users import UserRepository
from threadline.services.mailer import Mailer
from threadline.services.posts import purge_post
from threadline.services.reactions import ReactionToggleEngine
from threadline.services.threads import ThreadGraph

__all__ = [
    "LoginResult",
    "register",
    "authenticate",
    "get_user",
    "list_users",
    "create_user",
    "update_profile",
    "change_role",
    "delete_user",
    "request_password_reset",
    "confirm_password_reset",
]

logger = logging.getLogger(__name__)

ADMIN_ONLY = RoleRequirement.of(Role.ADMIN)


@dataclass(frozen=True)
class LoginResult:
    """Token issued after a successful login."""

    token: str
    user: User


def _ensure_available(
    repo: UserRepository,
    *,
    login: str | None = None,
    email: str | None = None,
    exclude_id: int | None = None,
) -> None:
    if login is not None and repo.login_taken(login, exclude_id=exclude_id):
        raise InvalidInput("User already exists")
    if email is not None and repo.email_taken(email, exclude_id=exclude_id):
        raise InvalidInput("Email already in use")


def _new_user(
    db: Session,
    *,
    login: str,
    email: str,
    full_name: str,
    password: str,
    role: Role,
) -> User:
    repo = UserRepository(db)
    _ensure_available(repo, login=login, email=email)
    user = User(
        login=login,
        email=email,
        full_name=full_name,
        password_hash=security.hash_password(password),
        role=role,
        status=UserStatus.ACTIVE,
    )
    repo.add(user)
    db.commit()
    db.refresh(user)
    return user


def register(db: Session, *, login: str, email: str, full_name: str, password: str) -> User:
    """Create a self-registered account; the role is always USER.

    Raises:
        InvalidInput: If the login or email is already used
    """
    user = _new_user(
        db,
        login=login,
        email=email,
        full_name=full_name,
        password=password,
        role=Role.USER,
    )
    logger.info("Registered user id=%s login=%s", user.id, user.login)
    return user


def authenticate(
    db: Session,
    identifier: str,
    password: str,
    *,
    verifier: ClaimVerifier | None = None,
) -> LoginResult:
    """Check credentials and issue an access token.

    ``identifier`` may be either the login or the email address.

    Raises:
        Unauthenticated: If the account does not exist or the password is wrong
        Forbidden: If the account is not ACTIVE
    """
    user = UserRepository(db).find_by_login_or_email(login=identifier, email=identifier)
    if user is None or not security.verify_password(password, user.password_hash):
        raise Unauthenticated("Invalid credentials")
    if user.status != UserStatus.ACTIVE:
        raise Forbidden("inactive-account", "Account is not active")

    if security.needs_rehash(user.password_hash):
        user.password_hash = security.hash_password(password)
        db.commit()

    verifier = verifier or ClaimVerifier.from_settings()
    token = verifier.issue(user.id, user.role)
    logger.info("User id=%s logged in", user.id)
    return LoginResult(token=token, user=user)


def get_user(db: Session, user_id: int) -> User:
    """Return a user by primary key.

    Raises:
        NotFound: If no such user exists
    """
    user = UserRepository(db).find_by_id(user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def list_users(db: Session, skip: int = 0, limit: int = 100) -> list[User]:
    """Return users with simple offset-based pagination."""
    return UserRepository(db).list(skip=skip, limit=limit)


def create_user(
    db: Session,
    actor: Actor,
    *,
    login: str,
    email: str,
    full_name: str,
    password: str,
    role: Role = Role.USER,
) -> User:
    """Create an account of any role on behalf of an ADMIN."""
    require(actor, ADMIN_ONLY, action="create user")
    user = _new_user(
        db,
        login=login,
        email=email,
        full_name=full_name,
        password=password,
        role=role,
    )
    logger.info("Admin %s created user id=%s role=%s", actor.id, user.id, user.role.value)
    return user


def update_profile(
    db: Session,
    actor: Actor,
    *,
    login: str | None = None,
    email: str | None = None,
    full_name: str | None = None,
    profile_picture: str | None = None,
) -> User:
    """Apply partial updates to the actor's own account."""
    if login is None and email is None and full_name is None and profile_picture is None:
        raise InvalidInput("Nothing to update")
    user = get_user(db, actor.id)
    _ensure_available(UserRepository(db), login=login, email=email, exclude_id=user.id)

    if login is not None:
        user.login = login
    if email is not None:
        user.email = email
    if full_name is not None:
        user.full_name = full_name
    if profile_picture is not None:
        user.profile_picture = profile_picture
    db.commit()
    db.refresh(user)
    return user


def change_role(db: Session, actor: Actor, user_id: int, role: Role) -> User:
    """Set another account's role (ADMIN only)."""
    user = get_user(db, user_id)
    require(actor, ADMIN_ONLY, action="change role")
    user.role = role
    db.commit()
    db.refresh(user)
    logger.info("Admin %s set role of user id=%s to %s", actor.id, user.id, role.value)
    return user


def delete_user(db: Session, actor: Actor, user_id: int) -> None:
    """Remove an account and everything it authored (ADMIN only).

    Posts go with their whole thread, the user's comments elsewhere are
    detached with their replies re-rooted, and every reaction the user left
    is dropped.
    """
    user = get_user(db, user_id)
    require(actor, ADMIN_ONLY, action="delete user")

    threads = ThreadGraph()
    posts = list(db.execute(select(Post).where(Post.author_id == user.id)).scalars())
    for post in posts:
        purge_post(db, post, threads=threads)
    comments = threads.purge_author(db, user.id)
    reactions = ReactionToggleEngine.purge_by_author(db, user.id)
    db.execute(delete(PasswordReset).where(PasswordReset.user_id == user.id))
    db.delete(user)
    db.commit()
    logger.info(
        "Admin %s deleted user id=%s (%s posts, %s comments, %s reactions)",
        actor.id,
        user_id,
        len(posts),
        comments,
        reactions,
    )


def _reset_link(token: str) -> str:
    return f"{settings.password_reset_url.rstrip('/')}/{token}"


def request_password_reset(db: Session, mailer: Mailer, email: str) -> bool:
    """Store a reset token for ``email`` and mail the link.

    Returns:
        False if the mail could not be delivered; the token is discarded then

    Raises:
        NotFound: If no account uses ``email``
    """
    user = UserRepository(db).find_by_login_or_email(email=email)
    if user is None:
        raise NotFound("User not found")

    token = security.generate_reset_token()
    expires_at = datetime.now(UTC) + timedelta(minutes=settings.password_reset_ttl_minutes)
    db.add(PasswordReset(user_id=user.id, token=token, expires_at=expires_at))
    db.flush()

    body = (
        f"Hello {user.full_name},\n\n"
        f"Follow this link to choose a new password:\n{_reset_link(token)}\n\n"
        f"The link expires in {settings.password_reset_ttl_minutes} minutes."
    )
    if not mailer.send(user.email, "Password reset", body):
        db.rollback()
        return False
    db.commit()
    return True


def confirm_password_reset(db: Session, token: str, new_password: str) -> User:
    """Consume a reset token and set the new password.

    Raises:
        InvalidInput: If the token is unknown or expired
    """
    reset = db.execute(
        select(PasswordReset).where(PasswordReset.token == token)
    ).scalars().first()
    if reset is None:
        raise InvalidInput("Invalid or expired token")

    expires_at = reset.expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=UTC)
    if expires_at < datetime.now(UTC):
        db.delete(reset)
        db.commit()
        raise InvalidInput("Invalid or expired token")

    user = get_user(db, reset.user_id)
    user.password_hash = security.hash_password(new_password)
    db.execute(delete(PasswordReset).where(PasswordReset.user_id == user.id))
    db.commit()
    db.refresh(user)
    logger.info("Password reset completed for user id=%s", user.id)
    return user
