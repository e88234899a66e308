"""Enumerations shared by the models, the policy and the services."""

from __future__ import annotations

from enum import Enum

from threadline.core.errors import InvalidKind


class Role(str, Enum):
    """Actor roles. ADMIN manages categories and may act on any content."""

    USER = "USER"
    ADMIN = "ADMIN"


class UserStatus(str, Enum):
    """Account state; only ACTIVE accounts may log in."""

    ACTIVE = "ACTIVE"
    PENDING = "PENDING"
    BLOCKED = "BLOCKED"


class ContentStatus(str, Enum):
    """Visibility state of posts and comments."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class TargetKind(str, Enum):
    """Kinds of resources that can receive reactions."""

    POST = "POST"
    COMMENT = "COMMENT"


class ReactionKind(str, Enum):
    """The two reaction signals."""

    LIKE = "LIKE"
    DISLIKE = "DISLIKE"

    @classmethod
    def parse(cls, value: object) -> ReactionKind:
        """Return the kind named by ``value`` (case-insensitive).

        Raises:
            InvalidKind: If ``value`` is empty or not LIKE/DISLIKE
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str) or not value.strip():
            raise InvalidKind()
        try:
            return cls(value.strip().upper())
        except ValueError as err:
            raise InvalidKind() from err
