# src/threadline/models/reaction.py
"""Model capturing LIKE/DISLIKE reactions on posts and comments."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from threadline.core.enums import ReactionKind, TargetKind
from threadline.db.session import Base
from threadline.db.time import utcnow

from .user import User


class Reaction(Base):
    """Per-user reaction on a post or a comment.

    Rows are created, flipped and removed by the reaction toggle engine only.
    """

    __tablename__ = "reaction"
    __table_args__ = (
        # At most one reaction per (author, target); the toggle engine relies on it.
        UniqueConstraint(
            "author_id",
            "target_kind",
            "target_id",
            name="uq_reaction_author_target",
        ),
        Index("ix_reaction_target", "target_kind", "target_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        nullable=False,
    )
    target_kind: Mapped[TargetKind] = mapped_column(
        Enum(TargetKind, native_enum=False, length=16),
        nullable=False,
    )
    # Post or comment id depending on target_kind; polymorphic, so no foreign key.
    target_id: Mapped[int] = mapped_column(Integer, nullable=False)
    kind: Mapped[ReactionKind] = mapped_column(
        Enum(ReactionKind, native_enum=False, length=16),
        nullable=False,
    )
    publish_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    author: Mapped[User] = relationship("User")
