# src/threadline/models/post.py
"""SQLAlchemy models for posts and their categories."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from threadline.core.enums import ContentStatus
from threadline.db.session import Base
from threadline.db.time import utcnow

from .user import User

# Many-to-many link between posts and categories.
post_category = Table(
    "post_category",
    Base.metadata,
    Column("post_id", Integer, ForeignKey("post.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "category_id",
        Integer,
        ForeignKey("category.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Category(Base):
    """Admin-managed topic that posts can be filed under."""

    __tablename__ = "category"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    posts: Mapped[list[Post]] = relationship(
        "Post",
        secondary=post_category,
        back_populates="categories",
    )


class Post(Base):
    """Primary content entity produced by users."""

    __tablename__ = "post"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    # INACTIVE posts are visible to their author and to admins only.
    status: Mapped[ContentStatus] = mapped_column(
        Enum(ContentStatus, native_enum=False, length=16),
        nullable=False,
        default=ContentStatus.ACTIVE,
    )
    publish_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    author: Mapped[User] = relationship("User")
    categories: Mapped[list[Category]] = relationship(
        "Category",
        secondary=post_category,
        back_populates="posts",
        order_by="Category.id",
    )
