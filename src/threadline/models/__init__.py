# src/threadline/models/__init__.py
"""SQLAlchemy models for the Threadline application."""

from .comment import Comment
from .post import Category, Post, post_category
from .reaction import Reaction
from .user import PasswordReset, User

__all__ = [
    "Category", "post_category",
    "Comment",
    "PasswordReset",
    "Post",
    "Reaction",
    "User",
]
