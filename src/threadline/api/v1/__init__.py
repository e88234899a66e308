# src/threadline/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    auth_router,
    categories_router,
    comments_router,
    posts_router,
    reactions_router,
    system_router,
    users_router,
)
from .router import api_v1

__all__ = [
    "api_v1",
    "auth_router",
    "categories_router",
    "comments_router",
    "posts_router",
    "reactions_router",
    "system_router",
    "users_router",
]
