"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .category import CategoryCreate, CategoryResponse, CategoryUpdate
from .comment import CommentCreate, CommentPage, CommentResponse, CommentTreeNode, CommentUpdate
from .common import Message, Pagination
from .post import PostCreate, PostPage, PostResponse, PostUpdate
from .reaction import ReactionCounts, ReactionPage, ReactionRequest, ReactionResponse, ToggleResponse
from .user import (
    AdminUserCreate,
    LoginRequest,
    LoginResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    RoleUpdateRequest,
    UserResponse,
)

__all__ = [
    "CategoryCreate", "CategoryResponse", "CategoryUpdate",
    "CommentCreate", "CommentPage", "CommentResponse", "CommentTreeNode", "CommentUpdate",
    "Message", "Pagination",
    "PostCreate", "PostPage", "PostResponse", "PostUpdate",
    "ReactionCounts", "ReactionPage", "ReactionRequest", "ReactionResponse", "ToggleResponse",
    "AdminUserCreate", "LoginRequest", "LoginResponse", "PasswordResetConfirm",
    "PasswordResetRequest", "ProfileUpdateRequest", "RegisterRequest", "RoleUpdateRequest",
    "UserResponse",
]
