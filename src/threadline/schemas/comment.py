"""Comment-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from threadline.core.enums import ContentStatus
from threadline.schemas.common import Pagination
from threadline.schemas.reaction import ReactionCounts
from threadline.schemas.user import AuthorSummary


class CommentCreate(BaseModel):
    """Schema for a new comment or reply."""

    content: str = Field(..., min_length=1, max_length=5000)


class CommentUpdate(BaseModel):
    """Partial update of a comment."""

    content: str | None = Field(None, min_length=1, max_length=5000)
    status: ContentStatus | None = None


class CommentResponse(BaseModel):
    """Comment returned by the API."""

    id: int
    post_id: int
    parent_comment_id: int | None = None
    content: str
    status: ContentStatus
    publish_date: datetime
    author: AuthorSummary
    reactions: ReactionCounts | None = None

    model_config = ConfigDict(from_attributes=True)


class CommentPage(BaseModel):
    """One page of comments."""

    comments: list[CommentResponse]
    pagination: Pagination


class CommentTreeNode(CommentResponse):
    """A comment with its nested replies."""

    replies: list[CommentTreeNode] = Field(default_factory=list)


CommentTreeNode.model_rebuild()
