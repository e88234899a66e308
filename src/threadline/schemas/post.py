"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from threadline.core.enums import ContentStatus
from threadline.schemas.category import CategoryResponse
from threadline.schemas.common import Pagination
from threadline.schemas.reaction import ReactionCounts
from threadline.schemas.user import AuthorSummary


class PostCreate(BaseModel):
    """Schema for creating a new post."""

    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1, max_length=20000)
    categories: list[int] = Field(default_factory=list, description="Category ids")


class PostUpdate(BaseModel):
    """Partial update of a post; ``categories`` replaces the current set."""

    title: str | None = Field(None, min_length=1, max_length=255)
    content: str | None = Field(None, min_length=1, max_length=20000)
    status: ContentStatus | None = None
    categories: list[int] | None = None


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: int
    title: str
    content: str
    status: ContentStatus
    publish_date: datetime
    author: AuthorSummary
    categories: list[CategoryResponse] = Field(default_factory=list)
    reactions: ReactionCounts | None = None

    model_config = ConfigDict(from_attributes=True)


class PostPage(BaseModel):
    """One page of posts."""

    posts: list[PostResponse]
    pagination: Pagination
