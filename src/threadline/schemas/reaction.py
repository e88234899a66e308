"""Reaction-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from threadline.core.enums import ReactionKind, TargetKind
from threadline.schemas.common import Pagination
from threadline.schemas.user import AuthorSummary


class ReactionRequest(BaseModel):
    """Toggle or withdraw a reaction; ``type`` is LIKE or DISLIKE in any case."""

    type: str = Field(..., description="LIKE or DISLIKE")


class ReactionResponse(BaseModel):
    """A stored reaction."""

    id: int
    target_kind: TargetKind
    target_id: int
    kind: ReactionKind
    publish_date: datetime
    author: AuthorSummary

    model_config = ConfigDict(from_attributes=True)


class ReactionCounts(BaseModel):
    """LIKE and DISLIKE counts for one target."""

    likes: int = 0
    dislikes: int = 0
    total: int = 0


class ToggleResponse(BaseModel):
    """Result of a toggle."""

    action: str = Field(..., description="created, updated or removed")
    kind: ReactionKind
    previous_kind: ReactionKind | None = None
    reaction: ReactionResponse | None = None
    counts: ReactionCounts


class ReactionPage(BaseModel):
    """One page of reactions on a target."""

    reactions: list[ReactionResponse]
    pagination: Pagination
