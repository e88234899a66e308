# src/threadline/api/v1/endpoints/reactions.py
"""Reaction endpoints for posts and comments."""

import logging

from fastapi import APIRouter, Query, Response, status
from sqlalchemy.orm import Session

from threadline.api.v1.dependencies import (
    CurrentActorDep,
    PageDep,
    PageParams,
    ReactionEngineDep,
    SessionDep,
)
from threadline.core.claims import Actor
from threadline.core.errors import Conflict
from threadline.schemas.common import Pagination
from threadline.schemas.reaction import (
    ReactionCounts,
    ReactionPage,
    ReactionRequest,
    ReactionResponse,
    ToggleResponse,
)
from threadline.services.posts import get_post
from threadline.services.reactions import ReactionTarget, ReactionToggleEngine
from threadline.services.threads import ThreadGraph

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reactions"])


def toggle_with_retry(
    engine: ReactionToggleEngine,
    db: Session,
    actor: Actor,
    target: ReactionTarget,
    kind: str,
) -> ToggleResponse:
    """Run a toggle, retrying once if a concurrent writer won the first attempt."""
    try:
        outcome = engine.toggle(db, actor, target, kind)
    except Conflict:
        logger.info("Retrying reaction toggle for actor=%s on %s=%s", actor.id, target.label, target.id)
        outcome = engine.toggle(db, actor, target, kind)

    summary = engine.summarize(db, target)
    return ToggleResponse(
        action=outcome.action.value,
        kind=outcome.kind,
        previous_kind=outcome.previous_kind,
        reaction=ReactionResponse.model_validate(outcome.reaction) if outcome.reaction else None,
        counts=ReactionCounts(likes=summary.likes, dislikes=summary.dislikes, total=summary.total),
    )


def _page(
    engine: ReactionToggleEngine,
    db: Session,
    target: ReactionTarget,
    page: PageParams,
) -> ReactionPage:
    rows, total = engine.list_reactions(db, target, skip=page.skip, limit=page.limit)
    return ReactionPage(
        reactions=[ReactionResponse.model_validate(row) for row in rows],
        pagination=Pagination.build(total, page.page, page.limit),
    )


# --- posts ----------------------------------------------------------------------------


@router.post("/posts/{post_id}/reactions", response_model=ToggleResponse)
async def toggle_post_reaction(
    post_id: int,
    payload: ReactionRequest,
    actor: CurrentActorDep,
    db: SessionDep,
    engine: ReactionEngineDep,
) -> ToggleResponse:
    """Like or dislike a post; sending the same kind again removes it."""
    return toggle_with_retry(engine, db, actor, ReactionTarget.post(post_id), payload.type)


@router.get("/posts/{post_id}/reactions", response_model=ReactionPage)
async def list_post_reactions(
    post_id: int,
    actor: CurrentActorDep,
    db: SessionDep,
    engine: ReactionEngineDep,
    page: PageDep,
) -> ReactionPage:
    """Return one page of reactions on a post."""
    get_post(db, actor, post_id)
    return _page(engine, db, ReactionTarget.post(post_id), page)


@router.delete("/posts/{post_id}/reactions", status_code=status.HTTP_204_NO_CONTENT)
async def withdraw_post_reaction(
    post_id: int,
    actor: CurrentActorDep,
    db: SessionDep,
    engine: ReactionEngineDep,
    kind: str = Query(..., alias="type", description="LIKE or DISLIKE"),
) -> Response:
    """Remove the caller's reaction of ``type`` from a post."""
    engine.withdraw(db, actor, ReactionTarget.post(post_id), kind)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- comments -------------------------------------------------------------------------


@router.post("/comments/{comment_id}/reactions", response_model=ToggleResponse)
async def toggle_comment_reaction(
    comment_id: int,
    payload: ReactionRequest,
    actor: CurrentActorDep,
    db: SessionDep,
    engine: ReactionEngineDep,
) -> ToggleResponse:
    """Like or dislike a comment; sending the same kind again removes it."""
    return toggle_with_retry(engine, db, actor, ReactionTarget.comment(comment_id), payload.type)


@router.get("/comments/{comment_id}/reactions", response_model=ReactionPage)
async def list_comment_reactions(
    comment_id: int,
    actor: CurrentActorDep,
    db: SessionDep,
    engine: ReactionEngineDep,
    page: PageDep,
) -> ReactionPage:
    """Return one page of reactions on a comment."""
    ThreadGraph(engine).get_comment(db, actor, comment_id)
    return _page(engine, db, ReactionTarget.comment(comment_id), page)


@router.delete("/comments/{comment_id}/reactions", status_code=status.HTTP_204_NO_CONTENT)
async def withdraw_comment_reaction(
    comment_id: int,
    actor: CurrentActorDep,
    db: SessionDep,
    engine: ReactionEngineDep,
    kind: str = Query(..., alias="type", description="LIKE or DISLIKE"),
) -> Response:
    """Remove the caller's reaction of ``type`` from a comment."""
    engine.withdraw(db, actor, ReactionTarget.comment(comment_id), kind)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
