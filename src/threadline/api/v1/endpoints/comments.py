# src/threadline/api/v1/endpoints/comments.py
"""Comment and reply endpoints for the Threadline API."""

from fastapi import APIRouter, Response, status
from sqlalchemy.orm import Session

from threadline.api.v1.dependencies import CurrentActorDep, PageDep, SessionDep, ThreadGraphDep
from threadline.models import Comment
from threadline.schemas.comment import (
    CommentCreate,
    CommentPage,
    CommentResponse,
    CommentTreeNode,
    CommentUpdate,
)
from threadline.schemas.common import Pagination
from threadline.schemas.reaction import ReactionCounts
from threadline.services.reactions import ReactionTarget, ReactionToggleEngine
from threadline.services.threads import ThreadNode

router = APIRouter(tags=["comments"])


def _counts(db: Session, comment: Comment) -> ReactionCounts:
    summary = ReactionToggleEngine.summarize(db, ReactionTarget.comment(comment.id))
    return ReactionCounts(likes=summary.likes, dislikes=summary.dislikes, total=summary.total)


def comment_out(db: Session, comment: Comment) -> CommentResponse:
    """Serialize a comment together with its reaction counts."""
    response = CommentResponse.model_validate(comment)
    response.reactions = _counts(db, comment)
    return response


def _tree_out(db: Session, node: ThreadNode) -> CommentTreeNode:
    data = CommentResponse.model_validate(node.comment).model_dump()
    data["reactions"] = _counts(db, node.comment)
    return CommentTreeNode(**data, replies=[_tree_out(db, child) for child in node.replies])


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    post_id: int,
    payload: CommentCreate,
    actor: CurrentActorDep,
    db: SessionDep,
    threads: ThreadGraphDep,
) -> CommentResponse:
    """Add a top-level comment to an active post."""
    comment = threads.create_comment(db, actor, post_id, payload.content)
    return comment_out(db, comment)


@router.get("/posts/{post_id}/comments", response_model=CommentPage)
async def list_comments(
    post_id: int,
    actor: CurrentActorDep,
    db: SessionDep,
    threads: ThreadGraphDep,
    page: PageDep,
) -> CommentPage:
    """Return one page of a post's comments at every depth, newest first."""
    comments, total = threads.list_comments(db, actor, post_id, skip=page.skip, limit=page.limit)
    return CommentPage(
        comments=[comment_out(db, comment) for comment in comments],
        pagination=Pagination.build(total, page.page, page.limit),
    )


@router.get("/posts/{post_id}/comments/tree", response_model=list[CommentTreeNode])
async def get_comment_tree(
    post_id: int,
    actor: CurrentActorDep,
    db: SessionDep,
    threads: ThreadGraphDep,
) -> list[CommentTreeNode]:
    """Return a post's whole thread as nested replies."""
    return [_tree_out(db, node) for node in threads.build_tree(db, actor, post_id)]


@router.post(
    "/posts/{post_id}/comments/{comment_id}/replies",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def reply_to_comment(
    post_id: int,
    comment_id: int,
    payload: CommentCreate,
    actor: CurrentActorDep,
    db: SessionDep,
    threads: ThreadGraphDep,
) -> CommentResponse:
    """Reply to a comment of the post at any depth."""
    reply = threads.attach_reply(db, actor, post_id, comment_id, payload.content)
    return comment_out(db, reply)


@router.get("/comments/{comment_id}", response_model=CommentResponse)
async def get_comment(
    comment_id: int,
    actor: CurrentActorDep,
    db: SessionDep,
    threads: ThreadGraphDep,
) -> CommentResponse:
    """Return a single comment."""
    return comment_out(db, threads.get_comment(db, actor, comment_id))


@router.get("/comments/{comment_id}/replies", response_model=list[CommentResponse])
async def list_replies(
    comment_id: int,
    actor: CurrentActorDep,
    db: SessionDep,
    threads: ThreadGraphDep,
) -> list[CommentResponse]:
    """Return the direct replies to a comment."""
    return [comment_out(db, reply) for reply in threads.list_replies(db, actor, comment_id)]


@router.patch("/comments/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: int,
    payload: CommentUpdate,
    actor: CurrentActorDep,
    db: SessionDep,
    threads: ThreadGraphDep,
) -> CommentResponse:
    """Edit a comment (author or ADMIN)."""
    comment = threads.update_comment(
        db,
        actor,
        comment_id,
        content=payload.content,
        status=payload.status,
    )
    return comment_out(db, comment)


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    comment_id: int,
    actor: CurrentActorDep,
    db: SessionDep,
    threads: ThreadGraphDep,
) -> Response:
    """Delete a comment (author or ADMIN); its replies move up one level."""
    threads.delete_comment(db, actor, comment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
