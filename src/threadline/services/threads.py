"""Thread graph: comments and replies rooted at posts.

Comments form a forest hanging from posts. A reply always copies ``post_id``
from the post it was submitted against, never from its parent, so however
deep a thread grows every node stays anchored to the original post. Parents
must exist when a reply is created, which keeps the forest append-only and
free of cycles.

Deleting a comment re-roots its direct replies onto the deleted comment's own
parent (or makes them top-level), so every remaining node keeps a valid parent
chain. Reactions on the deleted comment are removed with it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from threadline.core.claims import Actor
from threadline.core.enums import ContentStatus, TargetKind
from threadline.core.errors import InvalidInput, NotFound, ParentNotFound, TargetUnavailable
from threadline.core.policy import OwnershipRequirement, can_read, require
from threadline.models import Comment, Post
from threadline.services.reactions import ReactionToggleEngine

logger = logging.getLogger(__name__)


@dataclass
class ThreadNode:
    """A comment together with the replies visible to the reader."""

    comment: Comment
    replies: list[ThreadNode] = field(default_factory=list)


def clean_content(content: str | None) -> str:
    """Return ``content`` stripped of surrounding whitespace.

    Raises:
        InvalidInput: If nothing remains
    """
    text = (content or "").strip()
    if not text:
        raise InvalidInput("Content is required")
    return text


class ThreadGraph:
    """Create, edit, delete and read comment threads."""

    def __init__(self, reactions: ReactionToggleEngine | None = None) -> None:
        self.reactions = reactions or ReactionToggleEngine()

    # --- resolution ---------------------------------------------------------------
    @staticmethod
    def _interactive_post(session: Session, post_id: int) -> Post:
        post = session.get(Post, post_id)
        if post is None:
            raise TargetUnavailable(TargetUnavailable.MISSING, "Post not found or inactive")
        if post.status != ContentStatus.ACTIVE:
            raise TargetUnavailable(TargetUnavailable.INACTIVE, "Post not found or inactive")
        return post

    @staticmethod
    def _readable_post(session: Session, actor: Actor, post_id: int) -> Post:
        post = session.get(Post, post_id)
        if post is None or not can_read(actor, post.author_id, post.status):
            raise NotFound("Post not found")
        return post

    # --- writes -------------------------------------------------------------------
    def create_comment(
        self,
        session: Session,
        actor: Actor,
        post_id: int,
        content: str | None,
    ) -> Comment:
        """Create a top-level comment on an ACTIVE post.

        Raises:
            InvalidInput: If the content is empty
            TargetUnavailable: If the post is missing or inactive
        """
        text = clean_content(content)
        post = self._interactive_post(session, post_id)
        comment = Comment(post_id=post.id, author_id=actor.id, content=text)
        session.add(comment)
        session.commit()
        session.refresh(comment)
        return comment

    def attach_reply(
        self,
        session: Session,
        actor: Actor,
        post_id: int,
        parent_comment_id: int,
        content: str | None,
    ) -> Comment:
        """Create a reply to ``parent_comment_id`` inside the thread of ``post_id``.

        Args:
            session: Database session
            actor: Author of the reply
            post_id: Post the thread belongs to
            parent_comment_id: Comment being answered, at any depth
            content: Reply body

        Returns:
            The persisted reply, anchored to ``post_id``

        Raises:
            InvalidInput: If the content is empty
            TargetUnavailable: If the post is missing or inactive
            ParentNotFound: If the parent does not exist on that post
        """
        text = clean_content(content)
        post = self._interactive_post(session, post_id)

        parent = session.get(Comment, parent_comment_id)
        if (
            parent is None
            or parent.post_id != post.id
            or not can_read(actor, parent.author_id, parent.status)
        ):
            raise ParentNotFound()

        reply = Comment(
            post_id=post.id,
            parent_comment_id=parent.id,
            author_id=actor.id,
            content=text,
        )
        session.add(reply)
        session.commit()
        session.refresh(reply)
        return reply

    def update_comment(
        self,
        session: Session,
        actor: Actor,
        comment_id: int,
        *,
        content: str | None = None,
        status: ContentStatus | None = None,
    ) -> Comment:
        """Edit a comment's content and/or status as its author or an ADMIN.

        Raises:
            InvalidInput: If neither field is supplied or the content is blank
            NotFound: If the comment does not exist or is hidden from the actor
            Forbidden: If the actor is neither the author nor an ADMIN
        """
        if content is None and status is None:
            raise InvalidInput("Content is required to update the comment")
        text = clean_content(content) if content is not None else None

        comment = self.get_comment(session, actor, comment_id)
        require(actor, OwnershipRequirement.of(comment.author_id), action="update comment")

        if text is not None:
            comment.content = text
        if status is not None:
            comment.status = status
        session.commit()
        session.refresh(comment)
        return comment

    def delete_comment(self, session: Session, actor: Actor, comment_id: int) -> None:
        """Delete a comment as its author or an ADMIN, re-rooting its replies.

        Raises:
            NotFound: If the comment does not exist or is hidden from the actor
            Forbidden: If the actor is neither the author nor an ADMIN
        """
        comment = self.get_comment(session, actor, comment_id)
        require(actor, OwnershipRequirement.of(comment.author_id), action="delete comment")

        rerooted = self._detach(session, comment)
        session.commit()
        logger.info(
            "Comment %s deleted by actor=%s; %s replies re-rooted",
            comment_id,
            actor.id,
            rerooted,
        )

    def _detach(self, session: Session, comment: Comment) -> int:
        """Remove ``comment`` and its reactions, re-rooting replies; no commit."""
        result = session.execute(
            update(Comment)
            .where(Comment.parent_comment_id == comment.id)
            .values(parent_comment_id=comment.parent_comment_id)
            .execution_options(synchronize_session="fetch")
        )
        self.reactions.purge_targets(session, TargetKind.COMMENT, [comment.id])
        session.delete(comment)
        session.flush()
        return result.rowcount or 0

    def purge_post(self, session: Session, post_id: int) -> int:
        """Delete every comment of ``post_id`` and their reactions; no commit.

        Returns:
            Number of comments removed
        """
        comment_ids = list(
            session.execute(select(Comment.id).where(Comment.post_id == post_id)).scalars()
        )
        if not comment_ids:
            return 0
        self.reactions.purge_targets(session, TargetKind.COMMENT, comment_ids)
        # Break parent links first so rows can be removed in any order.
        session.execute(
            update(Comment)
            .where(Comment.post_id == post_id)
            .values(parent_comment_id=None)
            .execution_options(synchronize_session="fetch")
        )
        session.execute(
            delete(Comment)
            .where(Comment.post_id == post_id)
            .execution_options(synchronize_session="fetch")
        )
        return len(comment_ids)

    def purge_author(self, session: Session, author_id: int) -> int:
        """Delete every comment written by ``author_id``; no commit.

        Replies written by other users are re-rooted like in
        :meth:`delete_comment`.
        """
        comments = list(
            session.execute(
                select(Comment).where(Comment.author_id == author_id).order_by(Comment.id.desc())
            ).scalars()
        )
        for comment in comments:
            # Parent pointers may have moved while earlier siblings were detached.
            session.refresh(comment)
            self._detach(session, comment)
        return len(comments)

    # --- reads --------------------------------------------------------------------
    def get_comment(self, session: Session, actor: Actor, comment_id: int) -> Comment:
        """Return a comment the actor may read.

        Raises:
            NotFound: If the comment does not exist or is hidden from the actor
        """
        comment = session.get(Comment, comment_id)
        if comment is None or not can_read(actor, comment.author_id, comment.status):
            raise NotFound("Comment not found")
        return comment

    @staticmethod
    def _visible(actor: Actor):
        if actor.is_admin:
            return None
        return (Comment.status == ContentStatus.ACTIVE) | (Comment.author_id == actor.id)

    def list_comments(
        self,
        session: Session,
        actor: Actor,
        post_id: int,
        *,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[list[Comment], int]:
        """Return one page of a post's comments (all depths, newest first) and the total.

        Raises:
            NotFound: If the post does not exist or is hidden from the actor
        """
        self._readable_post(session, actor, post_id)
        conditions = [Comment.post_id == post_id]
        visible = self._visible(actor)
        if visible is not None:
            conditions.append(visible)

        total = session.execute(
            select(func.count()).select_from(Comment).where(*conditions)
        ).scalar_one()
        rows = session.execute(
            select(Comment)
            .where(*conditions)
            .order_by(Comment.publish_date.desc(), Comment.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(rows.scalars()), int(total)

    def list_replies(self, session: Session, actor: Actor, comment_id: int) -> list[Comment]:
        """Return the direct replies to a comment, oldest first.

        Raises:
            NotFound: If the comment does not exist or is hidden from the actor
        """
        parent = self.get_comment(session, actor, comment_id)
        conditions = [Comment.parent_comment_id == parent.id]
        visible = self._visible(actor)
        if visible is not None:
            conditions.append(visible)
        rows = session.execute(select(Comment).where(*conditions).order_by(Comment.id))
        return list(rows.scalars())

    def build_tree(self, session: Session, actor: Actor, post_id: int) -> list[ThreadNode]:
        """Return the post's thread as nested nodes, oldest first at every level.

        Replies whose parent is hidden from the actor are shown at the top level.

        Raises:
            NotFound: If the post does not exist or is hidden from the actor
        """
        self._readable_post(session, actor, post_id)
        conditions = [Comment.post_id == post_id]
        visible = self._visible(actor)
        if visible is not None:
            conditions.append(visible)
        comments = session.execute(
            select(Comment).where(*conditions).order_by(Comment.id)
        ).scalars()

        nodes: dict[int, ThreadNode] = {}
        roots: list[ThreadNode] = []
        for comment in comments:
            nodes[comment.id] = ThreadNode(comment)
        for node in nodes.values():
            parent = nodes.get(node.comment.parent_comment_id or -1)
            if parent is None:
                roots.append(node)
            else:
                parent.replies.append(node)
        return roots


def get_thread_graph() -> ThreadGraph:
    """Return a thread graph service."""
    return ThreadGraph()
