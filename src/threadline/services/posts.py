"""Service-level helpers for posts and categories.

Every operation resolves the resource first (``NotFound``), then applies the
authorization policy, then mutates. Posts hidden from the actor are reported
as missing.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from threadline.core.claims import Actor
from threadline.core.enums import ContentStatus, Role, TargetKind
from threadline.core.errors import InvalidInput, NotFound
from threadline.core.policy import OwnershipRequirement, RoleRequirement, can_read, require
from threadline.models import Category, Post, post_category
from threadline.services.reactions import ReactionToggleEngine
from threadline.services.threads import ThreadGraph

logger = logging.getLogger(__name__)

ADMIN_ONLY = RoleRequirement.of(Role.ADMIN)


def _visible_to(actor: Actor):
    """Return a filter limiting posts to those ``actor`` may read, or None for admins."""
    if actor.is_admin:
        return None
    return or_(Post.status == ContentStatus.ACTIVE, Post.author_id == actor.id)


def _page(db: Session, stmt, count_stmt, skip: int, limit: int) -> tuple[list[Post], int]:
    total = db.execute(count_stmt).scalar_one()
    rows = db.execute(
        stmt.order_by(Post.publish_date.desc(), Post.id.desc()).offset(skip).limit(limit)
    )
    return list(rows.scalars().unique()), int(total)


def _clean_title(title: str | None) -> str:
    text = (title or "").strip()
    if not text:
        raise InvalidInput("Title is required")
    return text


def _resolve_categories(db: Session, category_ids: Iterable[int]) -> list[Category]:
    ids = sorted(set(category_ids))
    if not ids:
        return []
    categories = list(
        db.execute(select(Category).where(Category.id.in_(ids)).order_by(Category.id)).scalars()
    )
    missing = set(ids) - {category.id for category in categories}
    if missing:
        raise NotFound(f"Category not found: {', '.join(str(i) for i in sorted(missing))}")
    return categories


# --- posts ----------------------------------------------------------------------------


def create_post(
    db: Session,
    actor: Actor,
    *,
    title: str,
    content: str,
    category_ids: Iterable[int] = (),
) -> Post:
    """Create an ACTIVE post authored by ``actor``.

    Raises:
        InvalidInput: If title or content is blank
        NotFound: If one of the categories does not exist
    """
    body = (content or "").strip()
    if not body:
        raise InvalidInput("Content is required")
    post = Post(
        author_id=actor.id,
        title=_clean_title(title),
        content=body,
        status=ContentStatus.ACTIVE,
    )
    post.categories = _resolve_categories(db, category_ids)
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


def get_post(db: Session, actor: Actor, post_id: int) -> Post:
    """Return a post the actor may read.

    Raises:
        NotFound: If the post does not exist or is hidden from the actor
    """
    post = db.get(Post, post_id)
    if post is None or not can_read(actor, post.author_id, post.status):
        raise NotFound("Post not found")
    return post


def list_posts(db: Session, actor: Actor, *, skip: int = 0, limit: int = 10) -> tuple[list[Post], int]:
    """Return one page of posts visible to ``actor`` (newest first) and the total."""
    visible = _visible_to(actor)
    stmt = select(Post)
    count_stmt = select(func.count()).select_from(Post)
    if visible is not None:
        stmt = stmt.where(visible)
        count_stmt = count_stmt.where(visible)
    return _page(db, stmt, count_stmt, skip, limit)


def list_posts_by_author(
    db: Session,
    actor: Actor,
    author_id: int,
    *,
    skip: int = 0,
    limit: int = 10,
) -> tuple[list[Post], int]:
    """Return one page of ``author_id``'s posts that ``actor`` may read."""
    conditions = [Post.author_id == author_id]
    visible = _visible_to(actor)
    if visible is not None:
        conditions.append(visible)
    stmt = select(Post).where(*conditions)
    count_stmt = select(func.count()).select_from(Post).where(*conditions)
    return _page(db, stmt, count_stmt, skip, limit)


def update_post(
    db: Session,
    actor: Actor,
    post_id: int,
    *,
    title: str | None = None,
    content: str | None = None,
    status: ContentStatus | None = None,
    category_ids: Iterable[int] | None = None,
) -> Post:
    """Edit a post as its author or an ADMIN.

    ``category_ids``, when given, replaces the post's categories.

    Raises:
        NotFound: If the post (or a category) does not exist
        Forbidden: If the actor is neither the author nor an ADMIN
    """
    post = get_post(db, actor, post_id)
    require(actor, OwnershipRequirement.of(post.author_id), action="update post")

    if title is not None:
        post.title = _clean_title(title)
    if content is not None:
        body = content.strip()
        if not body:
            raise InvalidInput("Content is required")
        post.content = body
    if status is not None:
        post.status = status
    if category_ids is not None:
        post.categories = _resolve_categories(db, category_ids)

    db.commit()
    db.refresh(post)
    return post


def delete_post(
    db: Session,
    actor: Actor,
    post_id: int,
    *,
    threads: ThreadGraph | None = None,
) -> None:
    """Delete a post with its comments and every reaction attached to them.

    Raises:
        NotFound: If the post does not exist or is hidden from the actor
        Forbidden: If the actor is neither the author nor an ADMIN
    """
    post = get_post(db, actor, post_id)
    require(actor, OwnershipRequirement.of(post.author_id), action="delete post")

    removed_comments = purge_post(db, post, threads=threads)
    db.commit()
    logger.info(
        "Post %s deleted by actor=%s with %s comments",
        post_id,
        actor.id,
        removed_comments,
    )


def purge_post(db: Session, post: Post, *, threads: ThreadGraph | None = None) -> int:
    """Remove ``post`` and everything hanging from it without committing."""
    threads = threads or ThreadGraph()
    removed_comments = threads.purge_post(db, post.id)
    ReactionToggleEngine.purge_targets(db, TargetKind.POST, [post.id])
    db.delete(post)
    db.flush()
    return removed_comments


def post_categories(db: Session, actor: Actor, post_id: int) -> list[Category]:
    """Return the categories of a post the actor may read."""
    return list(get_post(db, actor, post_id).categories)


# --- categories -----------------------------------------------------------------------


def list_categories(db: Session) -> list[Category]:
    """Return all categories ordered by id."""
    return list(db.execute(select(Category).order_by(Category.id)).scalars())


def get_category(db: Session, category_id: int) -> Category:
    """Return a category.

    Raises:
        NotFound: If the category does not exist
    """
    category = db.get(Category, category_id)
    if category is None:
        raise NotFound("Category not found")
    return category


def list_posts_in_category(
    db: Session,
    actor: Actor,
    category_id: int,
    *,
    skip: int = 0,
    limit: int = 10,
) -> tuple[list[Post], int]:
    """Return one page of visible posts filed under ``category_id``.

    Raises:
        NotFound: If the category does not exist
    """
    get_category(db, category_id)
    conditions = [post_category.c.category_id == category_id]
    visible = _visible_to(actor)
    if visible is not None:
        conditions.append(visible)
    stmt = select(Post).join(post_category, post_category.c.post_id == Post.id).where(*conditions)
    count_stmt = (
        select(func.count())
        .select_from(Post)
        .join(post_category, post_category.c.post_id == Post.id)
        .where(*conditions)
    )
    return _page(db, stmt, count_stmt, skip, limit)


def _ensure_unique_title(db: Session, title: str, *, exclude_id: int | None = None) -> None:
    stmt = select(Category.id).where(Category.title == title)
    if exclude_id is not None:
        stmt = stmt.where(Category.id != exclude_id)
    if db.execute(stmt.limit(1)).first() is not None:
        raise InvalidInput("Category title already exists")


def create_category(
    db: Session,
    actor: Actor,
    *,
    title: str,
    description: str | None = None,
) -> Category:
    """Create a category (ADMIN only).

    Raises:
        Forbidden: If the actor is not an ADMIN
        InvalidInput: If the title is blank or already used
    """
    require(actor, ADMIN_ONLY, action="create category")
    clean = _clean_title(title)
    _ensure_unique_title(db, clean)
    category = Category(title=clean, description=description)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def update_category(
    db: Session,
    actor: Actor,
    category_id: int,
    *,
    title: str | None = None,
    description: str | None = None,
) -> Category:
    """Edit a category (ADMIN only)."""
    category = get_category(db, category_id)
    require(actor, ADMIN_ONLY, action="update category")
    if title is not None:
        clean = _clean_title(title)
        _ensure_unique_title(db, clean, exclude_id=category.id)
        category.title = clean
    if description is not None:
        category.description = description
    db.commit()
    db.refresh(category)
    return category


def delete_category(db: Session, actor: Actor, category_id: int) -> None:
    """Delete a category (ADMIN only); posts keep existing without it."""
    category = get_category(db, category_id)
    require(actor, ADMIN_ONLY, action="delete category")
    db.delete(category)
    db.commit()
    logger.info("Category %s deleted by actor=%s", category_id, actor.id)
