# src/threadline/api/v1/endpoints/posts.py
"""Post-related endpoints for the Threadline API."""

from fastapi import APIRouter, Response, status
from sqlalchemy.orm import Session

from threadline.api.v1.dependencies import CurrentActorDep, PageDep, SessionDep
from threadline.models import Post
from threadline.schemas.category import CategoryResponse
from threadline.schemas.common import Pagination
from threadline.schemas.post import PostCreate, PostPage, PostResponse, PostUpdate
from threadline.schemas.reaction import ReactionCounts
from threadline.services import posts as post_service
from threadline.services.reactions import ReactionTarget, ReactionToggleEngine

router = APIRouter(prefix="/posts", tags=["posts"])


def post_out(db: Session, post: Post) -> PostResponse:
    """Serialize a post together with its reaction counts."""
    summary = ReactionToggleEngine.summarize(db, ReactionTarget.post(post.id))
    response = PostResponse.model_validate(post)
    response.reactions = ReactionCounts(
        likes=summary.likes,
        dislikes=summary.dislikes,
        total=summary.total,
    )
    return response


def post_page(db: Session, posts: list[Post], total: int, page: int, limit: int) -> PostPage:
    return PostPage(
        posts=[post_out(db, post) for post in posts],
        pagination=Pagination.build(total, page, limit),
    )


@router.post("/", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(payload: PostCreate, actor: CurrentActorDep, db: SessionDep) -> PostResponse:
    """Publish a new post, optionally filed under categories."""
    post = post_service.create_post(
        db,
        actor,
        title=payload.title,
        content=payload.content,
        category_ids=payload.categories,
    )
    return post_out(db, post)


@router.get("/", response_model=PostPage)
async def list_posts(actor: CurrentActorDep, db: SessionDep, page: PageDep) -> PostPage:
    """Return posts visible to the caller, newest first."""
    posts, total = post_service.list_posts(db, actor, skip=page.skip, limit=page.limit)
    return post_page(db, posts, total, page.page, page.limit)


@router.get("/mine", response_model=PostPage)
async def list_my_posts(actor: CurrentActorDep, db: SessionDep, page: PageDep) -> PostPage:
    """Return the caller's own posts, including inactive ones."""
    posts, total = post_service.list_posts_by_author(
        db,
        actor,
        actor.id,
        skip=page.skip,
        limit=page.limit,
    )
    return post_page(db, posts, total, page.page, page.limit)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: int, actor: CurrentActorDep, db: SessionDep) -> PostResponse:
    """Return a single post."""
    return post_out(db, post_service.get_post(db, actor, post_id))


@router.patch("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    payload: PostUpdate,
    actor: CurrentActorDep,
    db: SessionDep,
) -> PostResponse:
    """Edit a post (author or ADMIN)."""
    post = post_service.update_post(
        db,
        actor,
        post_id,
        title=payload.title,
        content=payload.content,
        status=payload.status,
        category_ids=payload.categories,
    )
    return post_out(db, post)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(post_id: int, actor: CurrentActorDep, db: SessionDep) -> Response:
    """Delete a post with its comments and reactions (author or ADMIN)."""
    post_service.delete_post(db, actor, post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{post_id}/categories", response_model=list[CategoryResponse])
async def get_post_categories(
    post_id: int,
    actor: CurrentActorDep,
    db: SessionDep,
) -> list[CategoryResponse]:
    """Return the categories a post is filed under."""
    categories = post_service.post_categories(db, actor, post_id)
    return [CategoryResponse.model_validate(category) for category in categories]
