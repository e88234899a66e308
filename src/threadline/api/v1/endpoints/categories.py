# src/threadline/api/v1/endpoints/categories.py
"""Category endpoints for the Threadline API."""

from fastapi import APIRouter, Response, status

from threadline.api.v1.dependencies import CurrentActorDep, PageDep, SessionDep
from threadline.api.v1.endpoints.posts import post_page
from threadline.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from threadline.schemas.post import PostPage
from threadline.services import posts as post_service

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("/", response_model=list[CategoryResponse])
async def list_categories(actor: CurrentActorDep, db: SessionDep) -> list[CategoryResponse]:
    """Return every category."""
    return [CategoryResponse.model_validate(c) for c in post_service.list_categories(db)]


@router.post("/", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate,
    actor: CurrentActorDep,
    db: SessionDep,
) -> CategoryResponse:
    """Create a category (ADMIN only)."""
    category = post_service.create_category(
        db,
        actor,
        title=payload.title,
        description=payload.description,
    )
    return CategoryResponse.model_validate(category)


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(category_id: int, actor: CurrentActorDep, db: SessionDep) -> CategoryResponse:
    return CategoryResponse.model_validate(post_service.get_category(db, category_id))


@router.get("/{category_id}/posts", response_model=PostPage)
async def list_category_posts(
    category_id: int,
    actor: CurrentActorDep,
    db: SessionDep,
    page: PageDep,
) -> PostPage:
    """Return visible posts filed under a category, newest first."""
    posts, total = post_service.list_posts_in_category(
        db,
        actor,
        category_id,
        skip=page.skip,
        limit=page.limit,
    )
    return post_page(db, posts, total, page.page, page.limit)


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    payload: CategoryUpdate,
    actor: CurrentActorDep,
    db: SessionDep,
) -> CategoryResponse:
    """Edit a category (ADMIN only)."""
    category = post_service.update_category(
        db,
        actor,
        category_id,
        title=payload.title,
        description=payload.description,
    )
    return CategoryResponse.model_validate(category)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: int, actor: CurrentActorDep, db: SessionDep) -> Response:
    """Delete a category (ADMIN only)."""
    post_service.delete_category(db, actor, category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
