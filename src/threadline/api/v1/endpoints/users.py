# src/threadline/api/v1/endpoints/users.py
"""User management endpoints for the Threadline API."""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from threadline.api.v1.dependencies import CurrentActorDep, PageDep, SessionDep
from threadline.schemas.user import (
    AdminUserCreate,
    ProfileUpdateRequest,
    RoleUpdateRequest,
    UserResponse,
)
from threadline.services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/", response_model=list[UserResponse])
async def list_users(actor: CurrentActorDep, db: SessionDep, page: PageDep) -> list[UserResponse]:
    """Return one page of accounts ordered by id."""
    users = user_service.list_users(db, skip=page.skip, limit=page.limit)
    return [UserResponse.model_validate(user) for user in users]


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: AdminUserCreate,
    actor: CurrentActorDep,
    db: SessionDep,
) -> UserResponse:
    """Create an account of any role (ADMIN only)."""
    user = user_service.create_user(
        db,
        actor,
        login=payload.login,
        email=payload.email,
        full_name=payload.full_name,
        password=payload.password,
        role=payload.role,
    )
    return UserResponse.model_validate(user)


@router.get("/me", response_model=UserResponse)
async def read_me(actor: CurrentActorDep, db: SessionDep) -> UserResponse:
    """Return the caller's own account."""
    return UserResponse.model_validate(user_service.get_user(db, actor.id))


@router.patch("/me", response_model=UserResponse)
async def update_me(
    payload: ProfileUpdateRequest,
    actor: CurrentActorDep,
    db: SessionDep,
) -> UserResponse:
    """Update the caller's login, email, full name or picture."""
    user = user_service.update_profile(db, actor, **payload.model_dump(exclude_unset=True))
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse)
async def read_user(user_id: int, actor: CurrentActorDep, db: SessionDep) -> UserResponse:
    """Return an account by id."""
    return UserResponse.model_validate(user_service.get_user(db, user_id))


@router.patch("/{user_id}", response_model=UserResponse)
async def update_role(
    user_id: int,
    payload: RoleUpdateRequest,
    actor: CurrentActorDep,
    db: SessionDep,
) -> UserResponse:
    """Change an account's role (ADMIN only)."""
    user = user_service.change_role(db, actor, user_id, payload.role)
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: int, actor: CurrentActorDep, db: SessionDep) -> Response:
    """Delete an account and everything it authored (ADMIN only)."""
    user_service.delete_user(db, actor, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
