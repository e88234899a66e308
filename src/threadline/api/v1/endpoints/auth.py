# src/threadline/api/v1/endpoints/auth.py
"""Authentication endpoints for the Threadline API."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from threadline.api.v1.dependencies import (
    CurrentActorDep,
    MailerDep,
    SessionDep,
    VerifierDep,
    general_rate_limit,
    login_rate_limit,
)
from threadline.schemas.common import Message
from threadline.schemas.user import (
    LoginRequest,
    LoginResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    RegisterRequest,
    UserResponse,
)
from threadline.services import users as user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])

GeneralLimit = Annotated[None, Depends(general_rate_limit)]
LoginLimit = Annotated[None, Depends(login_rate_limit)]


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, db: SessionDep, _: GeneralLimit) -> UserResponse:
    """Create a USER account."""
    user = user_service.register(
        db,
        login=payload.login,
        email=payload.email,
        full_name=payload.full_name,
        password=payload.password,
    )
    return UserResponse.model_validate(user)


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    db: SessionDep,
    verifier: VerifierDep,
    _: LoginLimit,
) -> LoginResponse:
    """Exchange a login (or email) and password for an access token."""
    result = user_service.authenticate(db, payload.login, payload.password, verifier=verifier)
    return LoginResponse(
        access_token=result.token,
        user_id=result.user.id,
        role=result.user.role,
    )


@router.post("/logout", response_model=Message)
async def logout(actor: CurrentActorDep) -> Message:
    """Acknowledge a logout; tokens are stateless and simply discarded by the client."""
    logger.info("User id=%s logged out", actor.id)
    return Message(message="Logged out")


@router.post("/password-reset", response_model=Message)
async def request_password_reset(
    payload: PasswordResetRequest,
    db: SessionDep,
    mailer: MailerDep,
    _: GeneralLimit,
) -> Message:
    """Mail a password reset link to the account owning ``email``."""
    if not user_service.request_password_reset(db, mailer, payload.email):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send email",
        )
    return Message(message="Password reset link sent")


@router.post("/password-reset/confirm", response_model=Message)
async def confirm_password_reset(
    payload: PasswordResetConfirm,
    db: SessionDep,
    _: GeneralLimit,
) -> Message:
    """Set a new password using a reset token."""
    user_service.confirm_password_reset(db, payload.token, payload.password)
    return Message(message="Password has been reset")
