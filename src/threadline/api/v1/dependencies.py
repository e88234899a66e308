"""Shared API dependencies for authentication and common functionality."""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from threadline.core.claims import Actor, ClaimVerifier, get_claim_verifier
from threadline.core.errors import Unauthenticated
from threadline.core.settings import settings
from threadline.db.session import get_db
from threadline.services.mailer import Mailer, get_mailer
from threadline.services.rate_limit import RateLimiter, general_limiter, login_limiter
from threadline.services.reactions import ReactionToggleEngine, get_reaction_engine
from threadline.services.threads import ThreadGraph, get_thread_graph

# Missing credentials are reported by the verifier, not by FastAPI's 403.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
VerifierDep = Annotated[ClaimVerifier, Depends(get_claim_verifier)]


def get_current_actor(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    verifier: VerifierDep,
) -> Actor:
    """Get the calling actor from the bearer token.

    Args:
        credentials: HTTP Bearer token credentials, if any
        verifier: Claim verifier configured from settings

    Returns:
        Actor carried by the token

    Raises:
        Unauthenticated: If the token is absent or fails verification
    """
    if credentials is None:
        raise Unauthenticated("Authentication required")
    return verifier.verify(credentials.credentials)


# Type alias for current actor dependency
CurrentActorDep = Annotated[Actor, Depends(get_current_actor)]
MailerDep = Annotated[Mailer, Depends(get_mailer)]
ReactionEngineDep = Annotated[ReactionToggleEngine, Depends(get_reaction_engine)]
ThreadGraphDep = Annotated[ThreadGraph, Depends(get_thread_graph)]


@dataclass(frozen=True)
class PageParams:
    """Resolved ``page``/``limit`` query parameters."""

    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def get_page_params(
    page: Annotated[int, Query(ge=1, description="Page number, starting at 1")] = 1,
    limit: Annotated[int | None, Query(ge=1, description="Items per page")] = None,
) -> PageParams:
    """Return pagination parameters with the page size clamped to settings."""
    return PageParams(page=page, limit=settings.clamp_page_size(limit))


PageDep = Annotated[PageParams, Depends(get_page_params)]


def _client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _throttle(limiter: RateLimiter, request: Request, scope: str) -> None:
    if not settings.rate_limit_enabled:
        return
    key = f"{scope}:{_client_key(request)}"
    if not limiter.hit(key):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests, please try again later.",
            headers={"Retry-After": str(limiter.retry_after(key))},
        )


def general_rate_limit(request: Request) -> None:
    """Apply the general request budget to sensitive unauthenticated routes."""
    _throttle(general_limiter, request, request.url.path)


def login_rate_limit(request: Request) -> None:
    """Apply the stricter login budget."""
    _throttle(login_limiter, request, "login")
