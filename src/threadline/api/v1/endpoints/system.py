"""System endpoints for the Threadline API."""

from __future__ import annotations

from fastapi import APIRouter
from sqlalchemy import text

from threadline.api.v1.dependencies import SessionDep
from threadline.core.settings import settings

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "jwt_algorithm": settings.jwt_algorithm,
            "access_token_expire_minutes": settings.access_token_expire_minutes,
        },
        "pagination": {
            "default_page_size": settings.default_page_size,
            "max_page_size": settings.max_page_size,
        },
        "rate_limit": {
            "enabled": settings.rate_limit_enabled,
            "window_seconds": settings.rate_limit_window_seconds,
            "max_requests": settings.rate_limit_max_requests,
            "login_max_requests": settings.login_rate_limit_max_requests,
        },
    }


@router.get("/health")
async def get_health(db: SessionDep) -> dict[str, str]:
    """Report whether the database answers a trivial query."""
    db.execute(text("SELECT 1"))
    return {"status": "ok", "database": "ok"}
