# src/threadline/main.py
"""Main entry point for the Threadline application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from threadline.api.v1 import api_v1
from threadline.core.errors import (
    Conflict,
    Forbidden,
    InvalidInput,
    NotFound,
    TargetUnavailable,
    ThreadlineError,
    Unauthenticated,
)
from threadline.core.settings import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("threadline")

app = FastAPI(
    title="Threadline API",
    description="Posts, threaded comments and reactions",
    version=settings.app_version,
)

# Browser clients call the API cross-origin.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

app.add_middleware(GZipMiddleware)

app.include_router(api_v1, prefix="/api/v1")

_STATUS_BY_ERROR: tuple[tuple[type[ThreadlineError], int], ...] = (
    (Unauthenticated, status.HTTP_401_UNAUTHORIZED),
    (Forbidden, status.HTTP_403_FORBIDDEN),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (InvalidInput, status.HTTP_400_BAD_REQUEST),
    (Conflict, status.HTTP_409_CONFLICT),
)


def status_for(exc: ThreadlineError) -> int:
    """Return the HTTP status code reported for a domain error."""
    if isinstance(exc, TargetUnavailable):
        return status.HTTP_404_NOT_FOUND if exc.missing else status.HTTP_403_FORBIDDEN
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@app.exception_handler(ThreadlineError)
async def handle_domain_error(request: Request, exc: ThreadlineError) -> JSONResponse:
    """Translate domain errors raised by services into JSON responses."""
    code = status_for(exc)
    headers = {"WWW-Authenticate": "Bearer"} if code == status.HTTP_401_UNAUTHORIZED else None
    if isinstance(exc, Forbidden):
        logger.info("Denied %s %s: %s", request.method, request.url.path, exc.reason)
    if code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("Unhandled domain error on %s: %s", request.url.path, exc.detail)
    return JSONResponse(
        status_code=code,
        content={"detail": exc.detail, "code": exc.code},
        headers=headers,
    )


@app.on_event("startup")
async def on_startup() -> None:
    logger.info("%s %s started", settings.app_name, settings.app_version)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Liveness probe; does not touch the database."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Describe the service and where its API docs live."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Posts, threaded comments and reactions",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("threadline.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
