"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

import math

from pydantic import BaseModel, Field


class Pagination(BaseModel):
    """Page metadata returned by list endpoints."""

    total: int = Field(..., ge=0, description="Number of items across all pages")
    page: int = Field(..., ge=1, description="Current page, starting at 1")
    pages: int = Field(..., ge=0, description="Number of pages")

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> Pagination:
        return cls(total=total, page=page, pages=math.ceil(total / limit) if limit else 0)


class Message(BaseModel):
    """Plain acknowledgement."""

    message: str
