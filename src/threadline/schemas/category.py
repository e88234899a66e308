"""Category-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field


class CategoryCreate(BaseModel):
    """Schema for creating a category."""

    title: str = Field(..., min_length=1, max_length=128)
    description: str | None = Field(None, max_length=2000)


class CategoryUpdate(BaseModel):
    """Schema for editing a category."""

    title: str | None = Field(None, min_length=1, max_length=128)
    description: str | None = Field(None, max_length=2000)


class CategoryResponse(BaseModel):
    """Category returned by the API."""

    id: int
    title: str
    description: str | None = None

    model_config = ConfigDict(from_attributes=True)
