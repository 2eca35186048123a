"""
Book Catalog Backend — Category Request/Response Schemas
========================================================

What:  Pydantic models for the category API contract.
How:   FastAPI validates request bodies against the *Create / *Update models
       and serializes responses through the *Response models.

Create vs. Update:
    CategoryCreate requires `name`. CategoryUpdate makes every field optional
    for partial updates; only keys present in the body are applied
    (`model_dump(exclude_unset=True)`). An explicit null clears a nullable
    field and is rejected for `name`.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from bookcatalog.models.category import CATEGORY_NAME_MAX_LENGTH
from bookcatalog.schemas.common import reject_nul


class CategoryCreate(BaseModel):
    """Body of POST /categories."""
    name: str = Field(
        min_length=1,
        max_length=CATEGORY_NAME_MAX_LENGTH,
        description="Category name (1-100 characters)",
    )
    description: Optional[str] = Field(default=None, description="Free-text description")

    @field_validator("name", "description")
    @classmethod
    def no_nul(cls, v: Optional[str]) -> Optional[str]:
        return reject_nul(v)


class CategoryUpdate(BaseModel):
    """Body of PUT /categories/{id}. Absent keys are left unchanged."""
    name: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=CATEGORY_NAME_MAX_LENGTH,
    )
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def reject_null_name(cls, v: Optional[str]) -> str:
        # Only runs for keys present in the body
        if v is None:
            raise ValueError("Category name cannot be null")
        return v

    @field_validator("name", "description")
    @classmethod
    def no_nul(cls, v: Optional[str]) -> Optional[str]:
        return reject_nul(v)

    def changes(self) -> dict:
        """Column values to write: exactly the keys the client sent."""
        return self.model_dump(exclude_unset=True)


class CategoryResponse(BaseModel):
    """A category as returned by the API."""
    id: uuid.UUID
    name: str
    description: Optional[str] = None

    model_config = {"from_attributes": True}


class CategoryDeleteResponse(BaseModel):
    """Confirmation body for DELETE /categories/{id}."""
    message: str = "Category deleted successfully"
    category: CategoryResponse
