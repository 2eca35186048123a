"""
Book Catalog Backend — Book Request/Response Schemas
====================================================

What:  Pydantic models for the book API contract.

JSON naming:
    The relation is exposed as `categoryId`; Python code uses `category_id`.
    Both names are accepted on input (populate_by_name), responses always
    use the alias.

Partial updates:
    BookUpdate distinguishes "key absent" (leave unchanged) from "key present
    with null" (clear the value). `changes()` returns only the keys the
    client sent, so `{"categoryId": null}` yields {"category_id": None} while
    `{}` yields {}.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from bookcatalog.models.book import BOOK_TITLE_MAX_LENGTH
from bookcatalog.schemas.category import CategoryResponse
from bookcatalog.schemas.common import reject_nul


class BookCreate(BaseModel):
    """Body of POST /books."""
    title: str = Field(min_length=1, max_length=BOOK_TITLE_MAX_LENGTH)
    author: str = Field(min_length=1)
    description: Optional[str] = None
    category_id: Optional[uuid.UUID] = Field(default=None, alias="categoryId")

    model_config = {"populate_by_name": True}

    @field_validator("title", "author", "description")
    @classmethod
    def no_nul(cls, v: Optional[str]) -> Optional[str]:
        return reject_nul(v)


class BookUpdate(BaseModel):
    """Body of PUT /books/{id}. Every field optional."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=BOOK_TITLE_MAX_LENGTH)
    author: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    category_id: Optional[uuid.UUID] = Field(default=None, alias="categoryId")

    model_config = {"populate_by_name": True}

    @field_validator("title", "author")
    @classmethod
    def reject_null(cls, v: Optional[str], info) -> str:
        # Only runs for keys present in the body
        if v is None:
            raise ValueError(f"{info.field_name.capitalize()} cannot be null")
        return v

    @field_validator("title", "author", "description")
    @classmethod
    def no_nul(cls, v: Optional[str]) -> Optional[str]:
        return reject_nul(v)

    def changes(self) -> dict:
        """Column values to write, keyed by attribute name."""
        return self.model_dump(exclude_unset=True, by_alias=False)

    @property
    def sets_category(self) -> bool:
        """True when the body carried a `categoryId` key (null included)."""
        return "category_id" in self.model_fields_set


class BookWithCategory(BaseModel):
    """
    Canonical book representation returned by every book endpoint.

    `category` is the resolved category object, or null when the book has
    none. It is never an object with null fields.
    """
    id: uuid.UUID
    title: str
    author: str
    description: Optional[str] = None
    category_id: Optional[uuid.UUID] = Field(default=None, alias="categoryId")
    category: Optional[CategoryResponse] = None

    model_config = {"populate_by_name": True}


class BookDeleteResponse(BaseModel):
    """Confirmation body for DELETE /books/{id}."""
    message: str = "Book deleted"
    book: BookWithCategory
