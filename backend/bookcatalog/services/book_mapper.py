"""
Book Catalog Backend — Book/Category Composition
================================================

What:  Turns the rows produced by BookService queries into the canonical
       BookWithCategory shape.
Why:   Books come back from two query paths with different row shapes:

       JoinedBookRow  ORM left join: (Book, Category | None)
       SearchBookRow  raw full-text query: flat columns with the category
                      columns aliased as category_ref_id / category_name /
                      category_description, plus the rank

       Both must produce identical output for the same underlying data, so
       each shape gets an explicit type and one mapping function handles
       both.

Null handling:
    A book without a category maps to `category=None`. For search rows the
    category is absent exactly when the joined category id is NULL.
"""

import uuid
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from bookcatalog.models.book import Book
from bookcatalog.models.category import Category
from bookcatalog.schemas.book import BookWithCategory
from bookcatalog.schemas.category import CategoryResponse


@dataclass(frozen=True)
class JoinedBookRow:
    """One row of `select(Book, Category).outerjoin(Category, ...)`."""
    book: Book
    category: Optional[Category]

    @classmethod
    def from_row(cls, row: Any) -> "JoinedBookRow":
        book, category = row
        return cls(book=book, category=category)


@dataclass(frozen=True)
class SearchBookRow:
    """One row of the full-text search query (see BookService.SEARCH_SQL)."""
    id: uuid.UUID
    title: str
    author: str
    description: Optional[str]
    category_id: Optional[uuid.UUID]
    category_ref_id: Optional[uuid.UUID]
    category_name: Optional[str]
    category_description: Optional[str]
    rank: float

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "SearchBookRow":
        return cls(
            id=row["id"],
            title=row["title"],
            author=row["author"],
            description=row["description"],
            category_id=row["category_id"],
            category_ref_id=row["category_ref_id"],
            category_name=row["category_name"],
            category_description=row["category_description"],
            rank=float(row["rank"]),
        )


BookRow = Union[JoinedBookRow, SearchBookRow]


def to_book_with_category(row: BookRow) -> BookWithCategory:
    """Map either row shape to the canonical response model."""
    if isinstance(row, JoinedBookRow):
        book = row.book
        category = None
        if row.category is not None:
            category = CategoryResponse(
                id=row.category.id,
                name=row.category.name,
                description=row.category.description,
            )
        return BookWithCategory(
            id=book.id,
            title=book.title,
            author=book.author,
            description=book.description,
            category_id=book.category_id,
            category=category,
        )

    if isinstance(row, SearchBookRow):
        category = None
        if row.category_ref_id is not None:
            category = CategoryResponse(
                id=row.category_ref_id,
                name=row.category_name,
                description=row.category_description,
            )
        return BookWithCategory(
            id=row.id,
            title=row.title,
            author=row.author,
            description=row.description,
            category_id=row.category_id,
            category=category,
        )

    raise TypeError(f"Unsupported book row type: {type(row).__name__}")
