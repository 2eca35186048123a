"""
Book Catalog Backend — Book SQLAlchemy Model
============================================

What:  ORM model representing the `books` table in PostgreSQL.
Who:   Used by BookService for CRUD and search, and by Alembic.

Table Design:
    - UUID primary key (same identity strategy as categories)
    - title: VARCHAR(255), required
    - author: TEXT, required
    - description: TEXT, nullable
    - category_id: nullable FK to categories.id, ON DELETE SET NULL

Indexes:
    idx_books_title     B-tree on title
    idx_books_author    B-tree on author
    idx_books_fulltext  GIN expression index over the search vector below

    The full-text query in BookService builds its vector with
    `search_vector_sql()`, so the WHERE clause and the index expression are
    the same expression and PostgreSQL can use the index.
"""

import uuid

from sqlalchemy import ForeignKey, Index, String, Text, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from bookcatalog.database import Base

BOOK_TITLE_MAX_LENGTH = 255

# Text search configuration shared by the index and the search query
SEARCH_CONFIG = "english"


def search_vector_sql(table: str = "") -> str:
    """
    SQL for the tsvector over title, author and description.

    `table` qualifies the columns (e.g. "books") for queries that join
    another table with a `description` column.
    """
    prefix = f"{table}." if table else ""
    return (
        f"to_tsvector('{SEARCH_CONFIG}', "
        f"{prefix}title || ' ' || {prefix}author || ' ' || coalesce({prefix}description, ''))"
    )


class Book(Base):
    """A catalog entry, optionally filed under one category."""

    __tablename__ = "books"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )

    title: Mapped[str] = mapped_column(
        String(BOOK_TITLE_MAX_LENGTH),
        nullable=False,
    )

    author: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        default=None,
    )

    # SET NULL: removing a category detaches its books instead of deleting them
    category_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        default=None,
    )

    __table_args__ = (
        Index("idx_books_title", "title"),
        Index("idx_books_author", "author"),
        Index(
            "idx_books_fulltext",
            text(search_vector_sql()),
            postgresql_using="gin",
        ),
    )

    def __repr__(self) -> str:
        return f"<Book(id={self.id}, title='{self.title}', category_id={self.category_id})>"
