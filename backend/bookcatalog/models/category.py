"""
Book Catalog Backend — Category SQLAlchemy Model
================================================

What:  ORM model representing the `categories` table in PostgreSQL.
Who:   Used by CategoryService for CRUD and by BookService for the left join
       that composes a book with its category. Read by Alembic.

Table Design:
    - UUID primary key, generated server-side (gen_random_uuid()) with a
      Python-side uuid4 default so the id is known before flush
    - name: VARCHAR(100), required
    - description: free text, nullable

    Books reference categories with ON DELETE SET NULL (see book.py), so
    deleting a category never deletes books.
"""

import uuid

from sqlalchemy import String, Text, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from bookcatalog.database import Base

CATEGORY_NAME_MAX_LENGTH = 100


class Category(Base):
    """A named grouping of books."""

    __tablename__ = "categories"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )

    name: Mapped[str] = mapped_column(
        String(CATEGORY_NAME_MAX_LENGTH),
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        default=None,
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name='{self.name}')>"
