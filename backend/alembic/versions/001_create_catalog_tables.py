"""Create categories and books tables

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Creates `categories` and `books`, the foreign key between them
       (ON DELETE SET NULL) and the three book indexes.
How:   UUID primary keys generated by gen_random_uuid() (PostgreSQL 13+).
       The GIN index expression must stay identical to
       bookcatalog.models.book.search_vector_sql().

Rollback: downgrade() drops both tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "categories",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "books",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("author", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        # Deleting a category detaches its books
        sa.ForeignKeyConstraint(
            ["category_id"],
            ["categories.id"],
            ondelete="SET NULL",
        ),
    )

    op.create_index("idx_books_title", "books", ["title"])
    op.create_index("idx_books_author", "books", ["author"])
    op.create_index(
        "idx_books_fulltext",
        "books",
        [sa.text(
            "to_tsvector('english', title || ' ' || author || ' ' || coalesce(description, ''))"
        )],
        postgresql_using="gin",
    )


def downgrade() -> None:
    op.drop_index("idx_books_fulltext", table_name="books")
    op.drop_index("idx_books_author", table_name="books")
    op.drop_index("idx_books_title", table_name="books")
    op.drop_table("books")
    op.drop_table("categories")
