"""
Book Catalog Backend — Table Definition Tests
=============================================

What:  Foreign key behaviour, index names and the search vector expression.
How:   Inspects SQLAlchemy table metadata; the migration file is read as text.
"""

from pathlib import Path

from bookcatalog.models.book import Book, search_vector_sql
from bookcatalog.models.category import Category

MIGRATION = Path(__file__).resolve().parents[1] / "alembic" / "versions" / "001_create_catalog_tables.py"


def test_category_fk_sets_null_on_delete():
    (fk,) = Book.__table__.c.category_id.foreign_keys
    assert fk.column is Category.__table__.c.id
    assert fk.ondelete == "SET NULL"
    assert Book.__table__.c.category_id.nullable


def test_required_columns():
    columns = Book.__table__.c
    assert not columns.title.nullable
    assert not columns.author.nullable
    assert columns.description.nullable
    assert columns.title.type.length == 255
    assert Category.__table__.c.name.type.length == 100


def test_book_indexes():
    indexes = {index.name: index for index in Book.__table__.indexes}
    assert set(indexes) == {"idx_books_title", "idx_books_author", "idx_books_fulltext"}
    assert indexes["idx_books_fulltext"].dialect_options["postgresql"]["using"] == "gin"


def test_search_vector_sql_qualifies_columns():
    assert "books.title" in search_vector_sql("books")
    assert "coalesce(books.description, '')" in search_vector_sql("books")
    assert "books." not in search_vector_sql()


def test_migration_index_matches_model_expression():
    assert search_vector_sql() in MIGRATION.read_text()


def test_migration_fk_sets_null_on_delete():
    source = MIGRATION.read_text()
    assert 'ondelete="SET NULL"' in source
    assert "CASCADE" not in source
