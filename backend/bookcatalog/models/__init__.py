"""
ORM models. Importing this package registers every table on `Base.metadata`.
"""

from bookcatalog.models.category import Category
from bookcatalog.models.book import Book

__all__ = ["Book", "Category"]
