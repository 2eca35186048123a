"""
Book Catalog Backend — Book Service
===================================

What:  Book CRUD, full-text search dispatch, and composition of each book
       with its category.
Who:   Called by the /books route handlers; uses CategoryService for the
       category existence check.

Read paths:
    ┌──────────────┐  q empty   ┌───────────────────────────────┐
    │ list_books() │──────────▶│ ORM left join (storage order)  │──┐
    └──────────────┘            └───────────────────────────────┘  │   ┌────────────────────────┐
            │       q present   ┌───────────────────────────────┐  ├──▶│ to_book_with_category() │
            └──────────────────▶│ raw FTS query, ts_rank DESC    │──┘   └────────────────────────┘
                                └───────────────────────────────┘

Write paths:
    create_book: category check → insert + flush → joined refetch
    update_book: category check (if categoryId set non-null) → UPDATE ... RETURNING id
                 → joined refetch
    delete_book: joined fetch → DELETE ... RETURNING id

    The category check and the write are separate statements. A category
    deleted in between makes the foreign key fail, which surfaces as a
    DatabaseError (500).
"""

import logging
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import delete, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bookcatalog.config import settings
from bookcatalog.exceptions import DatabaseError, NotFoundError, ValidationError
from bookcatalog.models.book import SEARCH_CONFIG, Book, search_vector_sql
from bookcatalog.models.category import Category
from bookcatalog.schemas.book import (
    BookCreate,
    BookDeleteResponse,
    BookUpdate,
    BookWithCategory,
)
from bookcatalog.services.book_mapper import (
    JoinedBookRow,
    SearchBookRow,
    to_book_with_category,
)
from bookcatalog.services.category_service import category_service

logger = logging.getLogger(__name__)


# Ranked full-text search. Ties on rank are broken by title, then id, so the
# order is stable across identical requests.
SEARCH_SQL = text(
    f"""
    SELECT books.id,
           books.title,
           books.author,
           books.description,
           books.category_id,
           categories.id          AS category_ref_id,
           categories.name        AS category_name,
           categories.description AS category_description,
           ts_rank({search_vector_sql("books")}, plainto_tsquery('{SEARCH_CONFIG}', :query)) AS rank
    FROM books
    LEFT JOIN categories ON categories.id = books.category_id
    WHERE {search_vector_sql("books")} @@ plainto_tsquery('{SEARCH_CONFIG}', :query)
    ORDER BY rank DESC, books.title ASC, books.id ASC
    """
)


def _joined_select():
    return select(Book, Category).outerjoin(Category, Book.category_id == Category.id)


class BookService:
    """
    Business logic layer for book operations.

    Responsibilities:
        - list_books(): unfiltered listing or ranked search
        - get_book(): single book with its category
        - create_book() / update_book() / delete_book(): writes with the
          category existence check
    """

    def __init__(self, search_query_max_length: Optional[int] = None):
        self._search_query_max_length = search_query_max_length

    @property
    def search_query_max_length(self) -> int:
        if self._search_query_max_length is not None:
            return self._search_query_max_length
        return settings.search_query_max_length

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_books(
        self,
        db: AsyncSession,
        query: Optional[str] = None,
    ) -> List[BookWithCategory]:
        """
        List all books, or search them when `query` is non-empty.

        Args:
            db: Async database session
            query: Free-text search terms from `?q=`. Whitespace-only is
                   treated as absent.

        Returns:
            Books with their categories. Search results are ordered by
            descending relevance; no match gives an empty list.

        Raises:
            ValidationError: query longer than the configured maximum or
                             containing NUL, raised before any SQL is issued (→ 400)
            DatabaseError: query execution failed (→ 500)
        """
        if query is not None and len(query) > self.search_query_max_length:
            raise ValidationError(
                message=f"Search query must be at most {self.search_query_max_length} characters",
                field="q",
                context={"length": len(query)},
            )

        if query is not None and "\x00" in query:
            raise ValidationError(
                message="Search query must not contain NUL characters",
                field="q",
            )

        terms = (query or "").strip()
        if terms:
            return await self.search_books(db, terms)

        try:
            result = await db.execute(_joined_select())
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error listing books: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve books. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return [to_book_with_category(JoinedBookRow.from_row(row)) for row in rows]

    async def search_books(self, db: AsyncSession, terms: str) -> List[BookWithCategory]:
        """Ranked full-text search over title, author and description."""
        try:
            result = await db.execute(SEARCH_SQL, {"query": terms})
            rows = result.mappings().all()
        except SQLAlchemyError as e:
            logger.error("Database error searching books: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not search books. Please try again.",
                context={"error_type": type(e).__name__},
            )
        logger.debug("Search %r matched %d books", terms, len(rows))
        return [to_book_with_category(SearchBookRow.from_mapping(row)) for row in rows]

    async def get_book(self, db: AsyncSession, book_id: UUID) -> BookWithCategory:
        """
        Retrieve a single book with its category.

        Raises:
            NotFoundError: No book with that ID (→ 404)
            DatabaseError: Query execution failed (→ 500)
        """
        row = await self._fetch_joined(db, book_id)
        if row is None:
            raise NotFoundError(resource="book", resource_id=str(book_id))
        return to_book_with_category(row)

    async def _fetch_joined(self, db: AsyncSession, book_id: UUID) -> Optional[JoinedBookRow]:
        try:
            result = await db.execute(_joined_select().where(Book.id == book_id))
            row = result.first()
        except SQLAlchemyError as e:
            logger.error("Database error fetching book %s: %s", book_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the book. Please try again.",
                context={"book_id": str(book_id), "error_type": type(e).__name__},
            )
        if row is None:
            return None
        return JoinedBookRow.from_row(row)

    # ── Writes ────────────────────────────────────────────────────────────

    async def _require_category(self, db: AsyncSession, category_id: Optional[UUID]) -> None:
        """NotFoundError unless `category_id` is None or names an existing category."""
        if category_id is None:
            return
        if not await category_service.category_exists(db, category_id):
            raise NotFoundError(resource="category", resource_id=str(category_id))

    async def create_book(self, db: AsyncSession, payload: BookCreate) -> BookWithCategory:
        """
        Insert a book and return it composed with its category.

        Raises:
            NotFoundError: categoryId names no category; nothing is inserted (→ 404)
            DatabaseError: insert or refetch failed (→ 500)
        """
        await self._require_category(db, payload.category_id)

        book = Book(
            id=uuid4(),
            title=payload.title,
            author=payload.author,
            description=payload.description,
            category_id=payload.category_id,
        )
        try:
            db.add(book)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating book: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the book. Please try again.",
                context={"error_type": type(e).__name__},
            )
        logger.info("Book created: %s (category=%s)", book.id, book.category_id)

        return await self.get_book(db, book.id)

    async def update_book(
        self,
        db: AsyncSession,
        book_id: UUID,
        payload: BookUpdate,
    ) -> BookWithCategory:
        """
        Apply a partial update.

        Only keys present in the body are written. `{"categoryId": null}`
        clears the association; an absent `categoryId` leaves it alone. An
        empty body writes nothing and returns the current book.

        Raises:
            NotFoundError: unknown book, or categoryId names no category (→ 404)
            DatabaseError: update or refetch failed (→ 500)
        """
        changes = payload.changes()
        if not changes:
            return await self.get_book(db, book_id)

        if payload.sets_category:
            await self._require_category(db, payload.category_id)

        try:
            result = await db.execute(
                update(Book)
                .where(Book.id == book_id)
                .values(**changes)
                .returning(Book.id)
            )
            updated_id = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error updating book %s: %s", book_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the book. Please try again.",
                context={"book_id": str(book_id), "error_type": type(e).__name__},
            )

        if updated_id is None:
            raise NotFoundError(resource="book", resource_id=str(book_id))
        logger.info("Book %s updated: %s", book_id, sorted(changes))

        return await self.get_book(db, book_id)

    async def delete_book(self, db: AsyncSession, book_id: UUID) -> BookDeleteResponse:
        """
        Delete a book and return it as it was, composed with its category.

        Raises:
            NotFoundError: unknown book (→ 404)
            DatabaseError: delete failed (→ 500)
        """
        existing = await self.get_book(db, book_id)

        try:
            result = await db.execute(
                delete(Book).where(Book.id == book_id).returning(Book.id)
            )
            deleted_id = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error deleting book %s: %s", book_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the book. Please try again.",
                context={"book_id": str(book_id), "error_type": type(e).__name__},
            )

        # Removed by a concurrent request after the fetch above
        if deleted_id is None:
            raise NotFoundError(resource="book", resource_id=str(book_id))
        logger.info("Book deleted: %s", book_id)

        return BookDeleteResponse(message="Book deleted", book=existing)


book_service = BookService()
