"""
Book Catalog Backend — Book Route Handlers
==========================================

What:  /books endpoints: list/search, get, create, update, delete.
How:   Path ids are parsed as UUIDs by FastAPI; a malformed id fails request
       validation and the global handler answers 400. Bodies are validated
       against BookCreate / BookUpdate. Everything else is delegated to
       BookService.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bookcatalog.database import get_db_session
from bookcatalog.schemas.book import (
    BookCreate,
    BookDeleteResponse,
    BookUpdate,
    BookWithCategory,
)
from bookcatalog.schemas.common import ErrorResponse
from bookcatalog.services.book_service import book_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/books", tags=["Books"])

_errors = {
    400: {"description": "Validation failed or malformed id", "model": ErrorResponse},
    404: {"description": "Book or referenced category not found", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=List[BookWithCategory],
    responses={
        400: _errors[400],
        500: _errors[500],
    },
    summary="List books, or search them with ?q=",
    description=(
        "Without `q`, returns every book with its category. With a non-empty `q`, "
        "runs a full-text search over title, author and description and returns "
        "matches by descending relevance."
    ),
)
async def list_books(
    q: str | None = Query(
        default=None,
        description="Full-text search terms (max 100 characters)",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> List[BookWithCategory]:
    return await book_service.list_books(db=db, query=q)


@router.get(
    "/{book_id}",
    response_model=BookWithCategory,
    responses=_errors,
    summary="Get a single book by ID",
)
async def get_book(
    book_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> BookWithCategory:
    return await book_service.get_book(db=db, book_id=book_id)


@router.post(
    "",
    status_code=201,
    response_model=BookWithCategory,
    responses=_errors,
    summary="Create a book",
    description=(
        "Creates a book. When `categoryId` is given it must name an existing "
        "category, otherwise the request fails with 404 and nothing is stored."
    ),
)
async def create_book(
    payload: BookCreate,
    db: AsyncSession = Depends(get_db_session),
) -> BookWithCategory:
    logger.info("Create book request: title=%r category=%s", payload.title, payload.category_id)
    return await book_service.create_book(db=db, payload=payload)


@router.put(
    "/{book_id}",
    response_model=BookWithCategory,
    responses=_errors,
    summary="Partially update a book",
    description=(
        "Only fields present in the body change. `\"categoryId\": null` removes "
        "the book from its category; omitting `categoryId` leaves it unchanged."
    ),
)
async def update_book(
    book_id: UUID,
    payload: BookUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> BookWithCategory:
    return await book_service.update_book(db=db, book_id=book_id, payload=payload)


@router.delete(
    "/{book_id}",
    response_model=BookDeleteResponse,
    responses=_errors,
    summary="Delete a book",
)
async def delete_book(
    book_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> BookDeleteResponse:
    return await book_service.delete_book(db=db, book_id=book_id)
