"""
Book Catalog Backend — Category Route Handlers
==============================================

What:  /categories endpoints: list, get, create, update, delete.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bookcatalog.database import get_db_session
from bookcatalog.schemas.category import (
    CategoryCreate,
    CategoryDeleteResponse,
    CategoryResponse,
    CategoryUpdate,
)
from bookcatalog.schemas.common import ErrorResponse
from bookcatalog.services.category_service import category_service

router = APIRouter(prefix="/categories", tags=["Categories"])

_errors = {
    400: {"description": "Validation failed or malformed id", "model": ErrorResponse},
    404: {"description": "Category not found", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=List[CategoryResponse],
    responses={500: _errors[500]},
    summary="List categories",
)
async def list_categories(
    db: AsyncSession = Depends(get_db_session),
) -> List[CategoryResponse]:
    return await category_service.list_categories(db=db)


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    responses=_errors,
    summary="Get a single category by ID",
)
async def get_category(
    category_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> CategoryResponse:
    return await category_service.get_category(db=db, category_id=category_id)


@router.post(
    "",
    status_code=201,
    response_model=CategoryResponse,
    responses={400: _errors[400], 500: _errors[500]},
    summary="Create a category",
)
async def create_category(
    payload: CategoryCreate,
    db: AsyncSession = Depends(get_db_session),
) -> CategoryResponse:
    return await category_service.create_category(db=db, payload=payload)


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    responses=_errors,
    summary="Partially update a category",
)
async def update_category(
    category_id: UUID,
    payload: CategoryUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> CategoryResponse:
    return await category_service.update_category(db=db, category_id=category_id, payload=payload)


@router.delete(
    "/{category_id}",
    response_model=CategoryDeleteResponse,
    responses=_errors,
    summary="Delete a category",
    description=(
        "Deletes the category. Books filed under it are kept and their "
        "`categoryId` becomes null."
    ),
)
async def delete_category(
    category_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> CategoryDeleteResponse:
    return await category_service.delete_category(db=db, category_id=category_id)
