"""
Book Catalog Backend — Category Service
=======================================

What:  All category queries: CRUD plus the existence check used by book writes.
How:   Stateless methods receiving the request's AsyncSession. Writes flush
       inside the request transaction; get_db_session commits.

Error Handling Strategy:
    Missing rows become NotFoundError. SQLAlchemy failures are logged and
    wrapped in DatabaseError so no SQL or driver detail reaches the client.
"""

import logging
from typing import List
from uuid import UUID, uuid4

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bookcatalog.exceptions import DatabaseError, NotFoundError
from bookcatalog.models.category import Category
from bookcatalog.schemas.category import (
    CategoryCreate,
    CategoryDeleteResponse,
    CategoryResponse,
    CategoryUpdate,
)

logger = logging.getLogger(__name__)


class CategoryService:
    """
    Business logic layer for category operations.

    Responsibilities:
        - list_categories() / get_category(): reads
        - create_category() / update_category() / delete_category(): writes
        - category_exists(): lookup used before a book references a category
    """

    async def list_categories(self, db: AsyncSession) -> List[CategoryResponse]:
        try:
            result = await db.execute(select(Category))
            return [CategoryResponse.model_validate(c) for c in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Database error listing categories: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve categories. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def get_category(self, db: AsyncSession, category_id: UUID) -> CategoryResponse:
        """
        Retrieve a single category by ID.

        Raises:
            NotFoundError: No category with that ID (→ 404)
            DatabaseError: Query execution failed (→ 500)
        """
        try:
            result = await db.execute(select(Category).where(Category.id == category_id))
            category = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching category %s: %s", category_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the category. Please try again.",
                context={"category_id": str(category_id), "error_type": type(e).__name__},
            )

        if category is None:
            raise NotFoundError(resource="category", resource_id=str(category_id))
        return CategoryResponse.model_validate(category)

    async def category_exists(self, db: AsyncSession, category_id: UUID) -> bool:
        """
        Check whether a category row with `category_id` exists.

        Not atomic with the write that follows it; the foreign key still
        rejects a category deleted in between.
        """
        try:
            result = await db.execute(select(Category.id).where(Category.id == category_id))
            return result.scalar_one_or_none() is not None
        except SQLAlchemyError as e:
            logger.error("Database error checking category %s: %s", category_id, str(e))
            raise DatabaseError(
                message="Could not verify the category. Please try again.",
                context={"category_id": str(category_id), "error_type": type(e).__name__},
            )

    async def create_category(self, db: AsyncSession, payload: CategoryCreate) -> CategoryResponse:
        category = Category(id=uuid4(), name=payload.name, description=payload.description)
        try:
            db.add(category)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating category: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the category. Please try again.",
                context={"error_type": type(e).__name__},
            )
        logger.info("Category created: %s", category.id)
        return CategoryResponse.model_validate(category)

    async def update_category(
        self,
        db: AsyncSession,
        category_id: UUID,
        payload: CategoryUpdate,
    ) -> CategoryResponse:
        """
        Apply a partial update.

        An empty payload writes nothing and returns the current row, so it
        still answers 404 for an unknown id.
        """
        changes = payload.changes()
        if not changes:
            return await self.get_category(db, category_id)

        try:
            result = await db.execute(
                update(Category)
                .where(Category.id == category_id)
                .values(**changes)
                .returning(Category)
            )
            category = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error updating category %s: %s", category_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the category. Please try again.",
                context={"category_id": str(category_id), "error_type": type(e).__name__},
            )

        if category is None:
            raise NotFoundError(resource="category", resource_id=str(category_id))
        logger.info("Category %s updated: %s", category_id, sorted(changes))
        return CategoryResponse.model_validate(category)

    async def delete_category(self, db: AsyncSession, category_id: UUID) -> CategoryDeleteResponse:
        """
        Delete a category. Books in it keep existing with category_id NULL
        (ON DELETE SET NULL on books.category_id).
        """
        try:
            result = await db.execute(
                delete(Category).where(Category.id == category_id).returning(Category)
            )
            category = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error deleting category %s: %s", category_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the category. Please try again.",
                context={"category_id": str(category_id), "error_type": type(e).__name__},
            )

        if category is None:
            raise NotFoundError(resource="category", resource_id=str(category_id))
        logger.info("Category deleted: %s", category_id)
        return CategoryDeleteResponse(
            message="Category deleted successfully",
            category=CategoryResponse.model_validate(category),
        )


category_service = CategoryService()
