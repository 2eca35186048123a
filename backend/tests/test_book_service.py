"""
Book Catalog Backend — Book Service Unit Tests
==============================================

What:  Tests for BookService (list/search dispatch, get, create, update, delete).
How:   Mock DB sessions; each `execute` call is answered in order through
       `side_effect`. No real database.

What we test:
    ✅ Empty / whitespace q lists everything; non-empty q runs the search query
    ✅ Over-long q or q containing NUL is rejected before any SQL
    ✅ Search SQL ranks by relevance with a stable tie-break over the indexed vector
    ✅ Create with null categoryId skips the existence check
    ✅ Create with an unknown categoryId raises NotFoundError and inserts nothing
    ✅ Update: empty body writes nothing; categoryId null clears without a check
    ✅ Delete: unknown id raises NotFoundError
    ✅ SQLAlchemy failures become DatabaseError
"""

import pytest
from unittest.mock import AsyncMock
from uuid import uuid4

from sqlalchemy.exc import OperationalError

from bookcatalog.exceptions import DatabaseError, NotFoundError, ValidationError
from bookcatalog.models.book import search_vector_sql
from bookcatalog.schemas.book import BookCreate, BookUpdate
from bookcatalog.services.book_service import SEARCH_SQL, BookService

from conftest import make_result


def search_mapping(book, category=None, rank=0.1):
    return {
        "id": book.id,
        "title": book.title,
        "author": book.author,
        "description": book.description,
        "category_id": book.category_id,
        "category_ref_id": category.id if category else None,
        "category_name": category.name if category else None,
        "category_description": category.description if category else None,
        "rank": rank,
    }


class TestBookServiceList:

    def setup_method(self):
        self.service = BookService(search_query_max_length=100)

    @pytest.mark.asyncio
    async def test_list_without_query_uses_join(self, mock_db_session, dune, scifi_category, orphan_book):
        mock_db_session.execute.return_value = make_result(
            rows=[(dune, scifi_category), (orphan_book, None)]
        )

        result = await self.service.list_books(mock_db_session)

        assert [b.title for b in result] == ["Dune", "The Left Hand of Darkness"]
        assert result[0].category.name == "Science Fiction"
        assert result[1].category is None
        statement = mock_db_session.execute.await_args.args[0]
        assert statement is not SEARCH_SQL

    @pytest.mark.asyncio
    async def test_whitespace_query_lists_everything(self, mock_db_session):
        mock_db_session.execute.return_value = make_result(rows=[])

        await self.service.list_books(mock_db_session, query="   ")

        statement = mock_db_session.execute.await_args.args[0]
        assert statement is not SEARCH_SQL

    @pytest.mark.asyncio
    async def test_query_runs_ranked_search(self, mock_db_session, dune, scifi_category, orphan_book):
        mock_db_session.execute.return_value = make_result(mappings=[
            search_mapping(dune, scifi_category, rank=0.8),
            search_mapping(orphan_book, rank=0.2),
        ])

        result = await self.service.list_books(mock_db_session, query="  dune ")

        args = mock_db_session.execute.await_args.args
        assert args[0] is SEARCH_SQL
        assert args[1] == {"query": "dune"}
        # Database order (rank DESC) is preserved
        assert [b.id for b in result] == [dune.id, orphan_book.id]
        assert result[1].category is None

    @pytest.mark.asyncio
    async def test_search_without_matches_is_empty(self, mock_db_session):
        mock_db_session.execute.return_value = make_result(mappings=[])

        result = await self.service.list_books(mock_db_session, query="nothing-matches")

        assert result == []

    @pytest.mark.asyncio
    async def test_query_too_long_never_touches_database(self, mock_db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.list_books(mock_db_session, query="x" * 101)

        assert exc_info.value.fields == {"q": "Search query must be at most 100 characters"}
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_query_at_limit_is_accepted(self, mock_db_session):
        mock_db_session.execute.return_value = make_result(mappings=[])

        await self.service.list_books(mock_db_session, query="x" * 100)

        mock_db_session.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_database_failure_wrapped(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))

        with pytest.raises(DatabaseError):
            await self.service.list_books(mock_db_session)


    @pytest.mark.asyncio
    async def test_query_with_nul_never_touches_database(self, mock_db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.list_books(mock_db_session, query="du\x00ne")

        assert "q" in exc_info.value.fields
        mock_db_session.execute.assert_not_awaited()

    def test_search_sql_ranks_and_breaks_ties(self):
        sql = " ".join(str(SEARCH_SQL).split())

        assert "ORDER BY rank DESC, books.title ASC, books.id ASC" in sql
        assert "plainto_tsquery('english', :query)" in sql
        assert f"ts_rank({search_vector_sql('books')}, plainto_tsquery('english', :query)) AS rank" in sql

    def test_search_sql_matches_indexed_vector(self):
        sql = " ".join(str(SEARCH_SQL).split())

        # Same expression as idx_books_fulltext, qualified for the join
        assert f"WHERE {search_vector_sql('books')} @@ plainto_tsquery('english', :query)" in sql
        assert "LEFT JOIN categories ON categories.id = books.category_id" in sql


class TestBookServiceGet:

    def setup_method(self):
        self.service = BookService()

    @pytest.mark.asyncio
    async def test_get_found(self, mock_db_session, dune, scifi_category):
        mock_db_session.execute.return_value = make_result(first=(dune, scifi_category))

        result = await self.service.get_book(mock_db_session, dune.id)

        assert result.id == dune.id
        assert result.category.id == scifi_category.id

    @pytest.mark.asyncio
    async def test_get_not_found(self, mock_db_session):
        mock_db_session.execute.return_value = make_result(first=None)

        with pytest.raises(NotFoundError):
            await self.service.get_book(mock_db_session, uuid4())


class TestBookServiceCreate:

    def setup_method(self):
        self.service = BookService()

    @pytest.mark.asyncio
    async def test_create_with_category(self, mock_db_session, scifi_category):
        payload = BookCreate(title="Dune", author="Frank Herbert", categoryId=scifi_category.id)
        added = []
        mock_db_session.add.side_effect = added.append

        async def execute(statement, *args):
            if mock_db_session.execute.await_count == 1:
                return make_result(scalar=scifi_category.id)
            return make_result(first=(added[0], scifi_category))

        mock_db_session.execute = AsyncMock(side_effect=execute)

        result = await self.service.create_book(mock_db_session, payload)

        assert result.title == "Dune"
        assert result.category.name == "Science Fiction"
        assert added[0].category_id == scifi_category.id
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_with_null_category(self, mock_db_session):
        payload = BookCreate(title="Solaris", author="Stanislaw Lem", categoryId=None)
        added = []
        mock_db_session.add.side_effect = added.append

        async def execute(statement, *args):
            return make_result(first=(added[0], None))

        mock_db_session.execute = AsyncMock(side_effect=execute)

        result = await self.service.create_book(mock_db_session, payload)

        assert result.category is None
        assert result.category_id is None
        # Only the refetch; no existence check
        assert mock_db_session.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_create_with_missing_category(self, mock_db_session):
        missing = uuid4()
        payload = BookCreate(title="Dune", author="Frank Herbert", categoryId=missing)
        mock_db_session.execute.return_value = make_result(scalar=None)

        with pytest.raises(NotFoundError) as exc_info:
            await self.service.create_book(mock_db_session, payload)

        assert str(missing) in exc_info.value.message
        mock_db_session.add.assert_not_called()
        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_flush_failure(self, mock_db_session):
        payload = BookCreate(title="Dune", author="Frank Herbert")
        mock_db_session.flush.side_effect = OperationalError("INSERT", {}, Exception("down"))

        with pytest.raises(DatabaseError):
            await self.service.create_book(mock_db_session, payload)


class TestBookServiceUpdate:

    def setup_method(self):
        self.service = BookService()

    @pytest.mark.asyncio
    async def test_empty_update_returns_unchanged(self, mock_db_session, dune, scifi_category):
        mock_db_session.execute.return_value = make_result(first=(dune, scifi_category))

        result = await self.service.update_book(mock_db_session, dune.id, BookUpdate())

        assert result.title == dune.title
        assert result.category_id == scifi_category.id
        # Only the fetch; no UPDATE
        mock_db_session.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_null_category_clears_without_check(self, mock_db_session, dune):
        mock_db_session.execute = AsyncMock(side_effect=[
            make_result(scalar=dune.id),
            make_result(first=(dune, None)),
        ])

        payload = BookUpdate.model_validate({"categoryId": None})
        result = await self.service.update_book(mock_db_session, dune.id, payload)

        assert mock_db_session.execute.await_count == 2
        update_stmt = mock_db_session.execute.await_args_list[0].args[0]
        assert update_stmt.is_update
        assert result.category is None

    @pytest.mark.asyncio
    async def test_new_category_is_checked(self, mock_db_session, orphan_book, scifi_category):
        mock_db_session.execute = AsyncMock(side_effect=[
            make_result(scalar=scifi_category.id),
            make_result(scalar=orphan_book.id),
            make_result(first=(orphan_book, scifi_category)),
        ])

        payload = BookUpdate.model_validate({"categoryId": str(scifi_category.id)})
        result = await self.service.update_book(mock_db_session, orphan_book.id, payload)

        assert mock_db_session.execute.await_count == 3
        assert result.category.name == "Science Fiction"

    @pytest.mark.asyncio
    async def test_missing_category_stops_update(self, mock_db_session, dune):
        mock_db_session.execute.return_value = make_result(scalar=None)

        payload = BookUpdate.model_validate({"categoryId": str(uuid4())})
        with pytest.raises(NotFoundError):
            await self.service.update_book(mock_db_session, dune.id, payload)

        mock_db_session.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_book(self, mock_db_session):
        mock_db_session.execute.return_value = make_result(scalar=None)

        with pytest.raises(NotFoundError):
            await self.service.update_book(mock_db_session, uuid4(), BookUpdate(title="New"))


class TestBookServiceDelete:

    def setup_method(self):
        self.service = BookService()

    @pytest.mark.asyncio
    async def test_delete_returns_deleted_book(self, mock_db_session, dune, scifi_category):
        mock_db_session.execute = AsyncMock(side_effect=[
            make_result(first=(dune, scifi_category)),
            make_result(scalar=dune.id),
        ])

        result = await self.service.delete_book(mock_db_session, dune.id)

        assert result.message == "Book deleted"
        assert result.book.id == dune.id
        assert result.book.category.name == "Science Fiction"

    @pytest.mark.asyncio
    async def test_delete_unknown(self, mock_db_session):
        mock_db_session.execute.return_value = make_result(first=None)

        with pytest.raises(NotFoundError):
            await self.service.delete_book(mock_db_session, uuid4())

        mock_db_session.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_raced_away(self, mock_db_session, dune):
        mock_db_session.execute = AsyncMock(side_effect=[
            make_result(first=(dune, None)),
            make_result(scalar=None),
        ])

        with pytest.raises(NotFoundError):
            await self.service.delete_book(mock_db_session, dune.id)
