"""
Book Catalog Backend — Session Dependency Tests
===============================================

What:  get_db_session commits on success and rolls back when the handler fails.
How:   A fake request whose app.state carries a mocked session factory.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from bookcatalog.database import get_db_session


def fake_request(session):
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=session)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(session_factory=factory)))


@pytest.mark.asyncio
async def test_commits_on_success(mock_db_session):
    dependency = get_db_session(fake_request(mock_db_session))

    assert await dependency.__anext__() is mock_db_session
    with pytest.raises(StopAsyncIteration):
        await dependency.__anext__()

    mock_db_session.commit.assert_awaited_once()
    mock_db_session.rollback.assert_not_awaited()
    mock_db_session.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_rolls_back_on_error(mock_db_session):
    dependency = get_db_session(fake_request(mock_db_session))
    await dependency.__anext__()

    with pytest.raises(RuntimeError):
        await dependency.athrow(RuntimeError("handler failed"))

    mock_db_session.commit.assert_not_awaited()
    mock_db_session.rollback.assert_awaited_once()
    mock_db_session.close.assert_awaited_once()
