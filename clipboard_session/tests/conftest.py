"""Shared fixtures for clipboard session tests."""

import pytest
from unittest.mock import AsyncMock, Mock

from clipboard_session.core.config import SessionConfig
from clipboard_session.core.editing_lock import EditingLock
from clipboard_session.core.entry_store import EntryListStore
from clipboard_session.models.schemas import DeleteResult
from clipboard_session.tests.factories import FakeScheduler


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def lock(scheduler):
    return EditingLock(timeout_ms=3000, scheduler=scheduler)


@pytest.fixture
def mock_host():
    """Host collaborator with successful async responses."""
    host = Mock()
    host.delete_entry = AsyncMock(
        return_value=DeleteResult(success=True, message="deleted")
    )
    host.clear_all = AsyncMock(
        return_value=DeleteResult(success=True, message="All clipboard entries cleared")
    )
    host.confirm = AsyncMock(return_value=True)
    return host


@pytest.fixture
def store(mock_host, lock):
    return EntryListStore(mock_host, lock)


@pytest.fixture
def session_config():
    return SessionConfig(edit_timeout_ms=3000, history_limit=20, auto_validate=True)
