"""Unit tests for the S3 session store."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from video_analytics.domain.entities import SessionLocation
from video_analytics.domain.errors import StorageError
from video_analytics.infrastructure.storage.s3_session_store import S3SessionStore

OBJECT_KEY = "analytics/analytics-sessions.json"


def document():
    return {
        "sessions": [
            {"session_id": "a", "ip_address": "1.1.1.1", "created_at": "2025-01-01T08:00:00Z", "language": "fr-FR"},
            {"session_id": "b", "ip_address": "2.2.2.2", "created_at": "2025-01-15T23:59:00Z", "language": "en-US"},
            {
                "session_id": "c",
                "ip_address": "1.1.1.1",
                "created_at": "2025-01-20T10:00:00Z",
                "language": "fr-FR",
                "is_test_data": True,
            },
            {"session_id": "d", "ip_address": "3.3.3.3", "created_at": "2025-02-01T00:00:00Z", "language": "en-US"},
        ]
    }


@pytest.fixture
def s3_io():
    s3 = MagicMock()
    s3.object_exists = AsyncMock(return_value=True)
    s3.get_json = AsyncMock(side_effect=lambda key: document())
    s3.put_json = AsyncMock()
    return s3


@pytest.fixture
def store(s3_io):
    return S3SessionStore(s3_io, OBJECT_KEY)


@pytest.mark.asyncio
async def test_sessions_in_window_exclude_test_data(store):
    """Test window is inclusive and test data is excluded by default."""
    sessions = await store.get_analytics_sessions("2025-01-01", "2025-01-31")

    assert [s.session_id for s in sessions] == ["a", "b"]


@pytest.mark.asyncio
async def test_sessions_include_production(store):
    """Test include_production keeps test-data sessions."""
    sessions = await store.get_analytics_sessions("2025-01-01", "2025-01-31", include_production=True)

    assert [s.session_id for s in sessions] == ["a", "b", "c"]
    assert sessions[2].is_test_data


@pytest.mark.asyncio
async def test_sessions_language_filter(store):
    """Test exact language match."""
    sessions = await store.get_analytics_sessions("2025-01-01", "2025-02-28", language="en-US")

    assert [s.session_id for s in sessions] == ["b", "d"]


@pytest.mark.asyncio
async def test_missing_document_returns_no_sessions(store, s3_io):
    """Test a missing document is treated as empty."""
    s3_io.object_exists = AsyncMock(return_value=False)

    assert await store.get_analytics_sessions("2025-01-01", "2025-01-31") == []
    s3_io.get_json.assert_not_called()


@pytest.mark.asyncio
async def test_storage_error_is_not_read_as_missing_document(store, s3_io):
    """Test a failed existence check propagates instead of returning no sessions."""
    s3_io.object_exists = AsyncMock(side_effect=StorageError("Failed to check S3 object: AccessDenied"))

    with pytest.raises(StorageError, match="AccessDenied"):
        await store.get_analytics_sessions("2025-01-01", "2025-01-31")


@pytest.mark.asyncio
async def test_update_session_location_updates_every_matching_session(store, s3_io):
    """Test all sessions with the IP are updated and the document rewritten."""
    updated = await store.update_session_location("1.1.1.1", SessionLocation("France", "Ile-de-France", "Paris"))

    assert updated == 2
    s3_io.put_json.assert_awaited_once()
    key, written = s3_io.put_json.call_args[0]
    assert key == OBJECT_KEY
    located = [s for s in written["sessions"] if s.get("country") == "France"]
    assert [s["session_id"] for s in located] == ["a", "c"]
    assert all(s["city"] == "Paris" and s["updated_at"] for s in located)


@pytest.mark.asyncio
async def test_update_session_location_unknown_ip(store, s3_io):
    """Test nothing is written when no session has the IP."""
    updated = await store.update_session_location("9.9.9.9", SessionLocation("Spain", "Madrid", "Madrid"))

    assert updated == 0
    s3_io.put_json.assert_not_called()
