"""Unit tests for PersistenceAdapter retry and timeout handling."""

import asyncio
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest

from casegraph.core.exceptions import PersistenceError, StoreError
from casegraph.models.case_models import Entity, EntityType, UpsertResult
from casegraph.pipeline.persistence import PersistenceAdapter
from casegraph.utils.dedup_keys import entity_key


@pytest.fixture
def mock_store():
    """Create mock graph store."""
    store = Mock()
    store.get_entities = AsyncMock(return_value=[])
    store.upsert_entity = AsyncMock()
    store.get_alibis = AsyncMock(return_value=[])
    return store


@pytest.fixture
def adapter(mock_store):
    return PersistenceAdapter(mock_store, timeout_seconds=1.0, max_retries=3, retry_delay=0)


class TestPersistenceAdapter:

    @pytest.mark.asyncio
    async def test_transient_failure_retried(self, adapter, mock_store):
        """Test a store error followed by success returns the result."""
        mock_store.get_entities.side_effect = [StoreError("connection reset"), []]

        assert await adapter.get_entities(uuid4()) == []
        assert mock_store.get_entities.await_count == 2

    @pytest.mark.asyncio
    async def test_persistent_failure_raises(self, adapter, mock_store):
        """Test exhausting the retries raises PersistenceError."""
        mock_store.get_entities.side_effect = StoreError("database down")

        with pytest.raises(PersistenceError) as exc_info:
            await adapter.get_entities(uuid4())

        assert mock_store.get_entities.await_count == 3
        assert isinstance(exc_info.value.original_error, StoreError)

    @pytest.mark.asyncio
    async def test_timeout_counts_as_failure(self, mock_store):
        async def hang(case_id):
            await asyncio.sleep(5)

        mock_store.get_alibis = AsyncMock(side_effect=hang)
        adapter = PersistenceAdapter(mock_store, timeout_seconds=0.01, max_retries=2, retry_delay=0)

        with pytest.raises(PersistenceError):
            await adapter.get_alibis(uuid4())

        assert mock_store.get_alibis.await_count == 2

    @pytest.mark.asyncio
    async def test_programming_errors_not_retried(self, adapter, mock_store):
        mock_store.get_entities.side_effect = ValueError("bad argument")

        with pytest.raises(ValueError):
            await adapter.get_entities(uuid4())

        assert mock_store.get_entities.await_count == 1

    @pytest.mark.asyncio
    async def test_upsert_passes_dedup_key(self, adapter, mock_store):
        """Test the entity key is computed from name and type."""
        entity = Entity(case_id=uuid4(), entity_type=EntityType.PERSON, name="John Smith")
        mock_store.upsert_entity.return_value = UpsertResult(id=entity.id, created=True)

        result = await adapter.upsert_entity(entity)

        assert result.created is True
        mock_store.upsert_entity.assert_awaited_once_with(entity_key("John Smith", "person"), entity)
