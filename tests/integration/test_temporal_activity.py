"""Integration tests for the populate_case_graph activity."""

import pydantic
import pytest
from temporalio.testing import ActivityEnvironment

from casegraph.models.case_models import InconsistencyKind
from casegraph.repositories.memory_store import InMemoryGraphStore
from casegraph.temporal import activities
from casegraph.temporal.activities import populate_case_graph


class TestPopulateCaseGraphActivity:
    """Runs the activity in a test environment against the in-memory store."""

    @pytest.fixture
    def memory_store(self, monkeypatch):
        store = InMemoryGraphStore()
        monkeypatch.setattr(activities, "build_store", lambda: store)
        return store

    @pytest.mark.asyncio
    async def test_returns_serialized_result(
        self, memory_store, case_id, alibi_home_document, alibi_friend_document
    ):
        """Test the activity accepts and returns plain data."""
        payload = [alibi_home_document.model_dump(mode="json"), alibi_friend_document.model_dump(mode="json")]

        result = await ActivityEnvironment().run(populate_case_graph, str(case_id), payload)

        assert result["case_id"] == str(case_id)
        assert result["alibis_created"] == 2
        assert [i["kind"] for i in result["inconsistencies"]] == [InconsistencyKind.LOCATION.value]
        assert len(await memory_store.get_alibis(case_id)) == 2

    @pytest.mark.asyncio
    async def test_retry_is_idempotent(self, memory_store, case_id, interview_document):
        payload = [interview_document.model_dump(mode="json")]
        env = ActivityEnvironment()

        first = await env.run(populate_case_graph, str(case_id), payload)
        second = await env.run(populate_case_graph, str(case_id), payload)

        assert first["entities_created"] == 1
        assert second["entities_created"] == 0
        assert second["events_created"] == 0
        assert len(await memory_store.get_entities(case_id)) == 1

    @pytest.mark.asyncio
    async def test_invalid_payload_raises(self, memory_store, case_id):
        with pytest.raises(pydantic.ValidationError):
            await ActivityEnvironment().run(populate_case_graph, str(case_id), [{"raw_text": "no id"}])
