"""Unit tests for the language-model candidate source."""

import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from casegraph.core.base_llm_client import BaseLLMClient
from casegraph.core.exceptions import APIClientError, ExtractionError
from casegraph.models.case_models import (
    CandidateCategory,
    ConnectionConfidence,
    DocumentType,
    EventType,
    TimePrecision,
)
from casegraph.services.extraction.llm_extractor import LLMCandidateSource

DOCUMENT = "Jane Doe told Detective Ray she was at the Blue Moon Bar with Mark Evans."


@pytest.fixture
def mock_client():
    """Create mock LLM client."""
    client = Mock(spec=BaseLLMClient)
    client.complete = AsyncMock()
    return client


@pytest.fixture
def source(mock_client):
    return LLMCandidateSource(mock_client, max_input_chars=500)


def _response(**sections) -> str:
    payload = {"entities": [], "events": [], "connections": [], "alibis": []}
    payload.update(sections)
    return json.dumps(payload)


class TestLLMCandidateSource:
    """Mapping model answers onto candidates and drafts."""

    @pytest.mark.asyncio
    async def test_maps_all_sections(self, source, mock_client):
        """Test entities, events, connections and alibis are mapped."""
        mock_client.complete.return_value = _response(
            entities=[
                {"name": "Jane Doe", "type": "person", "role": "Suspect", "confidence": 88},
                {"name": "Blue Moon Bar", "type": "location", "confidence": "75"},
                {"name": "Tuesday", "type": "date"},
            ],
            events=[
                {
                    "title": "Jane at the bar",
                    "event_time": "2024-03-15T21:00:00Z",
                    "time_precision": "exact",
                    "event_type": "sighting",
                    "location": "Blue Moon Bar",
                    "participants": ["Jane Doe", "Mark Evans"],
                    "confidence": 70,
                }
            ],
            connections=[{"from": "Jane Doe", "to": "Mark Evans", "type": "Friend Of", "confidence": "probable"}],
            alibis=[
                {
                    "subject": "Jane Doe",
                    "location": "Blue Moon Bar",
                    "start_time": "2024-03-15T21:00:00Z",
                    "end_time": "2024-03-15T23:00:00Z",
                    "corroborators": ["Mark Evans"],
                    "confidence": 140,
                }
            ],
        )

        bundle = await source.extract("doc-1", DOCUMENT, DocumentType.INTERVIEW)

        assert bundle.source == "llm"
        assert bundle.document_type == DocumentType.INTERVIEW
        assert [c.normalized_value for c in bundle.candidates] == ["Jane Doe", "Blue Moon Bar"]
        assert bundle.candidates[0].category == CandidateCategory.PERSON
        assert bundle.candidates[0].attributes["role"] == "suspect"
        assert bundle.candidates[1].confidence_score == 75
        assert DOCUMENT[bundle.candidates[1].start:bundle.candidates[1].end] == "Blue Moon Bar"

        event = bundle.events[0]
        assert event.event_type == EventType.SIGHTING
        assert event.event_time == datetime(2024, 3, 15, 21, 0, tzinfo=timezone.utc)
        assert event.time_precision == TimePrecision.EXACT
        assert event.participant_names == ["Jane Doe", "Mark Evans"]

        connection = bundle.connections[0]
        assert connection.connection_type == "friend_of"
        assert connection.confidence == ConnectionConfidence.PROBABLE

        alibi = bundle.alibis[0]
        assert alibi.subject_name == "Jane Doe"
        assert alibi.confidence_score == 100
        assert alibi.alibi_end == datetime(2024, 3, 15, 23, 0, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_unparseable_event_time_is_unknown(self, source, mock_client):
        """Test a free-text event time gives no instant and unknown precision."""
        mock_client.complete.return_value = _response(
            events=[{"title": "Argument", "event_time": "sometime last week", "time_precision": "exact"}]
        )

        bundle = await source.extract("doc-1", DOCUMENT, DocumentType.INTERVIEW)

        assert bundle.events[0].event_time is None
        assert bundle.events[0].time_precision == TimePrecision.UNKNOWN

    @pytest.mark.asyncio
    async def test_fenced_json_accepted(self, source, mock_client):
        """Test markdown fences around the answer are tolerated."""
        mock_client.complete.return_value = "```json\n" + _response(
            entities=[{"name": "Mark Evans", "type": "person"}]
        ) + "\n```"

        bundle = await source.extract("doc-1", DOCUMENT, DocumentType.INTERVIEW)

        assert [c.normalized_value for c in bundle.candidates] == ["Mark Evans"]
        assert bundle.candidates[0].confidence_score == 70

    @pytest.mark.asyncio
    async def test_api_failure_raises_extraction_error(self, source, mock_client):
        """Test client errors surface as ExtractionError."""
        mock_client.complete.side_effect = APIClientError("rate limited")

        with pytest.raises(ExtractionError):
            await source.extract("doc-1", DOCUMENT, DocumentType.INTERVIEW)

    @pytest.mark.asyncio
    async def test_non_json_answer_raises_extraction_error(self, source, mock_client):
        """Test prose answers are rejected."""
        mock_client.complete.return_value = "I could not find anything relevant."

        with pytest.raises(ExtractionError):
            await source.extract("doc-1", DOCUMENT, DocumentType.INTERVIEW)

    @pytest.mark.asyncio
    async def test_prompt_truncated_to_input_limit(self, source, mock_client):
        """Test long documents are cut before they are sent."""
        mock_client.complete.return_value = _response()

        await source.extract("doc-1", "x" * 2000, DocumentType.GENERAL_DOCUMENT)

        _, user_prompt = mock_client.complete.call_args[0]
        assert "x" * 500 in user_prompt
        assert "x" * 501 not in user_prompt
