"""Unit tests for EventBuilder."""

from datetime import datetime, timezone

import pytest

from casegraph.models.case_models import (
    Candidate,
    CandidateCategory,
    ConnectionConfidence,
    EventType,
    TimePrecision,
)
from casegraph.services.timeline.event_builder import ASSOCIATED_WITH, LOCATED_AT, EventBuilder


def _at(text: str, found: str, category: CandidateCategory, normalized: str = None, document_id: str = "doc-1", **attributes):
    start = text.index(found)
    return Candidate(
        category=category,
        original_text=found,
        normalized_value=normalized or found,
        confidence_score=90,
        source_document_id=document_id,
        start=start,
        end=start + len(found),
        attributes=attributes,
    )


@pytest.fixture
def builder():
    return EventBuilder(context_radius=150)


class TestEventDrafts:

    def test_sighting_with_exact_time(self, builder):
        """Test date, clock, participants and place combine into one event."""
        text = "Witness Maria Lopez saw Mark Evans on 03/15/2024 at 9:45 pm near 123 Main Street."
        candidates = [
            _at(text, "03/15/2024", CandidateCategory.DATE, "2024-03-15", kind="date", parsed=True),
            _at(text, "9:45 pm", CandidateCategory.DATE, kind="time"),
            _at(text, "Maria Lopez", CandidateCategory.PERSON, role="witness"),
            _at(text, "Mark Evans", CandidateCategory.PERSON),
            _at(text, "123 Main Street", CandidateCategory.LOCATION),
        ]

        events, connections = builder.build(text, "doc-1", candidates)

        assert len(events) == 1
        event = events[0]
        assert event.event_type == EventType.SIGHTING
        assert event.event_time == datetime(2024, 3, 15, 21, 45, tzinfo=timezone.utc)
        assert event.time_precision == TimePrecision.EXACT
        assert event.participant_names == ["Maria Lopez", "Mark Evans"]
        assert event.location == "123 Main Street"
        assert event.confidence_score == 90
        assert event.source_document_id == "doc-1"
        assert event.description == text
        assert event.title.endswith("...")

        assert [(c.from_name, c.to_name, c.connection_type) for c in connections] == [
            ("Maria Lopez", "Mark Evans", ASSOCIATED_WITH),
            ("Maria Lopez", "123 Main Street", LOCATED_AT),
            ("Mark Evans", "123 Main Street", LOCATED_AT),
        ]
        assert all(c.confidence == ConnectionConfidence.POSSIBLE for c in connections)

    def test_date_without_clock_is_approximate(self, builder):
        """Test a bare date gives midnight, approximate, and a lower score."""
        text = "The store closed on 03/15/2024."
        candidates = [_at(text, "03/15/2024", CandidateCategory.DATE, "2024-03-15", kind="date", parsed=True)]

        events, connections = builder.build(text, "doc-1", candidates)

        assert events[0].event_time == datetime(2024, 3, 15, tzinfo=timezone.utc)
        assert events[0].time_precision == TimePrecision.APPROXIMATE
        assert events[0].confidence_score == 70
        assert events[0].event_type == EventType.OTHER
        assert connections == []

    def test_hedged_time_is_approximate(self, builder):
        text = "John Smith left around 03/15/2024 at 8 pm."
        candidates = [
            _at(text, "03/15/2024", CandidateCategory.DATE, "2024-03-15", kind="date", parsed=True),
            _at(text, "8 pm", CandidateCategory.DATE, kind="time"),
            _at(text, "John Smith", CandidateCategory.PERSON),
        ]

        events, _ = builder.build(text, "doc-1", candidates)

        assert events[0].time_precision == TimePrecision.APPROXIMATE
        assert events[0].event_type == EventType.SUSPECT_MOVEMENT

    def test_estimated_time(self, builder):
        text = "The estimated time of death was 03/15/2024 at 11 pm."
        candidates = [
            _at(text, "03/15/2024", CandidateCategory.DATE, "2024-03-15", kind="date", parsed=True),
            _at(text, "11 pm", CandidateCategory.DATE, kind="time"),
        ]

        events, _ = builder.build(text, "doc-1", candidates)

        assert events[0].time_precision == TimePrecision.ESTIMATED
        assert events[0].event_time == datetime(2024, 3, 15, 23, 0, tzinfo=timezone.utc)

    def test_relative_date_has_unknown_time(self, builder):
        """Test relative expressions keep the event but leave the time unset."""
        text = "Mark Evans said he met John Smith last Tuesday."
        candidates = [
            _at(text, "last Tuesday", CandidateCategory.DATE, kind="relative", parsed=False),
            _at(text, "Mark Evans", CandidateCategory.PERSON),
            _at(text, "John Smith", CandidateCategory.PERSON),
        ]

        events, connections = builder.build(text, "doc-1", candidates)

        assert events[0].event_time is None
        assert events[0].time_precision == TimePrecision.UNKNOWN
        assert len(connections) == 1

    @pytest.mark.parametrize(
        "sentence,expected",
        [
            ("Mark Evans made a phone call on 03/15/2024.", EventType.PHONE_CALL),
            ("A knife was recovered on 03/15/2024.", EventType.EVIDENCE_FOUND),
            ("Mark Evans paid cash on 03/15/2024.", EventType.TRANSACTION),
            ("John Smith was interviewed on 03/15/2024.", EventType.WITNESS_ACCOUNT),
            ("Mark Evans claimed he drove home on 03/15/2024.", EventType.SUSPECT_MOVEMENT),
        ],
    )
    def test_event_type_keywords(self, builder, sentence, expected):
        candidates = [_at(sentence, "03/15/2024", CandidateCategory.DATE, "2024-03-15", kind="date", parsed=True)]

        events, _ = builder.build(sentence, "doc-1", candidates)

        assert events[0].event_type == expected

    def test_victim_participant_sets_event_type(self, builder):
        text = "Anna Bell was at home on 03/15/2024."
        candidates = [
            _at(text, "03/15/2024", CandidateCategory.DATE, "2024-03-15", kind="date", parsed=True),
            _at(text, "Anna Bell", CandidateCategory.PERSON, role="victim"),
        ]

        events, _ = builder.build(text, "doc-1", candidates)

        assert events[0].event_type == EventType.VICTIM_ACTION

    def test_people_outside_window_ignored(self):
        """Test only people near the date become participants."""
        builder = EventBuilder(context_radius=20)
        text = "Mark Evans was interviewed. " + "Nothing else happened. " * 5 + "On 03/15/2024 Maria Lopez called."
        candidates = [
            _at(text, "03/15/2024", CandidateCategory.DATE, "2024-03-15", kind="date", parsed=True),
            _at(text, "Mark Evans", CandidateCategory.PERSON),
            _at(text, "Maria Lopez", CandidateCategory.PERSON),
        ]

        events, _ = builder.build(text, "doc-1", candidates)

        assert events[0].participant_names == ["Maria Lopez"]
        assert events[0].event_type == EventType.PHONE_CALL

    def test_other_document_candidates_ignored(self, builder):
        text = "On 03/15/2024 Maria Lopez called."
        candidates = [
            _at(text, "03/15/2024", CandidateCategory.DATE, "2024-03-15", document_id="doc-2", kind="date", parsed=True),
        ]

        events, connections = builder.build(text, "doc-1", candidates)

        assert events == []
        assert connections == []
