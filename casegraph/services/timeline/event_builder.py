"""Timeline event and relationship building from co-occurring candidates.

Every date mention becomes one event. The people mentioned within a fixed
character window of the date are its participants, the nearest place is
its location, and a clock time in the same window sets the time of day.
"""

import re
from datetime import date
from typing import List, Optional, Tuple

from casegraph.models.case_models import (
    Candidate,
    CandidateCategory,
    ConnectionConfidence,
    ConnectionDraft,
    EntityType,
    EventDraft,
    EventType,
    TimePrecision,
)
from casegraph.services.extraction.base_extractor import clamp_confidence
from casegraph.utils.datetime_utils import combine_date_time, parse_time_text
from casegraph.utils.logging import get_logger

LOGGER = get_logger(__name__)

ASSOCIATED_WITH = "associated_with"
LOCATED_AT = "located_at"

_SENTENCE_BREAKS = ".!?\n"


class EventBuilder:
    """Builds event and connection drafts for one document.

    Attributes:
        context_radius: Characters on each side of a date searched for
            participants, times and locations
    """

    # Checked in order; the first group with a keyword in the sentence wins.
    EVENT_TYPE_KEYWORDS: List[Tuple[EventType, Tuple[str, ...]]] = [
        (EventType.PHONE_CALL, ("call", "called", "phone", "phoned", "texted", "voicemail")),
        (EventType.SIGHTING, ("saw", "seen", "spotted", "sighted", "observed", "sighting")),
        (EventType.EVIDENCE_FOUND, ("found", "recovered", "discovered", "collected", "evidence")),
        (EventType.TRANSACTION, ("transaction", "purchase", "purchased", "paid", "withdrew", "withdrawal", "deposit")),
        (EventType.WITNESS_ACCOUNT, ("interview", "interviewed", "statement", "stated", "testified", "told")),
    ]
    SUSPECT_MOVEMENT_KEYWORDS = ("alibi", "claimed", "fled", "left", "arrived", "drove", "went")
    HEDGE_PATTERN = re.compile(r"\b(around|about|approximately|approx\.?|roughly|circa|sometime|shortly)\b", re.IGNORECASE)
    ESTIMATE_PATTERN = re.compile(r"\b(estimated?|estimation)\b", re.IGNORECASE)
    TITLE_LENGTH = 80

    def __init__(self, context_radius: int = 150):
        self.context_radius = context_radius

    def build(
        self, text: str, document_id: str, candidates: List[Candidate]
    ) -> Tuple[List[EventDraft], List[ConnectionDraft]]:
        """Build drafts from a document's candidates.

        Args:
            text: Normalized document text the candidate offsets refer to
            document_id: Source document identifier
            candidates: Candidates of every category for this document

        Returns:
            (event drafts, connection drafts)
        """
        local = [c for c in candidates if c.source_document_id == document_id]
        dates = [c for c in local if c.category == CandidateCategory.DATE and c.attributes.get("kind") in ("date", "relative")]
        times = [c for c in local if c.category == CandidateCategory.DATE and c.attributes.get("kind") == "time"]
        people = [c for c in local if c.category == CandidateCategory.PERSON]
        places = [c for c in local if c.category == CandidateCategory.LOCATION]

        events: List[EventDraft] = []
        connections: List[ConnectionDraft] = []
        for date_candidate in sorted(dates, key=lambda c: c.start):
            event, participants, location = self._build_event(text, document_id, date_candidate, times, people, places)
            events.append(event)
            connections.extend(self._connections(participants, location, date_candidate))

        LOGGER.debug(
            f"Built {len(events)} events and {len(connections)} connections",
            extra={"document_id": document_id},
        )
        return events, connections

    def _build_event(
        self,
        text: str,
        document_id: str,
        date_candidate: Candidate,
        times: List[Candidate],
        people: List[Candidate],
        places: List[Candidate],
    ) -> Tuple[EventDraft, List[Candidate], Optional[Candidate]]:
        window_start = date_candidate.start - self.context_radius
        window_end = date_candidate.end + self.context_radius

        participants = self._participants(people, window_start, window_end)
        location = self._nearest(places, date_candidate, window_start, window_end)
        time_candidate = self._nearest(times, date_candidate, window_start, window_end)

        sentence = self._sentence(text, date_candidate.start, date_candidate.end)
        clock_text = date_candidate.attributes.get("time") or (time_candidate.normalized_value if time_candidate else None)
        event_time, precision = self._resolve_time(date_candidate, clock_text, sentence)

        confidence = date_candidate.confidence_score
        if not participants:
            confidence -= 10
        if clock_text is None:
            confidence -= 10

        event = EventDraft(
            title=self._title(sentence),
            description=sentence,
            event_type=self._event_type(sentence, participants),
            event_time=event_time,
            time_precision=precision,
            location=location.normalized_value if location else None,
            participant_names=[p.normalized_value for p in participants],
            confidence_score=clamp_confidence(confidence),
            source_document_id=document_id,
        )
        return event, participants, location

    @staticmethod
    def _participants(people: List[Candidate], window_start: int, window_end: int) -> List[Candidate]:
        seen = set()
        participants = []
        for person in sorted(people, key=lambda c: c.start):
            if person.start < window_start or person.end > window_end:
                continue
            key = person.normalized_value.lower()
            if key in seen:
                continue
            seen.add(key)
            participants.append(person)
        return participants

    @staticmethod
    def _nearest(
        pool: List[Candidate], anchor: Candidate, window_start: int, window_end: int
    ) -> Optional[Candidate]:
        inside = [c for c in pool if c.start >= window_start and c.end <= window_end]
        if not inside:
            return None
        anchor_mid = (anchor.start + anchor.end) / 2
        return min(inside, key=lambda c: (abs((c.start + c.end) / 2 - anchor_mid), c.start))

    def _resolve_time(self, date_candidate: Candidate, clock_text: Optional[str], sentence: str):
        """Combine date and time into an instant and pick its precision."""
        if not date_candidate.attributes.get("parsed"):
            return None, TimePrecision.UNKNOWN
        try:
            day = date.fromisoformat(date_candidate.normalized_value)
        except ValueError:
            return None, TimePrecision.UNKNOWN

        clock = parse_time_text(clock_text) if clock_text else None
        event_time = combine_date_time(day, clock)

        if self.ESTIMATE_PATTERN.search(sentence):
            return event_time, TimePrecision.ESTIMATED
        if clock is None or self.HEDGE_PATTERN.search(sentence):
            return event_time, TimePrecision.APPROXIMATE
        return event_time, TimePrecision.EXACT

    def _event_type(self, sentence: str, participants: List[Candidate]) -> EventType:
        lowered = sentence.lower()
        for event_type, keywords in self.EVENT_TYPE_KEYWORDS:
            if any(re.search(r"\b" + re.escape(keyword) + r"\b", lowered) for keyword in keywords):
                return event_type
        if any(p.attributes.get("role") == "victim" for p in participants):
            return EventType.VICTIM_ACTION
        if any(re.search(r"\b" + keyword + r"\b", lowered) for keyword in self.SUSPECT_MOVEMENT_KEYWORDS):
            return EventType.SUSPECT_MOVEMENT
        return EventType.OTHER

    @staticmethod
    def _sentence(text: str, start: int, end: int) -> str:
        sentence_start = max(text.rfind(mark, 0, start) for mark in _SENTENCE_BREAKS) + 1
        ends = [pos for pos in (text.find(mark, end) for mark in _SENTENCE_BREAKS) if pos != -1]
        sentence_end = min(ends) + 1 if ends else len(text)
        return " ".join(text[sentence_start:sentence_end].split())

    def _title(self, sentence: str) -> str:
        if len(sentence) <= self.TITLE_LENGTH:
            return sentence
        cut = sentence[: self.TITLE_LENGTH].rsplit(" ", 1)[0]
        return cut.rstrip(",;:") + "..."

    @staticmethod
    def _connections(
        participants: List[Candidate], location: Optional[Candidate], date_candidate: Candidate
    ) -> List[ConnectionDraft]:
        connections: List[ConnectionDraft] = []
        names = sorted({p.normalized_value for p in participants}, key=str.lower)
        for i, first in enumerate(names):
            for second in names[i + 1:]:
                connections.append(
                    ConnectionDraft(
                        from_name=first,
                        to_name=second,
                        from_type=EntityType.PERSON,
                        to_type=EntityType.PERSON,
                        connection_type=ASSOCIATED_WITH,
                        description=f"Mentioned together near {date_candidate.original_text}",
                        confidence=ConnectionConfidence.POSSIBLE,
                    )
                )
        if location is not None:
            for name in names:
                connections.append(
                    ConnectionDraft(
                        from_name=name,
                        to_name=location.normalized_value,
                        from_type=EntityType.PERSON,
                        to_type=EntityType.LOCATION,
                        connection_type=LOCATED_AT,
                        description=f"Placed here near {date_candidate.original_text}",
                        confidence=ConnectionConfidence.POSSIBLE,
                    )
                )
        return connections
