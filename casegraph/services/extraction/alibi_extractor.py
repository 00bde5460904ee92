"""First-person alibi claim extraction from interviews and statements.

A document yields at most one alibi draft: the subject is taken from the
document header ("Interviewee: Jane Doe"), and the claimed location,
activity, time window and corroborators are gathered from the subject's
first-person sentences.
"""

import re
from datetime import date, timedelta
from typing import List, Optional, Tuple

from casegraph.models.case_models import AlibiDraft, Candidate
from casegraph.services.extraction.person_extractor import STOP_TOKENS, is_likely_person_name
from casegraph.utils.datetime_utils import combine_date_time, parse_time_text
from casegraph.utils.logging import get_logger

LOGGER = get_logger(__name__)

_TIME = r"(\d{1,2}(?::\d{2})?\s*(?:[ap]\.?m\.?)?|midnight|noon)"
_BOUNDARY = r"(?=\s+(?:from|between|until|till|with|when|around|about|all|during|on|that|since|\w+ing)\b|\s+at\s+\d|[,.;!?\n]|$)"


class AlibiClaimExtractor:
    """Builds an AlibiDraft from first-person whereabouts claims."""

    SUBJECT_PATTERN = (
        r"^[ \t]*(?:Interviewee|Subject|Witness|Name|Statement\s+of|Statement\s+by|Interview\s+of|Interview\s+with)"
        r"\s*[:\-]?\s*(?:(?:Mr|Mrs|Ms|Miss|Dr)\.?\s+)?([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+){1,2})"
    )
    LOCATION_PATTERNS = [
        r"\bI\s+(?:was|stayed|remained)\s+(?:at|in|inside)\s+(?:the\s+|my\s+)?(.+?)" + _BOUNDARY,
        r"\bI\s+was\s+\w+ing\s+(?:at|in)\s+(?:the\s+|my\s+)?(.+?)" + _BOUNDARY,
        r"\bI\s+(?:was|stayed|remained)\s+(home)\b",
        r"\bI\s+(?:went|drove|walked)\s+(?:to|over\s+to)\s+(?:the\s+|my\s+)?(.+?)" + _BOUNDARY,
    ]
    ACTIVITY_PATTERN = (
        r"\b((?:sleeping|watching|working|eating|drinking|reading|driving|walking|shopping|cooking|studying|"
        r"playing|talking|visiting|having|resting|relaxing|waiting|sitting|cleaning|babysitting|gaming)\b"
        r"(?:\s+(?!from\b|between\b|until\b|till\b|with\b|around\b|about\b|at\b|in\b|when\b)[a-z']+){0,3})"
    )
    RANGE_PATTERN = r"\b(?:from|between)\s+" + _TIME + r"\s+(?:to|until|till|and)\s+" + _TIME
    CORROBORATOR_PATTERNS = [
        r"\bwith\s+(?:my\s+\w+\s+)?([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)?)",
        r"\b([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)?)\s+can\s+(?:confirm|verify|vouch)",
    ]
    FIRST_PERSON_PATTERN = r"\bI\s+(?:was|stayed|remained|went|drove|walked)\b"

    def __init__(self):
        self.subject_pattern = re.compile(self.SUBJECT_PATTERN, re.MULTILINE)
        self.location_patterns = [re.compile(p, re.IGNORECASE) for p in self.LOCATION_PATTERNS]
        self.activity_pattern = re.compile(self.ACTIVITY_PATTERN, re.IGNORECASE)
        self.range_pattern = re.compile(self.RANGE_PATTERN, re.IGNORECASE)
        self.corroborator_patterns = [re.compile(p) for p in self.CORROBORATOR_PATTERNS]
        self.first_person = re.compile(self.FIRST_PERSON_PATTERN)
        self.sentence_split = re.compile(r"(?<=[.!?])\s+|\n+")

    def find_subject(self, text: str) -> Optional[str]:
        for match in self.subject_pattern.finditer(text):
            name = match.group(1)
            if is_likely_person_name(name):
                return name
        return None

    def extract(self, text: str, document_id: str, date_candidates: Optional[List[Candidate]] = None) -> List[AlibiDraft]:
        """Extract the subject's alibi claim from a document.

        Args:
            text: Normalized document text
            document_id: Source document identifier
            date_candidates: Date candidates already found in the text, used to
                anchor clock times to a calendar day

        Returns:
            Zero or one AlibiDraft
        """
        if not text:
            return []
        subject = self.find_subject(text)
        if subject is None:
            return []

        dates = sorted(
            (c for c in date_candidates or [] if c.attributes.get("kind") == "date" and c.attributes.get("parsed")),
            key=lambda c: c.start,
        )

        claim_sentences: List[Tuple[int, str]] = []
        position = 0
        for sentence in self.sentence_split.split(text):
            start = text.find(sentence, position)
            position = start + len(sentence) if start >= 0 else position
            if self.first_person.search(sentence):
                claim_sentences.append((max(start, 0), sentence.strip()))

        if not claim_sentences:
            return []

        location = activity = None
        window: Tuple[Optional[str], Optional[str]] = (None, None)
        anchor: Optional[date] = None
        corroborators: List[str] = []

        for start, sentence in claim_sentences:
            if location is None:
                location = self._location(sentence)
            if activity is None:
                activity = self._activity(sentence)
            if window == (None, None):
                range_match = self.range_pattern.search(sentence)
                if range_match:
                    window = (range_match.group(1), range_match.group(2))
                    anchor = self._anchor_date(dates, start, start + len(sentence))
            for name in self._corroborators(sentence, subject):
                if name.lower() not in {n.lower() for n in corroborators}:
                    corroborators.append(name)

        if location is None and activity is None:
            return []

        alibi_start, alibi_end = self._window_instants(anchor, *window)
        statement_date = self._statement_date(dates)

        confidence = 55
        if alibi_start is not None:
            confidence += 15
        if corroborators:
            confidence += 10
        if activity:
            confidence += 5

        draft = AlibiDraft(
            subject_name=subject,
            statement_date=statement_date,
            alibi_start=alibi_start,
            alibi_end=alibi_end,
            location_claimed=location,
            activity_claimed=activity,
            full_statement=" ".join(sentence for _, sentence in claim_sentences),
            corroborator_names=corroborators,
            confidence_score=min(confidence, 100),
            source_document_id=document_id,
        )
        LOGGER.debug(
            "Extracted alibi claim",
            extra={"document_id": document_id, "subject": subject, "location": location},
        )
        return [draft]

    def _location(self, sentence: str) -> Optional[str]:
        for pattern in self.location_patterns:
            match = pattern.search(sentence)
            if match:
                value = " ".join(match.group(1).split()).strip(" '\"")
                if value:
                    return value[0].upper() + value[1:]
        return None

    def _activity(self, sentence: str) -> Optional[str]:
        match = self.activity_pattern.search(sentence)
        if not match:
            return None
        value = " ".join(match.group(1).split())
        return value[0].upper() + value[1:]

    def _corroborators(self, sentence: str, subject: str) -> List[str]:
        names = []
        for pattern in self.corroborator_patterns:
            for match in pattern.finditer(sentence):
                name = match.group(1)
                parts = name.split()
                if any(part.lower() in STOP_TOKENS for part in parts) or len(name) < 3:
                    continue
                if name.lower() == subject.lower():
                    continue
                names.append(name)
        return names

    @staticmethod
    def _anchor_date(dates: List[Candidate], start: int, end: int) -> Optional[date]:
        """Pick the date inside the sentence, else the last one mentioned before it."""
        inside = [c for c in dates if start <= c.start < end]
        before = [c for c in dates if c.start < start]
        chosen = inside[0] if inside else (before[-1] if before else None)
        return date.fromisoformat(chosen.normalized_value) if chosen else None

    @staticmethod
    def _statement_date(dates: List[Candidate]):
        for candidate in dates:
            if candidate.attributes.get("date_type") == "interview":
                return combine_date_time(date.fromisoformat(candidate.normalized_value))
        return None

    @staticmethod
    def _window_instants(anchor: Optional[date], start_text: Optional[str], end_text: Optional[str]):
        if anchor is None or start_text is None or end_text is None:
            return None, None
        start_clock = parse_time_text(start_text)
        end_clock = parse_time_text(end_text)
        meridiem = re.search(r"[ap]\.?m\.?", end_text, re.IGNORECASE)
        if start_clock is None and meridiem:
            # "from 9 to 11 pm" shares the meridiem
            start_clock = parse_time_text(f"{start_text} {meridiem.group(0)}")
        if start_clock is None or end_clock is None:
            return None, None
        alibi_start = combine_date_time(anchor, start_clock)
        alibi_end = combine_date_time(anchor, end_clock)
        if alibi_end <= alibi_start:
            # overnight claim, e.g. 10 pm to 6 am
            alibi_end += timedelta(days=1)
        return alibi_start, alibi_end
