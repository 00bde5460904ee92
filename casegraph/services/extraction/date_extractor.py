"""Date, time and relative-date extraction."""

import re
from typing import List, Optional, Tuple

from casegraph.models.case_models import Candidate, CandidateCategory
from casegraph.services.extraction.base_extractor import FactExtractor, Span
from casegraph.utils.datetime_utils import month_number, parse_time_text, safe_date

_MONTH = (
    r"(Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|Aug(?:ust)?|"
    r"Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)\.?"
)
_WEEKDAY = r"(?:Monday|Tuesday|Wednesday|Thursday|Friday|Saturday|Sunday)"


class DateExtractor(FactExtractor):
    """Extracts calendar dates, clock times and relative date expressions.

    Dates normalize to ISO ``YYYY-MM-DD``, times to ``HH:MM`` and relative
    expressions keep their text with ``parsed`` false. Slash dates are read
    month-first; when both readings are valid and differ the confidence drops.
    """

    category = CandidateCategory.DATE

    NAMED_MONTH_PATTERN = _MONTH + r"\s+(\d{1,2})(?:st|nd|rd|th)?,?\s+(\d{4})\b"
    DAY_MONTH_PATTERN = r"\b(\d{1,2})(?:st|nd|rd|th)?\s+(?:of\s+)?" + _MONTH + r",?\s+(\d{4})\b"
    ISO_PATTERN = r"\b(\d{4})-(\d{2})-(\d{2})(?:[T ](\d{2}):(\d{2})(?::\d{2})?)?\b"
    NUMERIC_PATTERN = r"\b(\d{1,2})[/-](\d{1,2})[/-](\d{4})\b"
    CLOCK_PATTERN = r"\b(\d{1,2}):(\d{2})(?::\d{2})?(?:\s*([ap])\.?m\b\.?)?"
    HOUR_MERIDIEM_PATTERN = r"\b(\d{1,2})\s*([ap])\.?m\b\.?"
    RELATIVE_PATTERN = (
        r"\b(yesterday|today|tonight|this\s+(?:morning|afternoon|evening)|"
        r"last\s+(?:night|week|month|year|" + _WEEKDAY + r")|"
        r"(?:a\s+few|two|three|several)\s+(?:days|weeks)\s+ago)\b"
    )

    CONFIDENCE = {
        "named_month": 95,
        "day_month": 95,
        "iso": 90,
        "numeric": 90,
        "numeric_ambiguous": 75,
        "time_meridiem": 85,
        "time_24h": 75,
        "relative": 50,
    }

    DATE_TYPE_KEYWORDS = [
        ("incident", ("incident", "crime", "occurred", "murder", "shooting", "robbery")),
        ("interview", ("interview", "interviewed", "statement")),
        ("arrest", ("arrest", "arrested", "custody")),
        ("report", ("report", "filed", "reported")),
    ]

    def __init__(self, context_radius: int = 100):
        super().__init__(context_radius)
        self.named_month = re.compile(r"\b" + self.NAMED_MONTH_PATTERN, re.IGNORECASE)
        self.day_month = re.compile(self.DAY_MONTH_PATTERN, re.IGNORECASE)
        self.iso = re.compile(self.ISO_PATTERN)
        self.numeric = re.compile(self.NUMERIC_PATTERN)
        self.clock = re.compile(self.CLOCK_PATTERN, re.IGNORECASE)
        self.hour_meridiem = re.compile(self.HOUR_MERIDIEM_PATTERN, re.IGNORECASE)
        self.relative = re.compile(self.RELATIVE_PATTERN, re.IGNORECASE)

    def _extract(self, text: str, document_id: str, offset: int) -> List[Candidate]:
        candidates: List[Candidate] = []
        spans: List[Span] = []

        def add(match: re.Match, normalized: str, confidence: int, **attributes) -> None:
            start, end = match.span()
            if self.overlaps(spans, start, end):
                return
            spans.append((start, end))
            attributes.setdefault("date_type", self._date_type(self.context(text, start, end)))
            candidates.append(
                self.make_candidate(text, document_id, offset, start, end, normalized, confidence, attributes)
            )

        for match in self.named_month.finditer(text):
            month = month_number(match.group(1))
            day = safe_date(int(match.group(3)), month, int(match.group(2))) if month else None
            if day:
                add(match, day.isoformat(), self.CONFIDENCE["named_month"], kind="date", parsed=True)

        for match in self.day_month.finditer(text):
            month = month_number(match.group(2))
            day = safe_date(int(match.group(3)), month, int(match.group(1))) if month else None
            if day:
                add(match, day.isoformat(), self.CONFIDENCE["day_month"], kind="date", parsed=True)

        for match in self.iso.finditer(text):
            day = safe_date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
            if not day:
                continue
            attributes = {"kind": "date", "parsed": True}
            if match.group(4) is not None and int(match.group(4)) < 24 and int(match.group(5)) < 60:
                attributes["time"] = f"{int(match.group(4)):02d}:{match.group(5)}"
            add(match, day.isoformat(), self.CONFIDENCE["iso"], **attributes)

        for match in self.numeric.finditer(text):
            resolved = self._resolve_numeric(int(match.group(1)), int(match.group(2)), int(match.group(3)))
            if resolved is None:
                continue
            normalized, ambiguous = resolved
            confidence = self.CONFIDENCE["numeric_ambiguous" if ambiguous else "numeric"]
            add(match, normalized, confidence, kind="date", parsed=True, ambiguous=ambiguous)

        for match in self.clock.finditer(text):
            meridiem = match.group(3)
            raw = f"{match.group(1)}:{match.group(2)}" + (f" {meridiem}m" if meridiem else "")
            clock = parse_time_text(raw)
            if clock is None:
                continue
            confidence = self.CONFIDENCE["time_meridiem" if meridiem else "time_24h"]
            add(match, f"{clock[0]:02d}:{clock[1]:02d}", confidence, kind="time", parsed=True)

        for match in self.hour_meridiem.finditer(text):
            clock = parse_time_text(f"{match.group(1)} {match.group(2)}m")
            if clock is None:
                continue
            add(match, f"{clock[0]:02d}:{clock[1]:02d}", self.CONFIDENCE["time_meridiem"], kind="time", parsed=True)

        for match in self.relative.finditer(text):
            add(
                match,
                self.collapse_whitespace(match.group(0).lower()),
                self.CONFIDENCE["relative"],
                kind="relative",
                parsed=False,
            )

        return candidates

    @staticmethod
    def _resolve_numeric(first: int, second: int, year: int) -> Optional[Tuple[str, bool]]:
        """Read a slash date month-first, falling back to day-first.

        Returns:
            (iso date, ambiguous) or None when neither reading is a valid date
        """
        month_first = safe_date(year, first, second)
        day_first = safe_date(year, second, first)
        if month_first:
            ambiguous = day_first is not None and first != second
            return month_first.isoformat(), ambiguous
        if day_first:
            return day_first.isoformat(), False
        return None

    def _date_type(self, context: str) -> str:
        lowered = context.lower()
        for date_type, keywords in self.DATE_TYPE_KEYWORDS:
            if any(keyword in lowered for keyword in keywords):
                return date_type
        return "general"
