"""Person name extraction with false-positive filtering and role inference."""

import re
from typing import List, Optional

from casegraph.models.case_models import Candidate, CandidateCategory
from casegraph.services.extraction.base_extractor import FactExtractor, Span

TITLES = r"(Mr|Mrs|Ms|Miss|Dr|Officer|Detective|Det|Agent|Captain|Capt|Lieutenant|Lt|Sergeant|Sgt|Deputy|Sheriff)"
LAW_ENFORCEMENT_TITLES = {
    "officer", "detective", "det", "agent", "captain", "capt", "lieutenant", "lt",
    "sergeant", "sgt", "deputy", "sheriff",
}

# Whole phrases that look like names but never are
STOP_PHRASES = {
    "case report", "police report", "incident report", "witness statement", "case number",
    "chain custody", "medical examiner", "cause death", "evidence log", "crime scene",
}

# Any of these tokens disqualifies a name
STOP_TOKENS = {
    # calendar
    "january", "february", "march", "april", "may", "june", "july", "august", "september",
    "october", "november", "december", "monday", "tuesday", "wednesday", "thursday", "friday",
    "saturday", "sunday", "today", "yesterday",
    # document vocabulary
    "case", "report", "date", "time", "statement", "interview", "interviewee", "evidence",
    "exhibit", "incident", "summary", "section", "part", "chapter", "page", "subject", "name",
    "question", "answer", "witness", "suspect", "victim", "officer", "detective", "police",
    "department", "county", "city", "state", "unit", "room", "file", "number", "notes",
    "description", "location", "address", "timeline", "conclusion", "findings",
    # places and organizations
    "street", "avenue", "road", "boulevard", "drive", "lane", "st", "ave", "rd", "blvd",
    "north", "south", "east", "west", "bank", "store", "park", "hospital", "center", "university",
    "school", "inc", "corp", "llc", "company", "bar", "hotel", "station", "apartment",
    # vehicles
    "ford", "chevrolet", "toyota", "honda", "nissan", "dodge", "jeep", "tesla", "sedan",
    # function words
    "the", "a", "an", "on", "in", "at", "and", "but", "or", "he", "she", "they", "we", "i",
    "it", "his", "her", "their", "this", "that", "then", "when", "after", "before", "mr",
    "mrs", "ms", "dr", "no", "yes", "later", "earlier", "while", "during", "upon", "following",
    "according", "around", "approximately", "about", "there", "here", "where", "what", "who",
    "both", "shortly", "meanwhile", "however", "next", "first", "finally", "dear", "from", "to",
}

ROLE_KEYWORDS = [
    ("suspect", ("suspect", "person of interest", "accused", "arrested")),
    ("witness", ("witness", "witnessed", "saw", "observed")),
    ("victim", ("victim", "deceased", "injured")),
    ("law_enforcement", ("officer", "detective", "agent", "sergeant", "deputy")),
]


def is_likely_person_name(name: str) -> bool:
    """Return True when a capitalized phrase plausibly names a person."""
    if not name or len(name) <= 3:
        return False
    if any(char.isdigit() for char in name) or "http" in name.lower():
        return False

    parts = name.split()
    lowered_parts = [part.lower().strip(".,'\"") for part in parts]
    if " ".join(lowered_parts) in STOP_PHRASES:
        return False
    if any(part in STOP_TOKENS for part in lowered_parts):
        return False
    if not parts[0][:1].isupper():
        return False
    # long tokens without a vowel are abbreviations or codes
    if any(len(part) > 3 and not re.search(r"[aeiouy]", part) for part in lowered_parts):
        return False
    return True


class PersonExtractor(FactExtractor):
    """Extracts person names.

    Titled mentions ("Detective Sarah Connor") are matched first and win over
    overlapping plain two- or three-word names. Plain matches that start on a
    stop word are retried from the next word so "On Monday John Smith" still
    yields "John Smith".
    """

    category = CandidateCategory.PERSON

    TITLED_PATTERN = r"\b" + TITLES + r"\.?[ \t]+([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+){0,2})\b"
    NICKNAME_PATTERN = r"\b([A-Z][a-z]+)[ \t]+\"([A-Z][a-z]+)\"[ \t]+([A-Z][a-z]+)\b"
    ALIAS_PATTERN = (
        r"\b([A-Z][a-z]+[ \t]+[A-Z][a-z]+),?[ \t]+(?:a\.k\.a\.?|aka|also known as)[ \t]+\"?"
        r"([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)?)\"?"
    )
    PLAIN_PATTERN = r"\b([A-Z][a-z]{1,15})[ \t]+([A-Z][a-z]{1,15}(?:[ \t]+[A-Z][a-z]{1,15})?)\b"

    def __init__(self, context_radius: int = 100):
        super().__init__(context_radius)
        self.titled = re.compile(self.TITLED_PATTERN)
        self.nickname = re.compile(self.NICKNAME_PATTERN)
        self.alias = re.compile(self.ALIAS_PATTERN)
        self.plain = re.compile(self.PLAIN_PATTERN)

    def _extract(self, text: str, document_id: str, offset: int) -> List[Candidate]:
        candidates: List[Candidate] = []
        spans: List[Span] = []

        for match in self.titled.finditer(text):
            title = match.group(1)
            name = self._trim_trailing_stop_tokens(match.group(2))
            if name is None:
                continue
            start = match.start()
            end = match.start(2) + len(name)
            if len(name.split()) == 1:
                # a bare surname is only meaningful with its title
                name = f"{title.rstrip('.')} {name}"
            elif not is_likely_person_name(name):
                continue
            spans.append((start, end))
            candidates.append(self._candidate(text, document_id, offset, start, end, name, title=title))

        for match in self.nickname.finditer(text):
            name = f"{match.group(1)} {match.group(3)}"
            if self.overlaps(spans, *match.span()) or not is_likely_person_name(name):
                continue
            spans.append(match.span())
            candidates.append(
                self._candidate(text, document_id, offset, *match.span(), name, nickname=match.group(2))
            )

        for match in self.alias.finditer(text):
            name = match.group(1)
            if self.overlaps(spans, *match.span()) or not is_likely_person_name(name):
                continue
            spans.append(match.span())
            candidates.append(
                self._candidate(text, document_id, offset, *match.span(), name, alias=match.group(2))
            )

        position = 0
        while True:
            match = self.plain.search(text, position)
            if match is None:
                break
            first_word = match.group(1)
            if first_word.lower() in STOP_TOKENS:
                # retry from the next word so the tail can still form a name
                position = match.start() + len(first_word)
                continue
            position = match.end()

            name = self._trim_trailing_stop_tokens(self.collapse_whitespace(match.group(0)))
            if name is None or len(name.split()) < 2 or not is_likely_person_name(name):
                continue
            start = match.start()
            words = list(re.finditer(r"\S+", match.group(0)))
            end = start + words[len(name.split()) - 1].end()
            if self.overlaps(spans, start, end):
                continue
            spans.append((start, end))
            candidates.append(self._candidate(text, document_id, offset, start, end, name))

        return candidates

    @staticmethod
    def _trim_trailing_stop_tokens(name: str) -> Optional[str]:
        parts = name.split()
        while parts and parts[-1].lower() in STOP_TOKENS:
            parts.pop()
        return " ".join(parts) if parts else None

    def _candidate(
        self,
        text: str,
        document_id: str,
        offset: int,
        start: int,
        end: int,
        name: str,
        title: Optional[str] = None,
        **extra,
    ) -> Candidate:
        context = self.context(text, start, end)
        role = self.infer_role(text, start, end, title)
        attributes = {"role": role}
        if title:
            attributes["title"] = title.rstrip(".")
        attributes.update({key: value for key, value in extra.items() if value})
        return self.make_candidate(
            text, document_id, offset, start, end, name, self._score(context, title), attributes
        )

    @staticmethod
    def _score(context: str, title: Optional[str]) -> int:
        lowered = context.lower()
        if re.search(r"\b(witness|suspect|victim)\b", lowered):
            return 95
        if "interviewed" in lowered or "statement" in lowered:
            return 90
        if title:
            return 90
        if "officer" in lowered or "detective" in lowered:
            return 85
        return 75

    def infer_role(self, text: str, start: int, end: int, title: Optional[str] = None) -> str:
        """Infer a person's role from nearby wording.

        The clause immediately around the name is checked before the wider
        context window so two people in one sentence keep separate roles.
        """
        if title and title.lower().rstrip(".") in LAW_ENFORCEMENT_TITLES:
            return "law_enforcement"
        near = text[max(0, start - 30):min(len(text), end + 20)].lower()
        wide = self.context(text, start, end).lower()
        for window in (near, wide):
            for role, keywords in ROLE_KEYWORDS:
                if any(re.search(r"\b" + re.escape(keyword) + r"\b", window) for keyword in keywords):
                    return role
        return "unknown"

