"""Location extraction: addresses, intersections, cities, businesses, landmarks."""

import re
from typing import List

from casegraph.models.case_models import Candidate, CandidateCategory
from casegraph.services.extraction.base_extractor import FactExtractor, Span

_STREET_SUFFIX = (
    r"(?:Street|St|Avenue|Ave|Road|Rd|Boulevard|Blvd|Drive|Dr|Lane|Ln|Way|Court|Ct|"
    r"Place|Pl|Terrace|Parkway|Pkwy|Highway|Hwy|Circle|Cir)"
)

US_STATE_CODES = {
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA", "HI", "ID", "IL", "IN", "IA",
    "KS", "KY", "LA", "ME", "MD", "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
    "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC", "SD", "TN", "TX", "UT", "VT",
    "VA", "WA", "WV", "WI", "WY", "DC",
}


class LocationExtractor(FactExtractor):
    """Extracts places mentioned in case documents.

    Patterns run from most to least specific; each later pattern ignores
    text already claimed by an earlier one.
    """

    category = CandidateCategory.LOCATION

    # (pattern, location_type, confidence)
    LOCATION_PATTERNS = [
        (
            r"\b\d{1,6}\s+(?:[NSEW]\.?\s+)?(?:[A-Z][A-Za-z0-9']*\s+){1,3}" + _STREET_SUFFIX + r"\b\.?",
            "address",
            90,
        ),
        (
            r"\b(?:[A-Z][a-z]+\s+){1,2}" + _STREET_SUFFIX + r"\.?\s+(?:and|&)\s+(?:[A-Z][a-z]+\s+){1,2}" + _STREET_SUFFIX + r"\b\.?",
            "intersection",
            85,
        ),
        (
            r"\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+)?,\s+([A-Z]{2})\b(?:\s+\d{5})?",
            "city",
            85,
        ),
        (
            r"\b(?:at|near|inside|outside|behind|to|from)\s+(?:the\s+)?"
            r"((?:[A-Z][\w']*\s+){0,3}(?:Store|Shop|Market|Supermarket|Mall|Bank|Restaurant|Cafe|Bar|Pub|Hotel|"
            r"Motel|Station|Hospital|School|Church|Center|Centre|Club|Diner|Pharmacy|Gym|Office|"
            r"Warehouse|Apartments?|Garage|Depot|Casino|Theater|Theatre|Library))\b",
            "business",
            80,
        ),
        (
            r"\b(?:[A-Z][a-z]+\s+){1,3}(?:Park|Bridge|Lake|River|Beach|Square|Plaza|Stadium|Airport|"
            r"Pier|Harbor|Harbour|Forest|Trail|Marina|Cemetery)\b",
            "landmark",
            70,
        ),
    ]

    def __init__(self, context_radius: int = 100):
        super().__init__(context_radius)
        self.patterns = [(re.compile(p), kind, score) for p, kind, score in self.LOCATION_PATTERNS]

    def _extract(self, text: str, document_id: str, offset: int) -> List[Candidate]:
        candidates: List[Candidate] = []
        spans: List[Span] = []
        for pattern, location_type, confidence in self.patterns:
            for match in pattern.finditer(text):
                if location_type == "business":
                    start, end = match.span(1)
                else:
                    start, end = match.span()

                if location_type == "city" and match.group(1) not in US_STATE_CODES:
                    continue

                value, start = self.strip_leading_noise(text[start:end], start)
                value = self.collapse_whitespace(value).rstrip(".")
                end = start + len(text[start:end].rstrip().rstrip("."))
                if len(value) < 3 or self.overlaps(spans, start, end):
                    continue
                spans.append((start, end))

                candidates.append(
                    self.make_candidate(
                        text,
                        document_id,
                        offset,
                        start,
                        end,
                        value,
                        confidence,
                        {"location_type": location_type},
                    )
                )

        return candidates
