"""Vehicle extraction: described vehicles and license plates."""

import re
from typing import List

from casegraph.models.case_models import Candidate, CandidateCategory
from casegraph.services.extraction.base_extractor import FactExtractor, Span

MAKES = (
    r"(?i:Ford|Chevrolet|Chevy|Toyota|Honda|Nissan|BMW|Mercedes(?:-Benz)?|Audi|Volkswagen|VW|Dodge|Jeep|"
    r"Hyundai|Kia|Subaru|Mazda|Lexus|Tesla|Buick|Cadillac|GMC|Chrysler|Volvo|Acura|Infiniti|Lincoln|"
    r"Mitsubishi|Pontiac|Ram)"
)
COLORS = (
    r"(?i:black|white|silver|gray|grey|red|blue|green|yellow|brown|gold|tan|maroon|beige|orange|purple|"
    r"dark\s+\w+|light\s+\w+)"
)
BODY_TYPES = r"(?i:sedan|SUV|pickup truck|pickup|truck|van|minivan|motorcycle|coupe|hatchback|convertible)"


def has_letters_and_digits(value: str) -> bool:
    return any(c.isalpha() for c in value) and any(c.isdigit() for c in value)


class VehicleExtractor(FactExtractor):
    """Extracts vehicles described by year/make/model or colour, and plates.

    Plates must mix letters and digits; a run of digits is a phone or case
    number, not a plate.
    """

    category = CandidateCategory.VEHICLE

    PLATE_PATTERNS = [
        r"\b(?:license\s+plate|licence\s+plate|plate|tag|registration)(?:\s+(?:number|no\.?|#))?\s*[:#]?\s*([A-Z0-9]{2,3}[\s-]?[A-Z0-9]{3,4})\b",
        r"\b([A-Z]{3}[ -]\d{3,4}|\d{3}[ -][A-Z]{3})\b",
    ]
    # (pattern, vehicle_kind, confidence)
    DESCRIPTION_PATTERNS = [
        (r"\b((?:19|20)\d{2})[ \t]+(" + MAKES + r")(?:[ \t]+([A-Z0-9][\w-]*))?", "year_make_model", 90),
        (r"\b(" + COLORS + r")[ \t]+(" + MAKES + r")(?:[ \t]+([A-Z0-9][\w-]*))?", "color_make_model", 85),
        (r"\b(" + COLORS + r")[ \t]+(" + BODY_TYPES + r")\b", "color_body", 75),
        (r"\b(" + BODY_TYPES + r")\b", "body", 60),
    ]

    def __init__(self, context_radius: int = 100):
        super().__init__(context_radius)
        self.plate_patterns = [
            re.compile(self.PLATE_PATTERNS[0], re.IGNORECASE),
            re.compile(self.PLATE_PATTERNS[1]),
        ]
        self.description_patterns = [(re.compile(p), kind, score) for p, kind, score in self.DESCRIPTION_PATTERNS]

    def _extract(self, text: str, document_id: str, offset: int) -> List[Candidate]:
        candidates: List[Candidate] = []
        spans: List[Span] = []

        for pattern in self.plate_patterns:
            for match in pattern.finditer(text):
                plate = match.group(1).upper()
                start, end = match.span(1)
                if not has_letters_and_digits(plate) or self.overlaps(spans, start, end):
                    continue
                spans.append((start, end))
                normalized = re.sub(r"[\s-]", "", plate)
                candidates.append(
                    self.make_candidate(
                        text, document_id, offset, start, end, normalized, 95,
                        {"vehicle_kind": "license_plate", "plate": normalized},
                    )
                )

        for pattern, kind, confidence in self.description_patterns:
            for match in pattern.finditer(text):
                start, end = match.span()
                if self.overlaps(spans, start, end):
                    continue
                spans.append((start, end))
                value = self.collapse_whitespace(match.group(0))
                if kind in ("color_body", "body"):
                    value = value.lower()
                candidates.append(
                    self.make_candidate(
                        text, document_id, offset, start, end, value, confidence,
                        {"vehicle_kind": kind},
                    )
                )

        return candidates
