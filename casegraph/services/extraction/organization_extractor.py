"""Organization extraction."""

import re
from typing import List

from casegraph.models.case_models import Candidate, CandidateCategory
from casegraph.services.extraction.base_extractor import FactExtractor, Span

_CAPITALIZED = r"(?:[A-Z][\w&'.-]*[ \t]+)"


class OrganizationExtractor(FactExtractor):
    """Extracts agencies, departments, hospitals, schools, companies and banks."""

    category = CandidateCategory.ORGANIZATION

    # (pattern, org_type, well_known)
    ORGANIZATION_PATTERNS = [
        (r"\b(?:FBI|CIA|DEA|ATF|NSA|DHS|ICE|CBP|IRS|USMS|NCIS|Interpol|Secret Service)\b", "law_enforcement", True),
        (
            _CAPITALIZED + r"{1,3}(?:Police Department|Police Dept\.?|Police|Sheriff's Office|Sheriff's Department|"
            r"Fire Department|Crime Lab|Bureau of Investigation)\b",
            "law_enforcement",
            True,
        ),
        (_CAPITALIZED + r"{1,3}(?:Hospital|Medical Center|Clinic|Health System)\b", "medical", False),
        (r"\bUniversity of [A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)?\b", "educational", False),
        (_CAPITALIZED + r"{1,3}(?:University|College|High School|Academy)\b", "educational", False),
        (_CAPITALIZED + r"{1,4}(?:Inc|Corp|Corporation|LLC|Ltd|Company|Co|Group|Industries|Enterprises)\b\.?", "corporation", False),
        (r"\bBank of [A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)?\b", "financial", True),
        (_CAPITALIZED + r"{1,3}(?:Bank|Credit Union|Savings and Loan|Trust)\b", "financial", False),
    ]

    def __init__(self, context_radius: int = 100):
        super().__init__(context_radius)
        self.patterns = [(re.compile(p), org_type, known) for p, org_type, known in self.ORGANIZATION_PATTERNS]

    def _extract(self, text: str, document_id: str, offset: int) -> List[Candidate]:
        candidates: List[Candidate] = []
        spans: List[Span] = []

        for pattern, org_type, well_known in self.patterns:
            for match in pattern.finditer(text):
                value, start = self.strip_leading_noise(match.group(0), match.start())
                value = self.collapse_whitespace(value)
                end = match.end()
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
                        self._score(value, well_known),
                        {"org_type": org_type},
                    )
                )

        return candidates

    @staticmethod
    def _score(value: str, well_known: bool) -> int:
        if well_known:
            return 90
        capitalized_words = [word for word in value.split() if word[:1].isupper()]
        return 75 if len(capitalized_words) >= 2 else 60
