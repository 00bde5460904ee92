"""Physical and digital evidence extraction."""

import re
from typing import List

from casegraph.models.case_models import Candidate, CandidateCategory
from casegraph.services.extraction.base_extractor import FactExtractor, Span

# (keywords, evidence_type) checked in order against the lower-cased item text
EVIDENCE_TYPE_KEYWORDS = [
    (("dna", "blood", "hair", "saliva", "semen", "tissue"), "biological"),
    (("fingerprint", "print"), "fingerprint"),
    (("bullet", "casing", "gun", "firearm", "pistol", "rifle", "shotgun", "handgun", "revolver"), "ballistic"),
    (("footage", "video", "photo", "photograph", "recording", "camera"), "audiovisual"),
    (("phone", "laptop", "computer", "drive", "gps", "message", "email", "usb"), "digital"),
]


def classify_evidence_type(value: str) -> str:
    lowered = value.lower()
    for keywords, evidence_type in EVIDENCE_TYPE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return evidence_type
    return "physical"


class EvidenceExtractor(FactExtractor):
    category = CandidateCategory.EVIDENCE

    LABELED_PATTERN = r"\b(evidence|exhibit|item)\s*(?:number|no\.?|#)\s*[:#]?\s*([A-Z0-9][\w-]*)"
    PHYSICAL_PATTERN = (
        r"\b(DNA(?:\s+samples?)?|fingerprints?|blood(?:\s+(?:stains?|samples?|spatter))?|fibers?|"
        r"hair\s+samples?|bullets?|shell\s+casings?|casings?|weapon|knife|knives|gun|firearm|handgun|"
        r"pistol|revolver|rifle|shotgun|crowbar|rope|gloves?)\b"
    )
    DIGITAL_PATTERN = (
        r"\b(cell\s?phone|mobile\s+phone|smartphone|laptop|computer|hard\s+drive|USB\s+drive|flash\s+drive|"
        r"(?:surveillance|security|video|CCTV)\s+footage|footage|photographs?|GPS\s+data|phone\s+records|"
        r"text\s+messages?)\b"
    )

    def __init__(self, context_radius: int = 100):
        super().__init__(context_radius)
        self.labeled = re.compile(self.LABELED_PATTERN, re.IGNORECASE)
        self.physical = re.compile(self.PHYSICAL_PATTERN, re.IGNORECASE)
        self.digital = re.compile(self.DIGITAL_PATTERN, re.IGNORECASE)

    def _extract(self, text: str, document_id: str, offset: int) -> List[Candidate]:
        candidates: List[Candidate] = []
        spans: List[Span] = []

        for match in self.labeled.finditer(text):
            start, end = match.span()
            if self.overlaps(spans, start, end):
                continue
            spans.append((start, end))
            label = match.group(1).capitalize()
            value = f"{label} #{match.group(2).upper()}"
            # the item described right after the label decides the type
            trailing = text[end:end + 60]
            candidates.append(
                self.make_candidate(
                    text, document_id, offset, start, end, value, 95,
                    {"evidence_type": classify_evidence_type(trailing), "label": match.group(2).upper()},
                )
            )

        for pattern, confidence in ((self.physical, 90), (self.digital, 80)):
            for match in pattern.finditer(text):
                start, end = match.span()
                if self.overlaps(spans, start, end):
                    continue
                spans.append((start, end))
                value = self.collapse_whitespace(match.group(0)).lower()
                candidates.append(
                    self.make_candidate(
                        text, document_id, offset, start, end, value, confidence,
                        {"evidence_type": classify_evidence_type(value)},
                    )
                )

        return candidates
