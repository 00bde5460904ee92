"""Base class for pattern-driven fact extractors.

Each extractor owns an ordered list of compiled patterns for one candidate
category. Earlier patterns claim their spans first; later patterns skip any
match overlapping an already-claimed span. Extraction never raises: a
failure inside an extractor is logged and yields no candidates.
"""

import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from casegraph.models.case_models import Candidate, CandidateCategory
from casegraph.utils.logging import get_logger

LOGGER = get_logger(__name__)

Span = Tuple[int, int]

# Leading words that patterns built from capitalized tokens tend to swallow
LEADING_NOISE_WORDS = {
    "the", "a", "an", "at", "near", "in", "on", "to", "from", "then", "and",
    "but", "by", "inside", "outside", "behind", "of", "with",
}


def clamp_confidence(score: int) -> int:
    return max(0, min(100, int(score)))


class FactExtractor(ABC):
    """Abstract base class for all fact extractors.

    Attributes:
        category: Candidate category this extractor produces
        context_radius: Characters of context kept on each side of a match
    """

    category: CandidateCategory

    def __init__(self, context_radius: int = 100):
        self.context_radius = context_radius

    def extract(self, text: str, document_id: str, offset: int = 0) -> List[Candidate]:
        """Extract candidates from text.

        Args:
            text: Normalized text to scan
            document_id: Source document identifier
            offset: Offset of ``text`` within the full document

        Returns:
            Candidates ordered by position; empty on malformed input
        """
        if not text or not isinstance(text, str):
            return []
        try:
            candidates = self._extract(text, document_id, offset)
        except (re.error, ValueError, TypeError, IndexError) as e:
            LOGGER.error(
                f"{self.__class__.__name__} failed: {e}",
                extra={"document_id": document_id},
                exc_info=True,
            )
            return []

        candidates.sort(key=lambda c: (c.start, c.end))
        LOGGER.debug(
            f"Extracted {len(candidates)} {self.category.value} candidates",
            extra={"document_id": document_id, "count": len(candidates)},
        )
        return candidates

    @abstractmethod
    def _extract(self, text: str, document_id: str, offset: int) -> List[Candidate]:
        """Category-specific extraction; may raise, ``extract`` guards it."""

    def context(self, text: str, start: int, end: int, radius: Optional[int] = None) -> str:
        r = self.context_radius if radius is None else radius
        return text[max(0, start - r):min(len(text), end + r)].strip()

    def make_candidate(
        self,
        text: str,
        document_id: str,
        offset: int,
        start: int,
        end: int,
        normalized_value: str,
        confidence: int,
        attributes: Optional[Dict[str, Any]] = None,
    ) -> Candidate:
        return Candidate(
            category=self.category,
            original_text=text[start:end],
            normalized_value=normalized_value,
            context_window=self.context(text, start, end),
            confidence_score=clamp_confidence(confidence),
            source_document_id=document_id,
            start=start + offset,
            end=end + offset,
            attributes=attributes or {},
        )

    @staticmethod
    def overlaps(spans: List[Span], start: int, end: int) -> bool:
        return any(start < other_end and end > other_start for other_start, other_end in spans)

    @staticmethod
    def strip_leading_noise(value: str, start: int) -> Tuple[str, int]:
        """Drop leading connective words, returning the trimmed value and new start."""
        while True:
            head, _, rest = value.partition(" ")
            if not rest or head.lower() not in LEADING_NOISE_WORDS:
                return value, start
            trimmed = rest.lstrip()
            start += len(head) + 1 + (len(rest) - len(trimmed))
            value = trimmed

    @staticmethod
    def collapse_whitespace(value: str) -> str:
        return " ".join(value.split())
