"""Header-driven section segmentation for investigative documents."""

import re
from typing import List, Optional, Tuple

from casegraph.models.case_models import Section, SectionType
from casegraph.utils.logging import get_logger

LOGGER = get_logger(__name__)


class SectionSegmenter:
    """Splits normalized text into titled sections.

    Attributes:
        header_patterns: Compiled header regexes; group 1 is the title
    """

    HEADER_PATTERNS = [
        # SECTION 2: Witness Statements / PART IV - Evidence
        r"^(?:SECTION|PART|CHAPTER)[ \t]+[\w.]+[ \t]*[:\-]?[ \t]*(.*?)[ \t]*$",
        # === Timeline ===
        r"^={3,}[ \t]*(.+?)[ \t]*={3,}[ \t]*$",
        # 1. Incident Details:
        r"^\d+\.?[ \t]+([A-Z][^.\n]+?):[ \t]*$",
        # INCIDENT SUMMARY
        r"^([A-Z][A-Z \t]{5,}?):?[ \t]*$",
    ]

    # Keyword groups checked in order against the lower-cased title
    SECTION_TYPE_KEYWORDS: List[Tuple[SectionType, Tuple[str, ...]]] = [
        (SectionType.SUMMARY, ("summary", "overview", "synopsis")),
        (SectionType.INCIDENT_DETAILS, ("incident", "event", "occurrence")),
        (SectionType.WITNESS_INFO, ("witness", "statement")),
        (SectionType.SUSPECT_INFO, ("suspect", "person of interest", "accused")),
        (SectionType.EVIDENCE, ("evidence", "physical", "exhibit")),
        (SectionType.TIMELINE, ("timeline", "chronology", "sequence")),
        (SectionType.RECOMMENDATIONS, ("recommendation", "action")),
        (SectionType.CONCLUSIONS, ("conclusion", "finding")),
    ]

    def __init__(self):
        self.header_patterns = [re.compile(p, re.MULTILINE) for p in self.HEADER_PATTERNS]

    def segment(self, text: str) -> List[Section]:
        """Segment text into sections.

        Text without any recognizable header yields a single general section
        covering the whole document. Text before the first header becomes a
        general preamble section.

        Args:
            text: Normalized document text

        Returns:
            Sections ordered by start offset
        """
        if not text:
            return []

        headers = self._find_headers(text)
        if not headers:
            return [self._make_section("Document", 0, len(text), text)]

        sections: List[Section] = []
        first_start = headers[0][0]
        if text[:first_start].strip():
            sections.append(self._make_section("Preamble", 0, first_start, text[:first_start]))

        for index, (start, header_end, title) in enumerate(headers):
            end = headers[index + 1][0] if index + 1 < len(headers) else len(text)
            content = text[header_end:end].strip()
            sections.append(
                Section(
                    title=title,
                    section_type=self.classify_section_type(title),
                    start_index=start,
                    end_index=end,
                    content=content,
                )
            )

        LOGGER.debug(f"Segmented document into {len(sections)} sections", extra={"count": len(sections)})
        return sections

    def classify_section_type(self, title: Optional[str]) -> SectionType:
        lowered = (title or "").lower()
        for section_type, keywords in self.SECTION_TYPE_KEYWORDS:
            if any(keyword in lowered for keyword in keywords):
                return section_type
        return SectionType.GENERAL

    def _find_headers(self, text: str) -> List[Tuple[int, int, str]]:
        """Collect (start, end, title) header spans, earliest pattern wins on overlap."""
        found: List[Tuple[int, int, str]] = []
        for pattern in self.header_patterns:
            for match in pattern.finditer(text):
                title = match.group(1).strip() or match.group(0).strip()
                start, end = match.start(), match.end()
                if any(start < other_end and end > other_start for other_start, other_end, _ in found):
                    continue
                found.append((start, end, title))
        found.sort(key=lambda header: header[0])
        return found

    def _make_section(self, title: str, start: int, end: int, content: str) -> Section:
        return Section(
            title=title,
            section_type=SectionType.GENERAL,
            start_index=start,
            end_index=end,
            content=content.strip(),
        )
