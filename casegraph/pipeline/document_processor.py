"""Per-document extraction: normalize, classify, segment, extract.

This is the fan-out stage of the pipeline. It only reads its own document
and touches no shared state, so many documents can be processed at once.
"""

import asyncio
from typing import List, Optional

from casegraph.core.exceptions import ExtractionError
from casegraph.models.case_models import Candidate, CandidateBundle, CandidateCategory, DocumentInput, DocumentType, Section
from casegraph.services.chunking.section_segmenter import SectionSegmenter
from casegraph.services.classification.constants import ALIBI_BEARING_TYPES
from casegraph.services.classification.document_classifier import DocumentClassifier
from casegraph.services.extraction.alibi_extractor import AlibiClaimExtractor
from casegraph.services.extraction.extractor_factory import ExtractorRegistry
from casegraph.services.extraction.llm_extractor import LLMCandidateSource
from casegraph.services.normalization.text_normalizer import normalize_text
from casegraph.services.timeline.event_builder import EventBuilder
from casegraph.utils.logging import get_logger

LOGGER = get_logger(__name__)


class DocumentProcessor:
    """Turns one raw document into a CandidateBundle.

    When a language-model source is configured it is tried first; any
    ExtractionError falls back to the pattern extractors for that document.
    """

    def __init__(
        self,
        registry: ExtractorRegistry,
        classifier: DocumentClassifier,
        segmenter: SectionSegmenter,
        event_builder: EventBuilder,
        alibi_extractor: AlibiClaimExtractor,
        llm_source: Optional[LLMCandidateSource] = None,
    ):
        self.registry = registry
        self.classifier = classifier
        self.segmenter = segmenter
        self.event_builder = event_builder
        self.alibi_extractor = alibi_extractor
        self.llm_source = llm_source

    async def process(self, document: DocumentInput) -> CandidateBundle:
        text = normalize_text(document.raw_text)
        classified = self.classifier.classify(text, document.filename)
        document_type = document.document_type or classified
        if document.document_type and document.document_type != classified:
            LOGGER.info(
                "Caller-supplied document type differs from classifier",
                extra={
                    "document_id": document.document_id,
                    "supplied": document.document_type.value,
                    "classified": classified.value,
                },
            )

        if not text:
            return CandidateBundle(document_id=document.document_id, document_type=document_type)

        fallback_reason = None
        if self.llm_source is not None:
            try:
                return await self.llm_source.extract(document.document_id, text, document_type)
            except ExtractionError as e:
                fallback_reason = str(e)
                LOGGER.warning(
                    "LLM extraction failed, falling back to pattern extraction",
                    extra={"document_id": document.document_id, "error": fallback_reason},
                )

        # Pattern extraction is CPU-bound; run in a thread
        bundle = await asyncio.to_thread(self.extract_patterns, document.document_id, text, document_type)
        bundle.fallback_reason = fallback_reason
        return bundle

    def extract_patterns(self, document_id: str, text: str, document_type: DocumentType) -> CandidateBundle:
        sections = self.segmenter.segment(text)
        candidates = [
            self._annotate(self.classifier.apply_prior(candidate, document_type), sections)
            for candidate in self.registry.extract_all(text, document_id)
        ]

        events, connections = self.event_builder.build(text, document_id, candidates)

        alibis = []
        if document_type in ALIBI_BEARING_TYPES:
            dates = [c for c in candidates if c.category == CandidateCategory.DATE]
            alibis = self.alibi_extractor.extract(text, document_id, dates)

        LOGGER.info(
            "Pattern extraction complete",
            extra={
                "document_id": document_id,
                "document_type": document_type.value,
                "sections": len(sections),
                "candidates": len(candidates),
                "events": len(events),
                "alibis": len(alibis),
            },
        )
        return CandidateBundle(
            document_id=document_id,
            document_type=document_type,
            candidates=candidates,
            events=events,
            connections=connections,
            alibis=alibis,
        )

    @staticmethod
    def _annotate(candidate: Candidate, sections: List[Section]) -> Candidate:
        for section in sections:
            if section.start_index <= candidate.start < section.end_index:
                candidate.attributes["section_type"] = section.section_type.value
                break
        return candidate
