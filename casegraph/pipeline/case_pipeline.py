"""Case extraction pipeline.

Documents are extracted concurrently (fan-out); everything that reads or
writes the case graph runs afterwards under a per-case lock (fan-in), so
two batches for the same case never interleave entity resolution or alibi
version numbering.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Iterable, List, Optional, Set
from uuid import UUID

from casegraph.core.base_llm_client import BaseLLMClient
from casegraph.core.config import ExtractionSettings, LLMSettings, settings
from casegraph.models.case_models import (
    AlibiDraft,
    CandidateBundle,
    Connection,
    DocumentInput,
    DocumentType,
    EntityType,
    PipelineResult,
    TimelineEvent,
)
from casegraph.pipeline.document_processor import DocumentProcessor
from casegraph.pipeline.persistence import PersistenceAdapter
from casegraph.repositories.graph_store import GraphStore
from casegraph.services.alibi.alibi_tracker import AlibiTracker, detect_event_conflicts, detect_inconsistencies
from casegraph.services.chunking.section_segmenter import SectionSegmenter
from casegraph.services.classification.document_classifier import DocumentClassifier
from casegraph.services.entity.resolver import EntityResolver
from casegraph.services.extraction.alibi_extractor import AlibiClaimExtractor
from casegraph.services.extraction.extractor_factory import ExtractorRegistry
from casegraph.services.extraction.llm_extractor import LLMCandidateSource
from casegraph.services.review.review_queue import ReviewQueueEmitter
from casegraph.services.timeline.event_builder import EventBuilder
from casegraph.utils.logging import get_logger

LOGGER = get_logger(__name__)


class CaseLockRegistry:
    """One asyncio.Lock per case id, dropped once nobody holds or awaits it."""

    def __init__(self):
        self._locks: Dict[UUID, asyncio.Lock] = {}
        self._users: Dict[UUID, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, case_id: UUID) -> AsyncIterator[None]:
        lock = self._locks.setdefault(case_id, asyncio.Lock())
        self._users[case_id] = self._users.get(case_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[case_id] -= 1
            if not self._users[case_id]:
                del self._users[case_id]
                del self._locks[case_id]


# Shared by every pipeline in the process unless one is injected
CASE_LOCKS = CaseLockRegistry()


def build_llm_source(llm_settings: LLMSettings) -> Optional[LLMCandidateSource]:
    """Create the language-model candidate source, or None when disabled."""
    if not llm_settings.is_usable:
        return None
    client = BaseLLMClient(
        api_key=llm_settings.api_key,
        base_url=llm_settings.api_url,
        model=llm_settings.model,
        timeout=llm_settings.timeout,
        max_retries=llm_settings.max_retries,
        retry_delay=llm_settings.retry_delay,
    )
    return LLMCandidateSource(client, max_input_chars=llm_settings.max_input_chars)


class CaseExtractionPipeline:
    """Populates a case graph from a batch of documents.

    Attributes:
        adapter: Idempotent persistence front for the store
        processor: Per-document extraction stage
        review_emitter: Receives low-confidence and conflicting artifacts
        locks: Per-case lock registry
    """

    def __init__(
        self,
        store: GraphStore,
        config: Optional[ExtractionSettings] = None,
        llm_source: Optional[LLMCandidateSource] = None,
        review_emitter: Optional[ReviewQueueEmitter] = None,
        lock_registry: Optional[CaseLockRegistry] = None,
    ):
        self.config = config or settings.extraction
        self.adapter = PersistenceAdapter(
            store,
            timeout_seconds=self.config.persistence_timeout_seconds,
            max_retries=self.config.persistence_max_retries,
            retry_delay=self.config.persistence_retry_delay,
        )
        self.processor = DocumentProcessor(
            registry=ExtractorRegistry.with_default_extractors(self.config.candidate_context_radius),
            classifier=DocumentClassifier(prior_boost=self.config.document_type_prior_boost),
            segmenter=SectionSegmenter(),
            event_builder=EventBuilder(context_radius=self.config.event_context_radius),
            alibi_extractor=AlibiClaimExtractor(),
            llm_source=llm_source,
        )
        self.review_emitter = review_emitter or ReviewQueueEmitter(self.config.review_confidence_threshold)
        self.locks = lock_registry if lock_registry is not None else CASE_LOCKS
        self.tracker = AlibiTracker(self.adapter)

    async def run(self, case_id: UUID, documents: List[DocumentInput]) -> PipelineResult:
        """Extract, resolve and persist one batch of documents for a case.

        Args:
            case_id: Case the documents belong to
            documents: Raw documents in batch order

        Returns:
            Counts of created and reused artifacts plus detected conflicts

        Raises:
            PersistenceError: If the store stays unavailable after retries
        """
        LOGGER.info(
            "Starting case extraction",
            extra={"case_id": str(case_id), "documents": len(documents)},
        )
        result = PipelineResult(case_id=case_id)
        bundles = await self._extract_documents(documents, result)

        async with self.locks.hold(case_id):
            await self._integrate(case_id, bundles, result)

        await self.review_emitter.emit(result.review_items)

        LOGGER.info(
            "Case extraction complete",
            extra={
                "case_id": str(case_id),
                "entities_created": result.entities_created,
                "events_created": result.events_created,
                "connections_created": result.connections_created,
                "alibis_created": result.alibis_created,
                "failed_documents": len(result.failed_documents),
            },
        )
        return result

    async def _extract_documents(self, documents: List[DocumentInput], result: PipelineResult) -> List[CandidateBundle]:
        semaphore = asyncio.Semaphore(self.config.max_concurrent_documents)

        async def guarded(document: DocumentInput) -> CandidateBundle:
            async with semaphore:
                return await asyncio.wait_for(
                    self.processor.process(document),
                    timeout=self.config.document_timeout_seconds,
                )

        outcomes = await asyncio.gather(*(guarded(d) for d in documents), return_exceptions=True)

        bundles: List[CandidateBundle] = []
        for document, outcome in zip(documents, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, Exception):
                LOGGER.error(
                    f"Document extraction failed: {outcome!r}",
                    extra={"document_id": document.document_id},
                )
                result.failed_documents.append(document.document_id)
                result.document_types[document.document_id] = document.document_type or DocumentType.GENERAL_DOCUMENT
                continue
            if outcome.fallback_reason:
                result.fallback_documents.append(document.document_id)
            result.document_types[document.document_id] = outcome.document_type
            bundles.append(outcome)
        return bundles

    async def _integrate(self, case_id: UUID, bundles: List[CandidateBundle], result: PipelineResult) -> None:
        resolver = EntityResolver(
            case_id,
            min_confidence=self.config.entity_min_confidence,
            near_duplicate_threshold=self.config.near_duplicate_threshold,
        )
        existing = await self.adapter.get_entities(case_id)
        resolver.prime(existing)
        existing_ids = {entity.id for entity in existing}

        referenced: Set[UUID] = set()
        for bundle in bundles:
            for resolution in resolver.resolve(bundle.candidates):
                referenced.add(resolution.entity_id)
            for alibi in bundle.alibis:
                referenced.update(self._resolve_alibi_names(resolver, alibi))

        await self._flush_entities(resolver, referenced & existing_ids, result)

        new_events = await self._persist_events(case_id, bundles, resolver, result)
        await self._persist_connections(case_id, bundles, resolver, result)

        drafts = [alibi for bundle in bundles for alibi in bundle.alibis]
        created, reused, new_alibis = await self.tracker.record_versions(case_id, drafts, resolver)
        result.alibis_created += created
        result.alibis_reused += reused

        result.inconsistencies = detect_inconsistencies(await self.adapter.get_alibis(case_id))
        result.event_conflicts = detect_event_conflicts(
            await self.adapter.get_timeline_events(case_id),
            tolerance_minutes=self.config.time_tolerance_minutes,
        )

        # Only findings that involve something written in this batch go to review
        new_alibi_versions = {(a.subject_entity_id, a.version_number) for a in new_alibis}
        new_event_ids = {e.id for e in new_events}
        result.review_items = self.review_emitter.collect(
            case_id,
            events=new_events,
            alibis=new_alibis,
            inconsistencies=[
                i for i in result.inconsistencies
                if (i.subject_entity_id, i.version2) in new_alibi_versions
            ],
            conflicts=[
                c for c in result.event_conflicts
                if c.event1_id in new_event_ids or c.event2_id in new_event_ids
            ],
            near_duplicates=resolver.near_duplicates(),
        )

    @staticmethod
    def _resolve_alibi_names(resolver: EntityResolver, alibi: AlibiDraft) -> Iterable[UUID]:
        ids = []
        subject_id, _ = resolver.resolve_name(
            alibi.subject_name,
            EntityType.PERSON,
            role="subject",
            confidence=alibi.confidence_score,
        )
        ids.append(subject_id)
        for name in alibi.corroborator_names:
            corroborator_id, _ = resolver.resolve_name(name, EntityType.PERSON, role="witness", confidence=alibi.confidence_score)
            ids.append(corroborator_id)
        return ids

    async def _flush_entities(self, resolver: EntityResolver, reused_ids: Set[UUID], result: PipelineResult) -> None:
        result.entities_reused += len(reused_ids)
        for entity in resolver.pending_entities:
            upsert = await self.adapter.upsert_entity(entity)
            resolver.confirm(entity, upsert.id)
            if upsert.created:
                result.entities_created += 1
            else:
                result.entities_reused += 1

    async def _persist_events(
        self,
        case_id: UUID,
        bundles: List[CandidateBundle],
        resolver: EntityResolver,
        result: PipelineResult,
    ) -> List[TimelineEvent]:
        new_events: List[TimelineEvent] = []
        for bundle in bundles:
            for draft in bundle.events:
                participant_ids: List[UUID] = []
                for name in draft.participant_names:
                    entity = resolver.lookup(name)
                    if entity is not None and entity.id not in participant_ids:
                        participant_ids.append(entity.id)

                event = TimelineEvent(
                    case_id=case_id,
                    event_type=draft.event_type,
                    title=draft.title,
                    description=draft.description,
                    event_time=draft.event_time,
                    time_precision=draft.time_precision,
                    location=draft.location,
                    participant_entity_ids=participant_ids,
                    verification_status=draft.verification_status,
                    confidence_score=draft.confidence_score,
                    source_document_id=draft.source_document_id or bundle.document_id,
                )
                upsert = await self.adapter.upsert_timeline_event(event)
                if upsert.created:
                    result.events_created += 1
                    new_events.append(event.model_copy(update={"id": upsert.id}))
                else:
                    result.events_reused += 1
        return new_events

    async def _persist_connections(
        self,
        case_id: UUID,
        bundles: List[CandidateBundle],
        resolver: EntityResolver,
        result: PipelineResult,
    ) -> None:
        for bundle in bundles:
            for draft in bundle.connections:
                source = resolver.lookup(draft.from_name, draft.from_type)
                target = resolver.lookup(draft.to_name, draft.to_type)
                if source is None or target is None or source.id == target.id:
                    LOGGER.debug(
                        "Skipping connection with unresolved endpoint",
                        extra={"from": draft.from_name, "to": draft.to_name},
                    )
                    continue

                connection = Connection(
                    case_id=case_id,
                    from_entity_id=source.id,
                    to_entity_id=target.id,
                    connection_type=draft.connection_type,
                    label=draft.label,
                    description=draft.description,
                    confidence=draft.confidence,
                )
                upsert = await self.adapter.upsert_connection(connection, source.name, target.name)
                if upsert.created:
                    result.connections_created += 1
                else:
                    result.connections_reused += 1
