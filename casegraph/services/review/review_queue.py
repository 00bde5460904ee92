"""Hand-off of questionable artifacts to human review."""

from typing import Awaitable, Callable, Iterable, List, Optional, Tuple
from uuid import UUID

from casegraph.models.case_models import (
    AlibiStatement,
    Entity,
    EventConflict,
    Inconsistency,
    ReviewArtifactType,
    ReviewItem,
    Severity,
    TimelineEvent,
)
from casegraph.utils.logging import get_logger

LOGGER = get_logger(__name__)

ReviewSink = Callable[[List[ReviewItem]], Awaitable[None]]


class ReviewQueueEmitter:
    """Collects review items and passes them to a sink.

    Without a sink the items are only logged; the review queue itself lives
    outside this package.
    """

    def __init__(self, confidence_threshold: int = 60, sink: Optional[ReviewSink] = None):
        self.confidence_threshold = confidence_threshold
        self.sink = sink

    def collect(
        self,
        case_id: UUID,
        events: Iterable[TimelineEvent] = (),
        alibis: Iterable[AlibiStatement] = (),
        inconsistencies: Iterable[Inconsistency] = (),
        conflicts: Iterable[EventConflict] = (),
        near_duplicates: Iterable[Tuple[Entity, Entity, float]] = (),
    ) -> List[ReviewItem]:
        items: List[ReviewItem] = []

        for event in events:
            if event.confidence_score < self.confidence_threshold:
                items.append(ReviewItem(
                    case_id=case_id,
                    artifact_type=ReviewArtifactType.EVENT,
                    artifact_id=event.id,
                    reason="low_confidence",
                    detail=event.title,
                    confidence_score=event.confidence_score,
                ))

        for alibi in alibis:
            if alibi.confidence_score < self.confidence_threshold:
                items.append(ReviewItem(
                    case_id=case_id,
                    artifact_type=ReviewArtifactType.ALIBI,
                    artifact_id=alibi.id,
                    reason="low_confidence",
                    detail=f"Alibi version {alibi.version_number}: {alibi.location_claimed or 'unknown location'}",
                    confidence_score=alibi.confidence_score,
                ))

        for inconsistency in inconsistencies:
            items.append(ReviewItem(
                case_id=case_id,
                artifact_type=ReviewArtifactType.INCONSISTENCY,
                artifact_id=inconsistency.subject_entity_id,
                reason=f"alibi_{inconsistency.kind.value}_changed",
                detail=f"v{inconsistency.version1} -> v{inconsistency.version2}: {inconsistency.detail}",
                severity=inconsistency.severity,
            ))

        for conflict in conflicts:
            items.append(ReviewItem(
                case_id=case_id,
                artifact_type=ReviewArtifactType.EVENT_CONFLICT,
                artifact_id=conflict.participant_entity_id,
                reason="event_location_conflict",
                detail=conflict.detail,
                severity=conflict.severity,
            ))

        for first, second, score in near_duplicates:
            items.append(ReviewItem(
                case_id=case_id,
                artifact_type=ReviewArtifactType.ENTITY,
                artifact_id=first.id,
                reason="possible_duplicate",
                detail=f'"{first.name}" resembles "{second.name}" ({score:.0f}%)',
                severity=Severity.MINOR,
            ))

        return items

    async def emit(self, items: List[ReviewItem]) -> None:
        if not items:
            return
        LOGGER.info(
            f"Emitting {len(items)} review items",
            extra={"case_id": str(items[0].case_id), "count": len(items)},
        )
        if self.sink is not None:
            await self.sink(items)
