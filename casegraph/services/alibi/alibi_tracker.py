"""Alibi versioning and inconsistency detection.

Each time a subject's account is recorded it becomes a new, immutable
version numbered from 1 with no gaps. Inconsistencies are never stored;
they are recomputed from the full version history whenever asked for.
"""

import re
from collections import defaultdict
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from casegraph.models.case_models import (
    AlibiDraft,
    AlibiStatement,
    EntityType,
    EventConflict,
    Inconsistency,
    InconsistencyKind,
    Severity,
    TimelineEvent,
    TimePrecision,
)
from casegraph.utils.logging import get_logger

if TYPE_CHECKING:
    from casegraph.pipeline.persistence import PersistenceAdapter
    from casegraph.services.entity.resolver import EntityResolver

LOGGER = get_logger(__name__)

KIND_ORDER = [
    InconsistencyKind.LOCATION,
    InconsistencyKind.ACTIVITY,
    InconsistencyKind.TIME,
    InconsistencyKind.CORROBORATION,
]

KIND_SEVERITY = {
    InconsistencyKind.LOCATION: Severity.SIGNIFICANT,
    InconsistencyKind.ACTIVITY: Severity.MODERATE,
    InconsistencyKind.TIME: Severity.MODERATE,
    InconsistencyKind.CORROBORATION: Severity.MINOR,
}

_LOCATION_ABBREVIATIONS = [
    (re.compile(r"\bst\b"), "street"),
    (re.compile(r"\bave\b"), "avenue"),
    (re.compile(r"\brd\b"), "road"),
    (re.compile(r"\bdr\b"), "drive"),
    (re.compile(r"\bblvd\b"), "boulevard"),
    (re.compile(r"\bln\b"), "lane"),
]


def normalize_location(value: Optional[str]) -> str:
    if not value:
        return ""
    text = re.sub(r"[^\w\s']", " ", value.lower())
    for pattern, replacement in _LOCATION_ABBREVIATIONS:
        text = pattern.sub(replacement, text)
    text = re.sub(r"\bthe\b", " ", text)
    return " ".join(text.split())


def locations_match(first: Optional[str], second: Optional[str]) -> bool:
    """Loose location equality: abbreviations expanded, containment allowed.

    An unknown location matches anything, so it can never cause a conflict.
    """
    a, b = normalize_location(first), normalize_location(second)
    if not a or not b:
        return True
    return a == b or a in b or b in a


def _format_window(start: Optional[datetime], end: Optional[datetime]) -> str:
    def fmt(value: Optional[datetime]) -> str:
        return value.isoformat() if value else "unknown"
    return f"{fmt(start)} - {fmt(end)}"


def _compare_versions(previous: AlibiStatement, current: AlibiStatement) -> List[Inconsistency]:
    found: List[Tuple[InconsistencyKind, str]] = []

    if (previous.location_claimed or "") != (current.location_claimed or ""):
        found.append((
            InconsistencyKind.LOCATION,
            f'Location changed from "{previous.location_claimed or ""}" to "{current.location_claimed or ""}"',
        ))
    if (previous.activity_claimed or "") != (current.activity_claimed or ""):
        found.append((
            InconsistencyKind.ACTIVITY,
            f'Activity changed from "{previous.activity_claimed or ""}" to "{current.activity_claimed or ""}"',
        ))
    if previous.alibi_start != current.alibi_start or previous.alibi_end != current.alibi_end:
        found.append((
            InconsistencyKind.TIME,
            "Time range changed from "
            f"{_format_window(previous.alibi_start, previous.alibi_end)} to "
            f"{_format_window(current.alibi_start, current.alibi_end)}",
        ))
    if sorted(map(str, previous.corroborating_entity_ids)) != sorted(map(str, current.corroborating_entity_ids)):
        found.append((InconsistencyKind.CORROBORATION, "Corroborating witnesses changed"))

    return [
        Inconsistency(
            subject_entity_id=current.subject_entity_id,
            version1=previous.version_number,
            version2=current.version_number,
            kind=kind,
            detail=detail,
            severity=KIND_SEVERITY[kind],
        )
        for kind, detail in found
    ]


def detect_inconsistencies(statements: Iterable[AlibiStatement]) -> List[Inconsistency]:
    """Compare every pair of adjacent versions per subject.

    Pure and deterministic: the result depends only on the statements and is
    ordered by (subject, earlier version, field).
    """
    by_subject: Dict[UUID, List[AlibiStatement]] = defaultdict(list)
    for statement in statements:
        by_subject[statement.subject_entity_id].append(statement)

    inconsistencies: List[Inconsistency] = []
    for subject_id in sorted(by_subject, key=str):
        versions = sorted(by_subject[subject_id], key=lambda s: s.version_number)
        for previous, current in zip(versions, versions[1:]):
            inconsistencies.extend(_compare_versions(previous, current))

    inconsistencies.sort(key=lambda i: (str(i.subject_entity_id), i.version1, KIND_ORDER.index(i.kind)))
    return inconsistencies


def detect_event_conflicts(events: Iterable[TimelineEvent], tolerance_minutes: int = 30) -> List[EventConflict]:
    """Find participants placed at non-matching locations at about the same time.

    Events without a known time or location are ignored.
    """
    tolerance = timedelta(minutes=tolerance_minutes)
    by_participant: Dict[UUID, List[TimelineEvent]] = defaultdict(list)
    for event in events:
        if event.event_time is None or not event.location:
            continue
        for participant_id in set(event.participant_entity_ids):
            by_participant[participant_id].append(event)

    conflicts: List[EventConflict] = []
    for participant_id in sorted(by_participant, key=str):
        timeline = sorted(by_participant[participant_id], key=lambda e: (e.event_time, str(e.id)))
        for i, first in enumerate(timeline):
            for second in timeline[i + 1:]:
                gap = second.event_time - first.event_time
                if gap > tolerance:
                    break
                if locations_match(first.location, second.location):
                    continue
                both_exact = first.time_precision == second.time_precision == TimePrecision.EXACT
                conflicts.append(
                    EventConflict(
                        participant_entity_id=participant_id,
                        event1_id=first.id,
                        event2_id=second.id,
                        detail=(
                            f'Placed at "{first.location}" and "{second.location}" '
                            f"{int(gap.total_seconds() // 60)} minutes apart"
                        ),
                        severity=Severity.CRITICAL if both_exact and gap == timedelta(0) else Severity.SIGNIFICANT,
                    )
                )
    return conflicts


class AlibiTracker:
    """Records alibi drafts as new versions through the persistence adapter."""

    def __init__(self, adapter: "PersistenceAdapter"):
        self.adapter = adapter

    async def record_versions(
        self,
        case_id: UUID,
        drafts: List[AlibiDraft],
        resolver: "EntityResolver",
    ) -> Tuple[int, int, List[AlibiStatement]]:
        """Persist drafts in order, assigning the next version per subject.

        A draft identical to a stored version (same subject, window and
        location) resolves to that version and consumes no number.

        Returns:
            (created count, reused count, newly created statements)
        """
        created, reused = 0, 0
        new_statements: List[AlibiStatement] = []

        for draft in drafts:
            subject = resolver.lookup(draft.subject_name, EntityType.PERSON)
            if subject is None:
                LOGGER.warning(
                    "Alibi subject could not be resolved, skipping",
                    extra={"case_id": str(case_id), "subject": draft.subject_name},
                )
                continue

            corroborator_ids: List[UUID] = []
            for name in draft.corroborator_names:
                entity = resolver.lookup(name, EntityType.PERSON)
                if entity is not None and entity.id != subject.id and entity.id not in corroborator_ids:
                    corroborator_ids.append(entity.id)

            next_version = await self.adapter.max_alibi_version(case_id, subject.id) + 1
            statement = AlibiStatement(
                case_id=case_id,
                subject_entity_id=subject.id,
                version_number=next_version,
                statement_date=draft.statement_date,
                alibi_start=draft.alibi_start,
                alibi_end=draft.alibi_end,
                location_claimed=draft.location_claimed,
                activity_claimed=draft.activity_claimed,
                full_statement=draft.full_statement,
                corroborating_entity_ids=corroborator_ids,
                verification_status=draft.verification_status,
                confidence_score=draft.confidence_score,
                source_document_id=draft.source_document_id,
            )
            result = await self.adapter.upsert_alibi_version(statement, subject.name)

            if result.created:
                created += 1
                new_statements.append(statement.model_copy(update={"id": result.id}))
                LOGGER.info(
                    "Recorded alibi version",
                    extra={"case_id": str(case_id), "subject": subject.name, "version": next_version},
                )
            else:
                reused += 1

        return created, reused, new_statements
