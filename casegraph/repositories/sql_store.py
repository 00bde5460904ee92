"""SQLAlchemy-backed graph store."""

from typing import Any, Callable, Dict, List, Optional, Type
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from casegraph.core.exceptions import StoreError
from casegraph.database.models import (
    AlibiEntryRecord,
    CaseConnectionRecord,
    CaseEntityRecord,
    TimelineEventRecord,
)
from casegraph.models.case_models import (
    AlibiStatement,
    Connection,
    Entity,
    TimelineEvent,
    UpsertResult,
)
from casegraph.repositories.base_repository import BaseRepository
from casegraph.repositories.graph_store import GraphStore
from casegraph.utils.logging import get_logger

LOGGER = get_logger(__name__)

SessionFactory = Callable[[], Any]


def _uuid_list(values: List[Any]) -> List[UUID]:
    return [UUID(str(value)) for value in values or []]


class SqlGraphStore(GraphStore):
    """GraphStore over the case graph tables.

    Each call runs in its own session. An upsert selects by (case, dedup key)
    and inserts only when nothing is found; a unique-constraint violation
    from a concurrent writer is resolved by selecting again.

    Attributes:
        session_factory: Callable returning an async context manager that
            yields an AsyncSession (e.g. ``async_session_maker``)
    """

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_entities(self, case_id: UUID) -> List[Entity]:
        records = await self._list(CaseEntityRecord, case_id)
        return [
            Entity(
                id=r.id,
                case_id=r.case_id,
                entity_type=r.entity_type,
                name=r.name,
                role=r.role,
                description=r.description,
                confidence=r.confidence,
                first_seen_at=r.first_seen_at,
                color=r.color,
                icon=r.icon,
                attributes=r.attributes or {},
            )
            for r in records
        ]

    async def get_timeline_events(self, case_id: UUID) -> List[TimelineEvent]:
        records = await self._list(TimelineEventRecord, case_id)
        return [
            TimelineEvent(
                id=r.id,
                case_id=r.case_id,
                event_type=r.event_type,
                title=r.title,
                description=r.description,
                event_time=r.event_time,
                time_precision=r.time_precision,
                location=r.location,
                participant_entity_ids=_uuid_list(r.participant_entity_ids),
                verification_status=r.verification_status,
                confidence_score=r.confidence_score,
                source_document_id=r.source_document_id,
            )
            for r in records
        ]

    async def get_connections(self, case_id: UUID) -> List[Connection]:
        records = await self._list(CaseConnectionRecord, case_id)
        return [
            Connection(
                id=r.id,
                case_id=r.case_id,
                from_entity_id=r.from_entity_id,
                to_entity_id=r.to_entity_id,
                connection_type=r.connection_type,
                label=r.label,
                description=r.description,
                confidence=r.confidence,
            )
            for r in records
        ]

    async def get_alibis(self, case_id: UUID) -> List[AlibiStatement]:
        records = await self._list(AlibiEntryRecord, case_id)
        return [
            AlibiStatement(
                id=r.id,
                case_id=r.case_id,
                subject_entity_id=r.subject_entity_id,
                version_number=r.version_number,
                statement_date=r.statement_date,
                alibi_start=r.alibi_start,
                alibi_end=r.alibi_end,
                location_claimed=r.location_claimed,
                activity_claimed=r.activity_claimed,
                full_statement=r.full_statement,
                corroborating_entity_ids=_uuid_list(r.corroborating_entity_ids),
                verification_status=r.verification_status,
                confidence_score=r.confidence_score,
                source_document_id=r.source_document_id,
            )
            for r in records
        ]

    async def max_alibi_version(self, case_id: UUID, subject_entity_id: UUID) -> int:
        try:
            async with self.session_factory() as session:
                repo = BaseRepository(session, AlibiEntryRecord)
                value = await repo.max_value("version_number", case_id=case_id, subject_entity_id=subject_entity_id)
                return int(value or 0)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read alibi versions for case {case_id}", e) from e

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def upsert_entity(self, dedup_key: str, entity: Entity) -> UpsertResult:
        return await self._upsert(
            CaseEntityRecord,
            entity.case_id,
            dedup_key,
            {
                "id": entity.id,
                "entity_type": entity.entity_type.value,
                "name": entity.name,
                "role": entity.role,
                "description": entity.description,
                "confidence": entity.confidence,
                "color": entity.color,
                "icon": entity.icon,
                "attributes": entity.attributes,
                "first_seen_at": entity.first_seen_at,
            },
        )

    async def upsert_timeline_event(self, dedup_key: str, event: TimelineEvent) -> UpsertResult:
        return await self._upsert(
            TimelineEventRecord,
            event.case_id,
            dedup_key,
            {
                "id": event.id,
                "event_type": event.event_type.value,
                "title": event.title,
                "description": event.description,
                "event_time": event.event_time,
                "time_precision": event.time_precision.value,
                "location": event.location,
                "participant_entity_ids": [str(pid) for pid in event.participant_entity_ids],
                "verification_status": event.verification_status.value,
                "confidence_score": event.confidence_score,
                "source_document_id": event.source_document_id,
            },
        )

    async def upsert_connection(self, dedup_key: str, connection: Connection) -> UpsertResult:
        return await self._upsert(
            CaseConnectionRecord,
            connection.case_id,
            dedup_key,
            {
                "id": connection.id,
                "from_entity_id": connection.from_entity_id,
                "to_entity_id": connection.to_entity_id,
                "connection_type": connection.connection_type,
                "label": connection.label,
                "description": connection.description,
                "confidence": connection.confidence.value,
            },
        )

    async def upsert_alibi_version(self, dedup_key: str, statement: AlibiStatement) -> UpsertResult:
        values = {
            "id": statement.id,
            "subject_entity_id": statement.subject_entity_id,
            "statement_date": statement.statement_date,
            "alibi_start": statement.alibi_start,
            "alibi_end": statement.alibi_end,
            "location_claimed": statement.location_claimed,
            "activity_claimed": statement.activity_claimed,
            "full_statement": statement.full_statement,
            "corroborating_entity_ids": [str(cid) for cid in statement.corroborating_entity_ids],
            "verification_status": statement.verification_status.value,
            "confidence_score": statement.confidence_score,
            "source_document_id": statement.source_document_id,
        }

        async def next_version(repo: BaseRepository) -> Dict[str, Any]:
            current = await repo.max_value(
                "version_number",
                case_id=statement.case_id,
                subject_entity_id=statement.subject_entity_id,
            )
            return {"version_number": int(current or 0) + 1}

        return await self._upsert(AlibiEntryRecord, statement.case_id, dedup_key, values, next_version)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _list(self, model: Type, case_id: UUID) -> List[Any]:
        try:
            async with self.session_factory() as session:
                return await BaseRepository(session, model).list_by_case(case_id)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read {model.__tablename__} for case {case_id}", e) from e

    async def _upsert(
        self,
        model: Type,
        case_id: UUID,
        dedup_key: str,
        values: Dict[str, Any],
        extra_values: Optional[Callable] = None,
    ) -> UpsertResult:
        try:
            async with self.session_factory() as session:
                repo = BaseRepository(session, model)
                existing = await repo.get_by_dedup_key(case_id, dedup_key)
                if existing is not None:
                    return UpsertResult(id=existing.id, created=False)

                row = dict(values)
                if extra_values is not None:
                    row.update(await extra_values(repo))
                try:
                    record = await repo.create(case_id=case_id, dedup_key=dedup_key, **row)
                except IntegrityError as e:
                    await session.rollback()
                    existing = await repo.get_by_dedup_key(case_id, dedup_key)
                    if existing is not None:
                        return UpsertResult(id=existing.id, created=False)
                    raise StoreError(f"Conflicting write to {model.__tablename__}", e) from e

                return UpsertResult(id=record.id, created=True)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to upsert into {model.__tablename__}", e) from e
