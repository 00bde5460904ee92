"""In-process graph store, used by tests and single-process runs."""

from collections import defaultdict
from typing import Dict, List, Tuple
from uuid import UUID

from casegraph.models.case_models import AlibiStatement, Connection, Entity, TimelineEvent, UpsertResult
from casegraph.repositories.graph_store import GraphStore


class InMemoryGraphStore(GraphStore):
    """Dictionary-backed GraphStore.

    Upserts contain no awaits, so each one is atomic with respect to other
    coroutines on the same event loop.
    """

    def __init__(self):
        self.entities: Dict[Tuple[UUID, str], Entity] = {}
        self.events: Dict[Tuple[UUID, str], TimelineEvent] = {}
        self.connections: Dict[Tuple[UUID, str], Connection] = {}
        self.alibis: Dict[Tuple[UUID, str], AlibiStatement] = {}
        self._alibi_versions: Dict[Tuple[UUID, UUID], int] = defaultdict(int)

    async def get_entities(self, case_id: UUID) -> List[Entity]:
        return [e for (cid, _), e in self.entities.items() if cid == case_id]

    async def get_timeline_events(self, case_id: UUID) -> List[TimelineEvent]:
        return [e for (cid, _), e in self.events.items() if cid == case_id]

    async def get_connections(self, case_id: UUID) -> List[Connection]:
        return [c for (cid, _), c in self.connections.items() if cid == case_id]

    async def get_alibis(self, case_id: UUID) -> List[AlibiStatement]:
        return [a for (cid, _), a in self.alibis.items() if cid == case_id]

    async def max_alibi_version(self, case_id: UUID, subject_entity_id: UUID) -> int:
        return self._alibi_versions[(case_id, subject_entity_id)]

    async def upsert_entity(self, dedup_key: str, entity: Entity) -> UpsertResult:
        return self._upsert(self.entities, entity.case_id, dedup_key, entity)

    async def upsert_timeline_event(self, dedup_key: str, event: TimelineEvent) -> UpsertResult:
        return self._upsert(self.events, event.case_id, dedup_key, event)

    async def upsert_connection(self, dedup_key: str, connection: Connection) -> UpsertResult:
        return self._upsert(self.connections, connection.case_id, dedup_key, connection)

    async def upsert_alibi_version(self, dedup_key: str, statement: AlibiStatement) -> UpsertResult:
        key = (statement.case_id, dedup_key)
        existing = self.alibis.get(key)
        if existing is not None:
            return UpsertResult(id=existing.id, created=False)

        version_key = (statement.case_id, statement.subject_entity_id)
        version = self._alibi_versions[version_key] + 1
        self._alibi_versions[version_key] = version
        self.alibis[key] = statement.model_copy(update={"version_number": version})
        return UpsertResult(id=statement.id, created=True)

    @staticmethod
    def _upsert(table: dict, case_id: UUID, dedup_key: str, item) -> UpsertResult:
        existing = table.get((case_id, dedup_key))
        if existing is not None:
            return UpsertResult(id=existing.id, created=False)
        table[(case_id, dedup_key)] = item
        return UpsertResult(id=item.id, created=True)
