"""Storage contract for the case graph."""

from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from casegraph.models.case_models import AlibiStatement, Connection, Entity, TimelineEvent, UpsertResult


class GraphStore(ABC):
    """Authoritative store for one or more cases.

    Every upsert is keyed by a dedup key unique within the case. When the key
    already exists nothing is written and the stored identifier is returned
    with ``created=False``.
    """

    @abstractmethod
    async def get_entities(self, case_id: UUID) -> List[Entity]:
        ...

    @abstractmethod
    async def get_timeline_events(self, case_id: UUID) -> List[TimelineEvent]:
        ...

    @abstractmethod
    async def get_connections(self, case_id: UUID) -> List[Connection]:
        ...

    @abstractmethod
    async def get_alibis(self, case_id: UUID) -> List[AlibiStatement]:
        ...

    @abstractmethod
    async def max_alibi_version(self, case_id: UUID, subject_entity_id: UUID) -> int:
        """Highest stored version for the subject, 0 when there is none."""

    @abstractmethod
    async def upsert_entity(self, dedup_key: str, entity: Entity) -> UpsertResult:
        ...

    @abstractmethod
    async def upsert_timeline_event(self, dedup_key: str, event: TimelineEvent) -> UpsertResult:
        ...

    @abstractmethod
    async def upsert_connection(self, dedup_key: str, connection: Connection) -> UpsertResult:
        ...

    @abstractmethod
    async def upsert_alibi_version(self, dedup_key: str, statement: AlibiStatement) -> UpsertResult:
        """Insert a new alibi version unless the dedup key exists.

        The store assigns the final version number (stored maximum + 1) when
        it inserts, so numbers stay contiguous even under concurrent writers.
        """
