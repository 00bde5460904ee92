"""Idempotent persistence adapter.

Wraps every GraphStore call in a timeout and a bounded retry loop with
exponential backoff, and computes the dedup key for each artifact so the
store can turn repeated writes into no-ops. A call that still fails after
the last attempt raises ``PersistenceError``, which aborts the batch.
"""

import asyncio
from typing import Any, Awaitable, Callable, List, TypeVar
from uuid import UUID

from casegraph.core.exceptions import PersistenceError, StoreError
from casegraph.models.case_models import AlibiStatement, Connection, Entity, TimelineEvent, UpsertResult
from casegraph.repositories.graph_store import GraphStore
from casegraph.utils.dedup_keys import alibi_key, connection_key, entity_key, event_key
from casegraph.utils.logging import get_logger

LOGGER = get_logger(__name__)

T = TypeVar("T")

RETRYABLE_ERRORS = (StoreError, asyncio.TimeoutError, ConnectionError, OSError)


class PersistenceAdapter:
    """Timeout/retry front for a GraphStore.

    Attributes:
        store: The authoritative store
        timeout_seconds: Deadline for each individual store call
        max_retries: Attempts per call before giving up
        retry_delay: Base delay for exponential backoff
    """

    def __init__(
        self,
        store: GraphStore,
        timeout_seconds: float = 10.0,
        max_retries: int = 3,
        retry_delay: float = 0.5,
    ):
        self.store = store
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    async def get_entities(self, case_id: UUID) -> List[Entity]:
        return await self._call("get_entities", self.store.get_entities, case_id)

    async def get_timeline_events(self, case_id: UUID) -> List[TimelineEvent]:
        return await self._call("get_timeline_events", self.store.get_timeline_events, case_id)

    async def get_connections(self, case_id: UUID) -> List[Connection]:
        return await self._call("get_connections", self.store.get_connections, case_id)

    async def get_alibis(self, case_id: UUID) -> List[AlibiStatement]:
        return await self._call("get_alibis", self.store.get_alibis, case_id)

    async def max_alibi_version(self, case_id: UUID, subject_entity_id: UUID) -> int:
        return await self._call("max_alibi_version", self.store.max_alibi_version, case_id, subject_entity_id)

    async def upsert_entity(self, entity: Entity) -> UpsertResult:
        key = entity_key(entity.name, entity.entity_type.value)
        return await self._call("upsert_entity", self.store.upsert_entity, key, entity)

    async def upsert_timeline_event(self, event: TimelineEvent) -> UpsertResult:
        key = event_key(event.title, event.event_time, event.description)
        return await self._call("upsert_timeline_event", self.store.upsert_timeline_event, key, event)

    async def upsert_connection(self, connection: Connection, from_name: str, to_name: str) -> UpsertResult:
        key = connection_key(from_name, to_name, connection.connection_type, connection.label)
        return await self._call("upsert_connection", self.store.upsert_connection, key, connection)

    async def upsert_alibi_version(self, statement: AlibiStatement, subject_name: str) -> UpsertResult:
        key = alibi_key(subject_name, statement.alibi_start, statement.alibi_end, statement.location_claimed)
        return await self._call("upsert_alibi_version", self.store.upsert_alibi_version, key, statement)

    async def _call(self, operation: str, func: Callable[..., Awaitable[T]], *args: Any) -> T:
        for attempt in range(self.max_retries):
            try:
                return await asyncio.wait_for(func(*args), timeout=self.timeout_seconds)
            except RETRYABLE_ERRORS as e:
                LOGGER.warning(
                    f"Store call {operation} failed (Attempt {attempt + 1}/{self.max_retries})",
                    extra={"operation": operation, "error": str(e) or type(e).__name__},
                )
                if attempt >= self.max_retries - 1:
                    raise PersistenceError(
                        f"Store call {operation} failed after {self.max_retries} attempts", e
                    ) from e
                await asyncio.sleep(self.retry_delay * (2 ** attempt))

        raise PersistenceError(f"Store call {operation} was not attempted")
