"""Unit tests for InMemoryGraphStore."""

from uuid import uuid4

import pytest

from casegraph.models.case_models import AlibiStatement, Entity, EntityType
from casegraph.repositories.memory_store import InMemoryGraphStore


@pytest.fixture
def store():
    return InMemoryGraphStore()


class TestInMemoryGraphStore:

    @pytest.mark.asyncio
    async def test_duplicate_key_returns_stored_id(self, store):
        case_id = uuid4()
        first = Entity(case_id=case_id, entity_type=EntityType.PERSON, name="John Smith")
        second = Entity(case_id=case_id, entity_type=EntityType.PERSON, name="John Smith")

        created = await store.upsert_entity("key-1", first)
        repeated = await store.upsert_entity("key-1", second)

        assert (created.id, created.created) == (first.id, True)
        assert (repeated.id, repeated.created) == (first.id, False)
        assert len(await store.get_entities(case_id)) == 1

    @pytest.mark.asyncio
    async def test_keys_scoped_by_case(self, store):
        case_a, case_b = uuid4(), uuid4()
        await store.upsert_entity("key-1", Entity(case_id=case_a, entity_type=EntityType.PERSON, name="A"))
        result = await store.upsert_entity("key-1", Entity(case_id=case_b, entity_type=EntityType.PERSON, name="A"))

        assert result.created is True
        assert len(await store.get_entities(case_a)) == 1

    @pytest.mark.asyncio
    async def test_store_assigns_alibi_versions(self, store):
        """Test the stored version is max + 1 whatever the caller proposed."""
        case_id, subject = uuid4(), uuid4()
        for key in ("a", "b"):
            await store.upsert_alibi_version(
                key, AlibiStatement(case_id=case_id, subject_entity_id=subject, version_number=1)
            )

        versions = sorted(a.version_number for a in await store.get_alibis(case_id))

        assert versions == [1, 2]
        assert await store.max_alibi_version(case_id, subject) == 2
        assert await store.max_alibi_version(case_id, uuid4()) == 0
