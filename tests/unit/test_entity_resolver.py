"""Unit tests for EntityResolver."""

from uuid import uuid4

import pytest

from casegraph.models.case_models import Candidate, CandidateCategory, Entity, EntityType
from casegraph.services.entity.resolver import EntityResolver


def _candidate(value: str, category: CandidateCategory = CandidateCategory.PERSON, score: int = 90, **attributes):
    return Candidate(
        category=category,
        original_text=value,
        normalized_value=value,
        confidence_score=score,
        source_document_id="doc-1",
        attributes=attributes,
    )


@pytest.fixture
def resolver():
    return EntityResolver(uuid4(), min_confidence=60)


class TestResolve:
    """Tests for exact-match resolution."""

    def test_same_name_resolves_to_one_entity(self, resolver):
        """Test case-insensitive equal names share an id."""
        resolutions = resolver.resolve([_candidate("John Smith"), _candidate("JOHN  smith")])

        assert len(resolutions) == 2
        assert resolutions[0].entity_id == resolutions[1].entity_id
        assert [r.created for r in resolutions] == [True, False]
        assert len(resolver.pending_entities) == 1

    def test_type_is_part_of_identity(self, resolver):
        resolutions = resolver.resolve(
            [_candidate("Jordan"), _candidate("Jordan", CandidateCategory.LOCATION)]
        )

        assert resolutions[0].entity_id != resolutions[1].entity_id

    def test_dates_and_low_confidence_skipped(self, resolver):
        """Test dates never become entities and the confidence floor applies."""
        resolutions = resolver.resolve(
            [_candidate("2024-03-15", CandidateCategory.DATE), _candidate("Maybe Person", score=40)]
        )

        assert resolutions == []
        assert resolver.pending_entities == []

    def test_role_and_palette_applied(self, resolver):
        resolver.resolve([_candidate("Maria Lopez", role="witness", title="Ms.")])

        entity = resolver.pending_entities[0]
        assert entity.role == "witness"
        assert entity.color == "#3B82F6"
        assert entity.icon == "user"
        assert entity.attributes["title"] == "Ms."
        assert entity.attributes["source_document_id"] == "doc-1"

    def test_unknown_role_dropped(self, resolver):
        resolver.resolve([_candidate("Maria Lopez", role="unknown")])

        assert resolver.pending_entities[0].role is None

    def test_primed_entities_reused(self, resolver):
        """Test entities already in the store are reused, not recreated."""
        existing = Entity(case_id=resolver.case_id, entity_type=EntityType.PERSON, name="John Smith")

        resolutions = resolver.resolve([_candidate("john smith")], existing_entities=[existing])

        assert resolutions[0].entity_id == existing.id
        assert resolutions[0].created is False
        assert resolver.pending_entities == []


class TestLookupAndConfirm:

    def test_lookup_without_type_prefers_person(self, resolver):
        resolver.resolve([_candidate("Jordan", CandidateCategory.LOCATION), _candidate("Jordan")])

        assert resolver.lookup("jordan").entity_type == EntityType.PERSON
        assert resolver.lookup("Jordan", EntityType.LOCATION).entity_type == EntityType.LOCATION
        assert resolver.lookup("Nobody") is None
        assert resolver.lookup("") is None

    def test_confirm_repoints_to_stored_id(self, resolver):
        """Test a store-side collision repoints later lookups."""
        resolver.resolve([_candidate("John Smith")])
        pending = resolver.pending_entities[0]
        stored_id = uuid4()

        resolver.confirm(pending, stored_id)

        assert resolver.pending_entities == []
        assert resolver.lookup("John Smith").id == stored_id
        assert resolver.resolve_name("John Smith", EntityType.PERSON) == (stored_id, False)


class TestNearDuplicates:

    def test_similar_names_flagged_not_merged(self, resolver):
        """Test near-duplicates stay separate entities."""
        resolver.resolve([_candidate("John Smith"), _candidate("Jon Smith"), _candidate("Mark Evans")])

        pairs = resolver.near_duplicates()

        assert len(resolver.pending_entities) == 3
        assert len(pairs) == 1
        first, second, score = pairs[0]
        assert {first.name, second.name} == {"John Smith", "Jon Smith"}
        assert score >= 85

    def test_old_pairs_not_reflagged(self, resolver):
        """Test pairs made only of primed entities are ignored."""
        resolver.prime(
            [
                Entity(case_id=resolver.case_id, entity_type=EntityType.PERSON, name="John Smith"),
                Entity(case_id=resolver.case_id, entity_type=EntityType.PERSON, name="Jon Smith"),
            ]
        )

        assert resolver.near_duplicates() == []
