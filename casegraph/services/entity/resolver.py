"""Entity resolution against a case's entity set.

Candidates resolve to an existing entity when the case-insensitive name and
the entity type match exactly; otherwise a new entity is created. There is
no fuzzy merging: similar but unequal names are only reported through
``near_duplicates`` so a reviewer can decide.
"""

from typing import Any, Dict, Iterable, List, Optional, Set, Tuple
from uuid import UUID

from rapidfuzz import fuzz

from casegraph.models.case_models import Candidate, Entity, EntityResolution, EntityType
from casegraph.services.entity.constants import CATEGORY_TO_ENTITY_TYPE, ENTITY_PALETTE, LOOKUP_TYPE_ORDER
from casegraph.utils.logging import get_logger

LOGGER = get_logger(__name__)

CacheKey = Tuple[EntityType, str]


def cache_key(name: str, entity_type: EntityType) -> CacheKey:
    return entity_type, " ".join(name.split()).lower()


class EntityResolver:
    """Resolves candidates to canonical entities within one case.

    The resolver keeps a batch cache primed from the store and a list of
    entities created during the batch. The pipeline flushes the pending list
    to the store at the end of the batch and reports back the stored ids.

    Attributes:
        case_id: Case the entities belong to
        min_confidence: Candidates scored below this are not turned into entities
        near_duplicate_threshold: rapidfuzz ratio at which two names are flagged
    """

    def __init__(self, case_id: UUID, min_confidence: int = 60, near_duplicate_threshold: float = 85.0):
        self.case_id = case_id
        self.min_confidence = min_confidence
        self.near_duplicate_threshold = near_duplicate_threshold
        self._cache: Dict[CacheKey, Entity] = {}
        self._pending: Dict[UUID, Entity] = {}
        self._created_keys: Set[CacheKey] = set()

    def prime(self, existing: Iterable[Entity]) -> None:
        """Load already-persisted entities into the batch cache."""
        count = 0
        for entity in existing:
            self._cache.setdefault(cache_key(entity.name, entity.entity_type), entity)
            count += 1
        LOGGER.debug("Primed resolver cache", extra={"case_id": str(self.case_id), "entities": count})

    def resolve(
        self,
        candidates: Iterable[Candidate],
        existing_entities: Optional[Iterable[Entity]] = None,
    ) -> List[EntityResolution]:
        """Resolve candidates to entity ids.

        Args:
            candidates: Candidates from one or more documents
            existing_entities: Entities to prime the cache with first

        Returns:
            One resolution per candidate that maps to an entity type and
            meets the confidence floor, in input order
        """
        if existing_entities is not None:
            self.prime(existing_entities)

        resolutions: List[EntityResolution] = []
        for candidate in candidates:
            entity_type = CATEGORY_TO_ENTITY_TYPE.get(candidate.category)
            if entity_type is None or candidate.confidence_score < self.min_confidence:
                continue
            if not candidate.normalized_value.strip():
                continue

            attributes = {
                key: value
                for key, value in candidate.attributes.items()
                if key not in ("role", "description") and value is not None
            }
            attributes["source_document_id"] = candidate.source_document_id
            attributes["category"] = candidate.category.value

            role = candidate.attributes.get("role")
            entity_id, created = self.resolve_name(
                candidate.normalized_value,
                entity_type,
                role=role if role and role != "unknown" else None,
                confidence=candidate.confidence_score,
                description=candidate.attributes.get("description"),
                attributes=attributes,
            )
            resolutions.append(EntityResolution(entity_id=entity_id, created=created, candidate=candidate))

        return resolutions

    def resolve_name(
        self,
        name: str,
        entity_type: EntityType,
        role: Optional[str] = None,
        confidence: int = 50,
        description: Optional[str] = None,
        attributes: Optional[Dict[str, Any]] = None,
    ) -> Tuple[UUID, bool]:
        """Resolve a bare name, creating the entity when it is new.

        Returns:
            (entity id, created) where created is True only for the call
            that created the entity
        """
        key = cache_key(name, entity_type)
        existing = self._cache.get(key)
        if existing is not None:
            return existing.id, False

        color, icon = ENTITY_PALETTE[entity_type]
        entity = Entity(
            case_id=self.case_id,
            entity_type=entity_type,
            name=" ".join(name.split()),
            role=role,
            description=description,
            confidence=confidence,
            color=color,
            icon=icon,
            attributes=attributes or {},
        )
        self._cache[key] = entity
        self._pending[entity.id] = entity
        self._created_keys.add(key)
        return entity.id, True

    def lookup(self, name: str, entity_type: Optional[EntityType] = None) -> Optional[Entity]:
        """Find a cached entity by name, optionally restricted to one type."""
        if not name:
            return None
        if entity_type is not None:
            return self._cache.get(cache_key(name, entity_type))
        for candidate_type in LOOKUP_TYPE_ORDER:
            entity = self._cache.get(cache_key(name, candidate_type))
            if entity is not None:
                return entity
        return None

    @property
    def pending_entities(self) -> List[Entity]:
        """Entities created in this batch and not yet confirmed by the store."""
        return list(self._pending.values())

    def confirm(self, entity: Entity, stored_id: UUID) -> None:
        """Record the id the store kept for a pending entity.

        When another writer created the same entity first, the store returns
        that entity's id and the cache is repointed to it.
        """
        self._pending.pop(entity.id, None)
        if stored_id != entity.id:
            self._cache[cache_key(entity.name, entity.entity_type)] = entity.model_copy(update={"id": stored_id})

    def near_duplicates(self) -> List[Tuple[Entity, Entity, float]]:
        """Pairs of same-type entities with similar but unequal names.

        Only pairs involving an entity created in this batch are reported,
        so re-running a batch does not re-flag old pairs.
        """
        by_type: Dict[EntityType, List[Entity]] = {}
        for entity in self._cache.values():
            by_type.setdefault(entity.entity_type, []).append(entity)

        pairs: List[Tuple[Entity, Entity, float]] = []
        for entity_type in LOOKUP_TYPE_ORDER:
            entities = sorted(by_type.get(entity_type, []), key=lambda e: e.name.lower())
            for i, first in enumerate(entities):
                for second in entities[i + 1:]:
                    first_key = cache_key(first.name, entity_type)
                    second_key = cache_key(second.name, entity_type)
                    if first_key not in self._created_keys and second_key not in self._created_keys:
                        continue
                    score = fuzz.ratio(first.name.lower(), second.name.lower())
                    if score >= self.near_duplicate_threshold:
                        pairs.append((first, second, score))
        return pairs
