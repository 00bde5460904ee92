"""Entity typing and display defaults."""

from casegraph.models.case_models import CandidateCategory, EntityType

# Dates never become entities, so DATE is absent on purpose.
CATEGORY_TO_ENTITY_TYPE = {
    CandidateCategory.PERSON: EntityType.PERSON,
    CandidateCategory.LOCATION: EntityType.LOCATION,
    CandidateCategory.ORGANIZATION: EntityType.ORGANIZATION,
    CandidateCategory.VEHICLE: EntityType.VEHICLE,
    CandidateCategory.EVIDENCE: EntityType.EVIDENCE,
    CandidateCategory.COMMUNICATION: EntityType.OTHER,
    CandidateCategory.FINANCIAL: EntityType.OTHER,
}

ENTITY_PALETTE = {
    EntityType.PERSON: ("#3B82F6", "user"),
    EntityType.LOCATION: ("#10B981", "map-pin"),
    EntityType.EVIDENCE: ("#8B5CF6", "package"),
    EntityType.VEHICLE: ("#F59E0B", "car"),
    EntityType.ORGANIZATION: ("#EC4899", "building"),
    EntityType.OTHER: ("#6B7280", "circle"),
}

# Order used when a name is looked up without a type
LOOKUP_TYPE_ORDER = [
    EntityType.PERSON,
    EntityType.ORGANIZATION,
    EntityType.LOCATION,
    EntityType.VEHICLE,
    EntityType.EVIDENCE,
    EntityType.OTHER,
]
