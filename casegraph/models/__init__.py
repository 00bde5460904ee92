"""Pydantic models for case graph extraction."""

from casegraph.models.case_models import (
    AlibiDraft,
    AlibiStatement,
    AlibiVerificationStatus,
    Candidate,
    CandidateBundle,
    CandidateCategory,
    Connection,
    ConnectionConfidence,
    ConnectionDraft,
    DocumentInput,
    DocumentType,
    Entity,
    EntityResolution,
    EntityType,
    EventConflict,
    EventDraft,
    EventType,
    EventVerificationStatus,
    Inconsistency,
    InconsistencyKind,
    PipelineResult,
    ReviewArtifactType,
    ReviewItem,
    Section,
    SectionType,
    Severity,
    TimelineEvent,
    TimePrecision,
    UpsertResult,
)

__all__ = [
    "AlibiDraft",
    "AlibiStatement",
    "AlibiVerificationStatus",
    "Candidate",
    "CandidateBundle",
    "CandidateCategory",
    "Connection",
    "ConnectionConfidence",
    "ConnectionDraft",
    "DocumentInput",
    "DocumentType",
    "Entity",
    "EntityResolution",
    "EntityType",
    "EventConflict",
    "EventDraft",
    "EventType",
    "EventVerificationStatus",
    "Inconsistency",
    "InconsistencyKind",
    "PipelineResult",
    "ReviewArtifactType",
    "ReviewItem",
    "Section",
    "SectionType",
    "Severity",
    "TimelineEvent",
    "TimePrecision",
    "UpsertResult",
]
