"""Data models for case knowledge-graph extraction.

This module defines the structures flowing through the extraction pipeline:
input documents, ephemeral candidates, name-referencing drafts, and the
persisted graph artifacts (entities, timeline events, connections and
versioned alibi statements) together with the derived inconsistency reports.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DocumentType(str, Enum):
    """Kinds of investigative documents."""

    POLICE_REPORT = "police_report"
    WITNESS_STATEMENT = "witness_statement"
    INTERVIEW = "interview"
    EVIDENCE_LOG = "evidence_log"
    MEDICAL_REPORT = "medical_report"
    FINANCIAL_RECORD = "financial_record"
    COMMUNICATION_RECORD = "communication_record"
    SURVEILLANCE_REPORT = "surveillance_report"
    GENERAL_DOCUMENT = "general_document"


class SectionType(str, Enum):
    SUMMARY = "summary"
    INCIDENT_DETAILS = "incident_details"
    WITNESS_INFO = "witness_info"
    SUSPECT_INFO = "suspect_info"
    EVIDENCE = "evidence"
    TIMELINE = "timeline"
    RECOMMENDATIONS = "recommendations"
    CONCLUSIONS = "conclusions"
    GENERAL = "general"


class CandidateCategory(str, Enum):
    """Categories produced by the fact extractors."""

    DATE = "date"
    LOCATION = "location"
    PERSON = "person"
    ORGANIZATION = "organization"
    VEHICLE = "vehicle"
    COMMUNICATION = "communication"
    FINANCIAL = "financial"
    EVIDENCE = "evidence"


class EntityType(str, Enum):
    PERSON = "person"
    LOCATION = "location"
    EVIDENCE = "evidence"
    VEHICLE = "vehicle"
    ORGANIZATION = "organization"
    OTHER = "other"


class EventType(str, Enum):
    VICTIM_ACTION = "victim_action"
    SUSPECT_MOVEMENT = "suspect_movement"
    WITNESS_ACCOUNT = "witness_account"
    EVIDENCE_FOUND = "evidence_found"
    PHONE_CALL = "phone_call"
    TRANSACTION = "transaction"
    SIGHTING = "sighting"
    OTHER = "other"


class TimePrecision(str, Enum):
    EXACT = "exact"
    APPROXIMATE = "approximate"
    ESTIMATED = "estimated"
    UNKNOWN = "unknown"


class EventVerificationStatus(str, Enum):
    VERIFIED = "verified"
    UNVERIFIED = "unverified"
    DISPUTED = "disputed"
    FALSE = "false"


class AlibiVerificationStatus(str, Enum):
    VERIFIED = "verified"
    PARTIAL = "partial"
    UNVERIFIED = "unverified"
    CONTRADICTED = "contradicted"
    FALSE = "false"


class ConnectionConfidence(str, Enum):
    CONFIRMED = "confirmed"
    PROBABLE = "probable"
    POSSIBLE = "possible"
    UNVERIFIED = "unverified"


class InconsistencyKind(str, Enum):
    """Fields compared between adjacent alibi versions, in report order."""

    LOCATION = "location"
    ACTIVITY = "activity"
    TIME = "time"
    CORROBORATION = "corroboration"


class Severity(str, Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    SIGNIFICANT = "significant"
    CRITICAL = "critical"


class ReviewArtifactType(str, Enum):
    ENTITY = "entity"
    EVENT = "event"
    ALIBI = "alibi"
    INCONSISTENCY = "inconsistency"
    EVENT_CONFLICT = "event_conflict"


# ---------------------------------------------------------------------------
# Inputs and ephemeral extraction output
# ---------------------------------------------------------------------------


class DocumentInput(BaseModel):
    """A raw document handed to the pipeline."""

    document_id: str = Field(..., description="Stable identifier of the source document")
    filename: str = Field(default="", description="Original file name, used as a classification hint")
    document_type: Optional[DocumentType] = Field(
        None, description="Caller-supplied type; the classifier result is used when absent"
    )
    raw_text: str = Field(default="", description="Unnormalized document text")


class Section(BaseModel):
    """A titled, typed slice of a normalized document."""

    title: str
    section_type: SectionType = SectionType.GENERAL
    start_index: int = Field(..., ge=0)
    end_index: int = Field(..., ge=0)
    content: str


class Candidate(BaseModel):
    """A possible fact found by an extractor. Never persisted directly."""

    category: CandidateCategory
    original_text: str
    normalized_value: str
    context_window: str = ""
    confidence_score: int = Field(..., ge=0, le=100)
    source_document_id: str
    start: int = Field(default=0, ge=0, description="Offset of the match in the normalized document")
    end: int = Field(default=0, ge=0)
    attributes: Dict[str, Any] = Field(default_factory=dict)


class EventDraft(BaseModel):
    """A timeline event that still references participants by name."""

    title: str
    description: str = ""
    event_type: EventType = EventType.OTHER
    event_time: Optional[datetime] = None
    time_precision: TimePrecision = TimePrecision.UNKNOWN
    location: Optional[str] = None
    participant_names: List[str] = Field(default_factory=list)
    verification_status: EventVerificationStatus = EventVerificationStatus.UNVERIFIED
    confidence_score: int = Field(default=50, ge=0, le=100)
    source_document_id: Optional[str] = None


class ConnectionDraft(BaseModel):
    """A relationship between two entities referenced by name."""

    from_name: str
    to_name: str
    from_type: Optional[EntityType] = None
    to_type: Optional[EntityType] = None
    connection_type: str
    label: Optional[str] = None
    description: Optional[str] = None
    confidence: ConnectionConfidence = ConnectionConfidence.UNVERIFIED


class AlibiDraft(BaseModel):
    """An alibi claim whose subject and corroborators are still names."""

    subject_name: str
    statement_date: Optional[datetime] = None
    alibi_start: Optional[datetime] = None
    alibi_end: Optional[datetime] = None
    location_claimed: Optional[str] = None
    activity_claimed: Optional[str] = None
    full_statement: Optional[str] = None
    corroborator_names: List[str] = Field(default_factory=list)
    verification_status: AlibiVerificationStatus = AlibiVerificationStatus.UNVERIFIED
    confidence_score: int = Field(default=50, ge=0, le=100)
    source_document_id: Optional[str] = None


class CandidateBundle(BaseModel):
    """Everything one candidate source produced for one document."""

    document_id: str
    document_type: DocumentType = DocumentType.GENERAL_DOCUMENT
    candidates: List[Candidate] = Field(default_factory=list)
    events: List[EventDraft] = Field(default_factory=list)
    connections: List[ConnectionDraft] = Field(default_factory=list)
    alibis: List[AlibiDraft] = Field(default_factory=list)
    source: str = Field(default="pattern", description="'pattern' or 'llm'")
    fallback_reason: Optional[str] = Field(None, description="Why the language-model source was not used")


# ---------------------------------------------------------------------------
# Persisted graph artifacts
# ---------------------------------------------------------------------------


class Entity(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    case_id: UUID
    entity_type: EntityType
    name: str = Field(..., min_length=1)
    role: Optional[str] = None
    description: Optional[str] = None
    confidence: int = Field(default=50, ge=0, le=100)
    first_seen_at: datetime = Field(default_factory=utc_now)
    color: Optional[str] = None
    icon: Optional[str] = None
    attributes: Dict[str, Any] = Field(default_factory=dict)


class TimelineEvent(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    case_id: UUID
    event_type: EventType = EventType.OTHER
    title: str
    description: str = ""
    event_time: Optional[datetime] = Field(None, description="Timezone-aware UTC instant, or None when unknown")
    time_precision: TimePrecision = TimePrecision.UNKNOWN
    location: Optional[str] = None
    participant_entity_ids: List[UUID] = Field(default_factory=list)
    verification_status: EventVerificationStatus = EventVerificationStatus.UNVERIFIED
    confidence_score: int = Field(default=50, ge=0, le=100)
    source_document_id: Optional[str] = None


class Connection(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    case_id: UUID
    from_entity_id: UUID
    to_entity_id: UUID
    connection_type: str
    label: Optional[str] = None
    description: Optional[str] = None
    confidence: ConnectionConfidence = ConnectionConfidence.UNVERIFIED


class AlibiStatement(BaseModel):
    """One immutable version of a subject's account of their whereabouts."""

    id: UUID = Field(default_factory=uuid4)
    case_id: UUID
    subject_entity_id: UUID
    version_number: int = Field(..., ge=1)
    statement_date: Optional[datetime] = None
    alibi_start: Optional[datetime] = None
    alibi_end: Optional[datetime] = None
    location_claimed: Optional[str] = None
    activity_claimed: Optional[str] = None
    full_statement: Optional[str] = None
    corroborating_entity_ids: List[UUID] = Field(default_factory=list)
    verification_status: AlibiVerificationStatus = AlibiVerificationStatus.UNVERIFIED
    confidence_score: int = Field(default=50, ge=0, le=100)
    source_document_id: Optional[str] = None


class UpsertResult(BaseModel):
    """Outcome of an idempotent store write."""

    id: UUID
    created: bool


# ---------------------------------------------------------------------------
# Derived reports
# ---------------------------------------------------------------------------


class Inconsistency(BaseModel):
    """A field that changed between two adjacent alibi versions."""

    subject_entity_id: UUID
    version1: int
    version2: int
    kind: InconsistencyKind
    detail: str
    severity: Severity = Severity.MODERATE


class EventConflict(BaseModel):
    """One participant placed at two non-matching locations at about the same time."""

    participant_entity_id: UUID
    event1_id: UUID
    event2_id: UUID
    detail: str
    severity: Severity = Severity.SIGNIFICANT


class ReviewItem(BaseModel):
    case_id: UUID
    artifact_type: ReviewArtifactType
    artifact_id: Optional[UUID] = None
    reason: str
    detail: str = ""
    confidence_score: Optional[int] = None
    severity: Optional[Severity] = None


class EntityResolution(BaseModel):
    """Which entity a candidate resolved to and whether it was new."""

    entity_id: UUID
    created: bool
    candidate: Candidate


class PipelineResult(BaseModel):
    """Summary of one (case, document batch) run."""

    case_id: UUID
    document_types: Dict[str, DocumentType] = Field(default_factory=dict)
    failed_documents: List[str] = Field(default_factory=list)
    fallback_documents: List[str] = Field(default_factory=list)
    entities_created: int = 0
    entities_reused: int = 0
    events_created: int = 0
    events_reused: int = 0
    connections_created: int = 0
    connections_reused: int = 0
    alibis_created: int = 0
    alibis_reused: int = 0
    inconsistencies: List[Inconsistency] = Field(default_factory=list)
    event_conflicts: List[EventConflict] = Field(default_factory=list)
    review_items: List[ReviewItem] = Field(default_factory=list)

    @property
    def total_created(self) -> int:
        return self.entities_created + self.events_created + self.connections_created + self.alibis_created
