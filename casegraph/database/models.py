"""SQLAlchemy models for the case graph tables.

Every table carries a ``dedup_key`` unique within its case; writes select by
that key first, which is what makes re-processing a batch a no-op.
"""

import uuid
from datetime import datetime

from sqlalchemy import Integer, String, Text, TIMESTAMP, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from casegraph.database.base import Base


class CaseEntityRecord(Base):
    """A person, place, item, vehicle or organization in a case."""

    __tablename__ = "case_entities"
    __table_args__ = (UniqueConstraint("case_id", "dedup_key", name="uq_case_entities_dedup"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    case_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    dedup_key: Mapped[str] = mapped_column(String(32), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(32), nullable=False)  # person | location | evidence | vehicle | organization | other
    name: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str | None] = mapped_column(String(64), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    confidence: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    color: Mapped[str | None] = mapped_column(String(16), nullable=True)
    icon: Mapped[str | None] = mapped_column(String(32), nullable=True)
    attributes: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    first_seen_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default="NOW()")


class TimelineEventRecord(Base):
    """A dated (or undatable) occurrence in a case."""

    __tablename__ = "timeline_events"
    __table_args__ = (UniqueConstraint("case_id", "dedup_key", name="uq_timeline_events_dedup"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    case_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    dedup_key: Mapped[str] = mapped_column(String(32), nullable=False)
    event_type: Mapped[str] = mapped_column(String(32), nullable=False, default="other")
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    event_time: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    time_precision: Mapped[str] = mapped_column(String(16), nullable=False, default="unknown")
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    participant_entity_ids: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    verification_status: Mapped[str] = mapped_column(String(16), nullable=False, default="unverified")
    confidence_score: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    source_document_id: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default="NOW()")


class CaseConnectionRecord(Base):
    """A directed relationship between two case entities."""

    __tablename__ = "case_connections"
    __table_args__ = (UniqueConstraint("case_id", "dedup_key", name="uq_case_connections_dedup"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    case_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    dedup_key: Mapped[str] = mapped_column(String(32), nullable=False)
    from_entity_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    to_entity_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    connection_type: Mapped[str] = mapped_column(String(64), nullable=False)
    label: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    confidence: Mapped[str] = mapped_column(String(16), nullable=False, default="unverified")
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default="NOW()")


class AlibiEntryRecord(Base):
    """One immutable version of a subject's alibi."""

    __tablename__ = "alibi_entries"
    __table_args__ = (
        UniqueConstraint("case_id", "dedup_key", name="uq_alibi_entries_dedup"),
        UniqueConstraint("case_id", "subject_entity_id", "version_number", name="uq_alibi_entries_version"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    case_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    dedup_key: Mapped[str] = mapped_column(String(32), nullable=False)
    subject_entity_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    version_number: Mapped[int] = mapped_column(Integer, nullable=False)
    statement_date: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    alibi_start: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    alibi_end: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    location_claimed: Mapped[str | None] = mapped_column(Text, nullable=True)
    activity_claimed: Mapped[str | None] = mapped_column(Text, nullable=True)
    full_statement: Mapped[str | None] = mapped_column(Text, nullable=True)
    corroborating_entity_ids: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    verification_status: Mapped[str] = mapped_column(String(16), nullable=False, default="unverified")
    confidence_score: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    source_document_id: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default="NOW()")
