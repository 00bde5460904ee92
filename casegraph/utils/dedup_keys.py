"""Stable deduplication keys for persisted graph artifacts.

Every key is a SHA256 hash of lower-cased, pipe-joined identifying parts,
truncated to 32 hex characters. Two artifacts with the same key are the same
artifact as far as the store is concerned, which is what makes re-running a
batch a no-op.
"""

import hashlib
import re
from datetime import datetime
from typing import Optional

_WHITESPACE = re.compile(r"\s+")


def _hash_parts(*parts: str) -> str:
    key_input = "|".join(parts).lower()
    return hashlib.sha256(key_input.encode()).hexdigest()[:32]


def normalize_key_text(value: Optional[str]) -> str:
    """Collapse whitespace and lower-case a text value for key building."""
    if not value:
        return ""
    return _WHITESPACE.sub(" ", value).strip().lower()


def _iso_or_none(value: Optional[datetime]) -> str:
    return value.isoformat() if value is not None else "none"


def entity_key(name: str, entity_type: str) -> str:
    """Key for an entity: name + type."""
    return _hash_parts(normalize_key_text(name), entity_type)


def event_key(title: str, event_time: Optional[datetime], description: Optional[str]) -> str:
    """Key for a timeline event: normalized title + ISO time + description prefix."""
    return _hash_parts(
        normalize_key_text(title),
        _iso_or_none(event_time),
        normalize_key_text(description)[:100],
    )


def connection_key(from_name: str, to_name: str, connection_type: str, label: Optional[str]) -> str:
    """Key for a connection: endpoint names + type + label."""
    return _hash_parts(
        normalize_key_text(from_name),
        normalize_key_text(to_name),
        connection_type,
        normalize_key_text(label),
    )


def alibi_key(
    subject_name: str,
    alibi_start: Optional[datetime],
    alibi_end: Optional[datetime],
    location_claimed: Optional[str],
) -> str:
    """Key for an alibi version: subject + claimed window + claimed location."""
    return _hash_parts(
        normalize_key_text(subject_name),
        _iso_or_none(alibi_start),
        _iso_or_none(alibi_end),
        normalize_key_text(location_claimed),
    )
