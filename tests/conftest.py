"""Pytest configuration and shared fixtures."""

import os

# Keep tests independent of any local .env
os.environ.setdefault("LLM_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from uuid import uuid4

import pytest

from casegraph.core.config import settings
from casegraph.models.case_models import DocumentInput
from casegraph.pipeline.case_pipeline import CaseExtractionPipeline, CaseLockRegistry
from casegraph.repositories.memory_store import InMemoryGraphStore


@pytest.fixture
def case_id():
    """A fresh case id per test."""
    return uuid4()


@pytest.fixture
def extraction_config():
    """Extraction settings with retries that do not sleep.

    Returns:
        ExtractionSettings: Copy of the defaults with zero retry delay
    """
    return settings.extraction.model_copy(update={"persistence_retry_delay": 0.0})


@pytest.fixture
def store() -> InMemoryGraphStore:
    """Empty in-memory graph store."""
    return InMemoryGraphStore()


@pytest.fixture
def pipeline(store, extraction_config) -> CaseExtractionPipeline:
    """Pipeline over the in-memory store with its own lock registry."""
    return CaseExtractionPipeline(store, config=extraction_config, lock_registry=CaseLockRegistry())


@pytest.fixture
def interview_document() -> DocumentInput:
    """Scenario: a one-line interview note."""
    return DocumentInput(
        document_id="doc-interview-1",
        filename="smith_interview.txt",
        raw_text="John Smith was interviewed on 03/15/2024 regarding the incident.",
    )


@pytest.fixture
def police_report_document() -> DocumentInput:
    """A short police report mentioning people, places and evidence."""
    return DocumentInput(
        document_id="doc-report-1",
        filename="report_2024_031.txt",
        raw_text=(
            "INCIDENT REPORT\n"
            "Case Number: 2024-031\n\n"
            "SUMMARY\n"
            "On March 15, 2024 at 9:30 pm Officer Jones responded to 123 Main Street.\n"
            "Witness Maria Lopez saw Mark Evans at 123 Main Street on March 15, 2024 at 9:45 pm.\n\n"
            "EVIDENCE\n"
            "Exhibit #A1 shell casing recovered near the doorway.\n"
        ),
    )


@pytest.fixture
def alibi_home_document() -> DocumentInput:
    """First account of Jane Doe's whereabouts."""
    return DocumentInput(
        document_id="doc-alibi-1",
        filename="doe_interview_1.txt",
        raw_text="Interviewee: Jane Doe\nI was home sleeping all night.",
    )


@pytest.fixture
def alibi_friend_document() -> DocumentInput:
    """Second, changed account of Jane Doe's whereabouts."""
    return DocumentInput(
        document_id="doc-alibi-2",
        filename="doe_interview_2.txt",
        raw_text="Interviewee: Jane Doe\nI was at my friend's house sleeping all night.",
    )
