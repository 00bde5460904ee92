"""Unit tests for ExtractorRegistry."""

from casegraph.models.case_models import CandidateCategory
from casegraph.services.extraction.extractor_factory import ExtractorRegistry
from casegraph.services.extraction.person_extractor import PersonExtractor


REPORT_TEXT = (
    "On March 15, 2024 at 9:30 pm Officer Jones met Maria Lopez at 123 Main Street. "
    "A black Ford F-150, plate ABC-1234, left toward Springfield, IL. "
    "She called (555) 123-4567 and paid $40.00. Exhibit #3 knife was bagged by the FBI."
)


class TestExtractorRegistry:
    """Registration and fan-out across categories."""

    def test_default_registry_covers_all_categories(self):
        registry = ExtractorRegistry.with_default_extractors()

        assert set(registry.categories) == set(CandidateCategory)

    def test_register_replaces_existing(self):
        """Test registering a category twice keeps the newest extractor."""
        registry = ExtractorRegistry()
        first, second = PersonExtractor(), PersonExtractor(context_radius=50)
        registry.register_extractor(first)
        registry.register_extractor(second)

        assert registry.get_extractor(CandidateCategory.PERSON) is second
        assert registry.categories == [CandidateCategory.PERSON]

    def test_extract_all_finds_every_category(self):
        candidates = ExtractorRegistry.with_default_extractors().extract_all(REPORT_TEXT, "doc-1")

        assert {c.category for c in candidates} == set(CandidateCategory)

    def test_confidence_and_spans_bounded(self):
        """Test every candidate has a score in [0, 100] and a valid span."""
        candidates = ExtractorRegistry.with_default_extractors().extract_all(REPORT_TEXT, "doc-1")

        for candidate in candidates:
            assert 0 <= candidate.confidence_score <= 100
            assert 0 <= candidate.start <= candidate.end <= len(REPORT_TEXT)
            assert candidate.source_document_id == "doc-1"

    def test_extraction_is_deterministic(self):
        """Test repeated runs give identical candidates."""
        registry = ExtractorRegistry.with_default_extractors()
        first = registry.extract_all(REPORT_TEXT, "doc-1")
        second = registry.extract_all(REPORT_TEXT, "doc-1")

        assert [c.model_dump() for c in first] == [c.model_dump() for c in second]
