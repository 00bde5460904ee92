"""Unit tests for DateExtractor."""

import pytest

from casegraph.models.case_models import CandidateCategory
from casegraph.services.extraction.base_extractor import FactExtractor
from casegraph.services.extraction.date_extractor import DateExtractor


@pytest.fixture
def extractor():
    return DateExtractor(context_radius=100)


def _values(candidates):
    return [c.normalized_value for c in candidates]


class TestCalendarDates:
    """Absolute date formats."""

    def test_numeric_month_first(self, extractor):
        """Test an unambiguous slash date."""
        candidates = extractor.extract("Interviewed on 03/15/2024 at the station.", "doc-1")

        assert len(candidates) == 1
        candidate = candidates[0]
        assert candidate.category == CandidateCategory.DATE
        assert candidate.original_text == "03/15/2024"
        assert candidate.normalized_value == "2024-03-15"
        assert candidate.confidence_score == 90
        assert candidate.attributes["ambiguous"] is False

    def test_ambiguous_numeric_date_has_lower_confidence(self, extractor):
        """Test a slash date valid both ways is read month-first at lower confidence."""
        candidates = extractor.extract("Seen on 04/05/2024.", "doc-1")

        assert _values(candidates) == ["2024-04-05"]
        assert candidates[0].confidence_score == 75
        assert candidates[0].attributes["ambiguous"] is True

    def test_day_first_fallback(self, extractor):
        """Test a slash date only valid day-first."""
        candidates = extractor.extract("Filed on 25/12/2023.", "doc-1")
        assert _values(candidates) == ["2023-12-25"]
        assert candidates[0].confidence_score == 90

    def test_impossible_date_skipped(self, extractor):
        """Test a date invalid in both readings yields nothing."""
        assert extractor.extract("Dated 02/30/2024.", "doc-1") == []

    def test_named_month_formats(self, extractor):
        """Test month-name dates in both orders."""
        candidates = extractor.extract("Between March 15, 2024 and the 2nd of April 2024.", "doc-1")

        assert _values(candidates) == ["2024-03-15", "2024-04-02"]
        assert all(c.confidence_score == 95 for c in candidates)

    def test_iso_with_time(self, extractor):
        """Test an ISO timestamp keeps its clock time."""
        candidates = extractor.extract("Logged 2024-03-15T21:30 by dispatch.", "doc-1")

        assert len(candidates) == 1
        assert candidates[0].normalized_value == "2024-03-15"
        assert candidates[0].attributes["time"] == "21:30"
        assert candidates[0].confidence_score == 90

    def test_date_type_from_context(self, extractor):
        """Test the surrounding wording classifies the date."""
        candidates = extractor.extract("The robbery occurred on March 15, 2024.", "doc-1")
        assert candidates[0].attributes["date_type"] == "incident"


class TestTimesAndRelativeDates:
    """Clock times and relative expressions."""

    def test_clock_times(self, extractor):
        """Test 12-hour and 24-hour clock times."""
        candidates = extractor.extract("He left at 9:30 pm and returned at 23:15.", "doc-1")

        assert _values(candidates) == ["21:30", "23:15"]
        assert [c.confidence_score for c in candidates] == [85, 75]
        assert all(c.attributes["kind"] == "time" for c in candidates)

    def test_hour_with_meridiem(self, extractor):
        """Test a bare hour with am/pm."""
        candidates = extractor.extract("It was around 8 pm.", "doc-1")
        assert _values(candidates) == ["20:00"]

    def test_relative_date_is_unparsed(self, extractor):
        """Test relative expressions keep their text and are not parsed."""
        candidates = extractor.extract("I saw him last Tuesday near the pier.", "doc-1")

        assert len(candidates) == 1
        assert candidates[0].normalized_value == "last tuesday"
        assert candidates[0].attributes["parsed"] is False
        assert candidates[0].attributes["kind"] == "relative"
        assert candidates[0].confidence_score == 50


class TestExtractorContract:
    """Behaviour shared by every extractor."""

    def test_offset_applied(self, extractor):
        """Test offsets are shifted into document coordinates."""
        candidates = extractor.extract("On 03/15/2024.", "doc-1", offset=100)
        assert candidates[0].start == 103
        assert candidates[0].end == 113

    def test_empty_input(self, extractor):
        """Test empty and non-string input yield no candidates."""
        assert extractor.extract("", "doc-1") == []
        assert extractor.extract(None, "doc-1") == []

    def test_internal_failure_returns_empty(self):
        """Test an extractor error is contained and logged."""

        class BrokenExtractor(FactExtractor):
            category = CandidateCategory.DATE

            def _extract(self, text, document_id, offset):
                raise ValueError("bad pattern state")

        assert BrokenExtractor().extract("anything", "doc-1") == []
