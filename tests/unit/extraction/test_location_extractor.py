"""Unit tests for LocationExtractor."""

import pytest

from casegraph.services.extraction.location_extractor import LocationExtractor


@pytest.fixture
def extractor():
    return LocationExtractor(context_radius=100)


class TestLocationExtractor:
    """Location patterns from most to least specific."""

    def test_street_address(self, extractor):
        """Test numbered street addresses."""
        candidates = extractor.extract("He lives at 742 Evergreen Terrace.", "doc-1")

        assert [c.normalized_value for c in candidates] == ["742 Evergreen Terrace"]
        assert candidates[0].attributes["location_type"] == "address"
        assert candidates[0].confidence_score == 90

    def test_intersection(self, extractor):
        """Test street intersections."""
        candidates = extractor.extract("They met at the corner of Fifth Avenue and Main Street.", "doc-1")

        assert [c.normalized_value for c in candidates] == ["Fifth Avenue and Main Street"]
        assert candidates[0].confidence_score == 85

    def test_city_requires_state_code(self, extractor):
        """Test City, ST is only accepted for real state codes."""
        candidates = extractor.extract("She moved to Springfield, IL last year.", "doc-1")
        assert [c.normalized_value for c in candidates] == ["Springfield, IL"]

        assert extractor.extract("Postmarked Lyon, ZZ in June.", "doc-1") == []

    def test_business_after_preposition(self, extractor):
        """Test named businesses introduced by a preposition."""
        candidates = extractor.extract("She was drinking at the Blue Moon Bar.", "doc-1")

        assert [c.normalized_value for c in candidates] == ["Blue Moon Bar"]
        assert candidates[0].attributes["location_type"] == "business"
        assert candidates[0].confidence_score == 80

    def test_landmark(self, extractor):
        """Test landmarks get the lowest confidence."""
        candidates = extractor.extract("The body was found near Lincoln Park.", "doc-1")

        assert [c.normalized_value for c in candidates] == ["Lincoln Park"]
        assert candidates[0].confidence_score == 70

    def test_offsets_match_value(self, extractor):
        """Test the span points at the location text."""
        text = "Shots fired at 12 Oak Street tonight."
        candidate = extractor.extract(text, "doc-1")[0]
        assert text[candidate.start:candidate.end] == "12 Oak Street"
