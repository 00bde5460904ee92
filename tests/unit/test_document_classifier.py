"""Unit tests for DocumentClassifier.

Rules are ordered; the first match wins.
"""

import pytest

from casegraph.models.case_models import Candidate, CandidateCategory, DocumentType
from casegraph.services.classification.document_classifier import DocumentClassifier


class TestDocumentClassifierRules:
    """Rule matching and ordering."""

    @pytest.fixture
    def classifier(self):
        """Create classifier with the default prior boost."""
        return DocumentClassifier()

    def test_interview_detected_from_text(self, classifier):
        """Test interview wording yields an interview."""
        text = "John Smith was interviewed on 03/15/2024 regarding the incident."
        assert classifier.classify(text) == DocumentType.INTERVIEW

    def test_police_report_wins_over_interview(self, classifier):
        """Test a police report quoting an interview stays a police report."""
        text = "Incident Report. Detective Ray conducted an interview with the witness."
        assert classifier.classify(text) == DocumentType.POLICE_REPORT

    def test_police_report_from_filename(self, classifier):
        """Test the filename alone can identify a report."""
        assert classifier.classify("Nothing notable here.", filename="Report_031.pdf") == DocumentType.POLICE_REPORT

    def test_question_answer_markers_mean_interview(self, classifier):
        """Test Q/A transcripts are interviews."""
        text = "Q: Where were you?\nA: At home."
        assert classifier.classify(text) == DocumentType.INTERVIEW

    def test_witness_statement(self, classifier):
        """Test first-person sighting statements."""
        text = "My statement: I saw a man running down the street."
        assert classifier.classify(text) == DocumentType.WITNESS_STATEMENT

    def test_evidence_log_requires_qualifier(self, classifier):
        """Test evidence alone is not enough for an evidence log."""
        assert classifier.classify("Evidence inventory for item 4.") == DocumentType.EVIDENCE_LOG
        assert classifier.classify("The evidence was compelling.") == DocumentType.GENERAL_DOCUMENT

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Autopsy findings: cause of death unknown.", DocumentType.MEDICAL_REPORT),
            ("Bank statement for March.", DocumentType.FINANCIAL_RECORD),
            ("Call log for the suspect's phone.", DocumentType.COMMUNICATION_RECORD),
            ("Camera 3 footage reviewed.", DocumentType.SURVEILLANCE_REPORT),
            ("Grocery list: milk, eggs.", DocumentType.GENERAL_DOCUMENT),
        ],
    )
    def test_remaining_types(self, classifier, text, expected):
        """Test the remaining rule groups and the fallback."""
        assert classifier.classify(text) == expected

    def test_empty_text_is_general(self, classifier):
        """Test empty input never fails."""
        assert classifier.classify("") == DocumentType.GENERAL_DOCUMENT


class TestDocumentTypePrior:
    """Confidence boost for categories a document type is rich in."""

    def _candidate(self, category: CandidateCategory, score: int) -> Candidate:
        return Candidate(
            category=category,
            original_text="x",
            normalized_value="x",
            confidence_score=score,
            source_document_id="doc",
        )

    def test_favoured_category_boosted(self):
        """Test a person in an interview gains the prior boost."""
        classifier = DocumentClassifier(prior_boost=5)
        boosted = classifier.apply_prior(self._candidate(CandidateCategory.PERSON, 75), DocumentType.INTERVIEW)
        assert boosted.confidence_score == 80

    def test_boost_clamped_to_100(self):
        """Test the boost never exceeds 100."""
        classifier = DocumentClassifier(prior_boost=10)
        boosted = classifier.apply_prior(self._candidate(CandidateCategory.PERSON, 95), DocumentType.INTERVIEW)
        assert boosted.confidence_score == 100

    def test_other_category_untouched(self):
        """Test categories outside the prior are unchanged."""
        classifier = DocumentClassifier()
        candidate = self._candidate(CandidateCategory.VEHICLE, 60)
        assert classifier.apply_prior(candidate, DocumentType.INTERVIEW).confidence_score == 60
