"""Rule-based document classifier.

Rules are evaluated in a fixed order and the first match wins, so a police
report that quotes an interview is still a police report. Classification is
deterministic and never fails; unknown text is a general document.
"""

from typing import Callable, List, Optional, Tuple

from casegraph.models.case_models import Candidate, DocumentType
from casegraph.services.classification import constants
from casegraph.utils.logging import get_logger

LOGGER = get_logger(__name__)

Rule = Callable[[str, str], bool]


def _any_phrase(text: str, phrases: List[str]) -> bool:
    return any(phrase in text for phrase in phrases)


class DocumentClassifier:
    """Assigns one DocumentType to a normalized document."""

    def __init__(self, prior_boost: int = 5):
        self.prior_boost = prior_boost
        self.rules: List[Tuple[DocumentType, Rule]] = [
            (DocumentType.POLICE_REPORT, self._is_police_report),
            (DocumentType.INTERVIEW, self._is_interview),
            (DocumentType.WITNESS_STATEMENT, self._is_witness_statement),
            (DocumentType.EVIDENCE_LOG, self._is_evidence_log),
            (DocumentType.MEDICAL_REPORT, self._is_medical_report),
            (DocumentType.FINANCIAL_RECORD, self._is_financial_record),
            (DocumentType.COMMUNICATION_RECORD, self._is_communication_record),
            (DocumentType.SURVEILLANCE_REPORT, self._is_surveillance_report),
        ]

    def classify(self, text: str, filename: Optional[str] = None) -> DocumentType:
        """Classify a document.

        Args:
            text: Normalized document text
            filename: Optional original file name

        Returns:
            The first matching DocumentType, or GENERAL_DOCUMENT
        """
        lowered = (text or "").lower()
        lowered_name = (filename or "").lower()

        for document_type, rule in self.rules:
            if rule(lowered, lowered_name):
                LOGGER.debug(
                    f"Classified document as {document_type.value}",
                    extra={"filename": filename, "document_type": document_type.value},
                )
                return document_type

        return DocumentType.GENERAL_DOCUMENT

    def apply_prior(self, candidate: Candidate, document_type: DocumentType) -> Candidate:
        """Boost a candidate's confidence when its category suits the document type."""
        favoured = constants.DOCUMENT_TYPE_PRIORS.get(document_type, set())
        if candidate.category not in favoured or self.prior_boost <= 0:
            return candidate
        boosted = min(100, candidate.confidence_score + self.prior_boost)
        return candidate.model_copy(update={"confidence_score": boosted})

    @staticmethod
    def _is_police_report(text: str, filename: str) -> bool:
        return _any_phrase(text, constants.POLICE_REPORT_PHRASES) or "report" in filename

    @staticmethod
    def _is_interview(text: str, filename: str) -> bool:
        if _any_phrase(text, constants.INTERVIEW_PHRASES):
            return True
        return any(q in text and a in text for q, a in constants.INTERVIEW_MARKER_PAIRS)

    @staticmethod
    def _is_witness_statement(text: str, filename: str) -> bool:
        if _any_phrase(text, constants.WITNESS_STATEMENT_PHRASES):
            return True
        return "i saw" in text and "statement" in text

    @staticmethod
    def _is_evidence_log(text: str, filename: str) -> bool:
        return "evidence" in text and _any_phrase(text, constants.EVIDENCE_LOG_QUALIFIERS)

    @staticmethod
    def _is_medical_report(text: str, filename: str) -> bool:
        return _any_phrase(text, constants.MEDICAL_PHRASES)

    @staticmethod
    def _is_financial_record(text: str, filename: str) -> bool:
        return _any_phrase(text, constants.FINANCIAL_PHRASES) or "financial" in filename

    @staticmethod
    def _is_communication_record(text: str, filename: str) -> bool:
        return _any_phrase(text, constants.COMMUNICATION_PHRASES)

    @staticmethod
    def _is_surveillance_report(text: str, filename: str) -> bool:
        return _any_phrase(text, constants.SURVEILLANCE_PHRASES) or "surveillance" in filename
