"""Keyword tables for document classification and type priors."""

from casegraph.models.case_models import CandidateCategory, DocumentType

# Ordered rules: the first rule whose predicate matches wins.
POLICE_REPORT_PHRASES = ["incident report", "police report", "case number"]
INTERVIEW_PHRASES = ["interview", "interrogation"]
INTERVIEW_MARKER_PAIRS = [("q:", "a:"), ("question:", "answer:")]
WITNESS_STATEMENT_PHRASES = ["witness statement", "i witnessed"]
EVIDENCE_LOG_QUALIFIERS = ["log", "inventory", "chain of custody"]
MEDICAL_PHRASES = ["autopsy", "medical examiner", "cause of death", "toxicology"]
FINANCIAL_PHRASES = ["bank statement", "transaction", "account balance"]
COMMUNICATION_PHRASES = ["phone records", "call log", "text message", "email"]
SURVEILLANCE_PHRASES = ["surveillance", "camera", "footage"]

# Categories a document type is known to be rich in.
DOCUMENT_TYPE_PRIORS = {
    DocumentType.POLICE_REPORT: {CandidateCategory.LOCATION, CandidateCategory.PERSON},
    DocumentType.INTERVIEW: {CandidateCategory.PERSON},
    DocumentType.WITNESS_STATEMENT: {CandidateCategory.PERSON},
    DocumentType.EVIDENCE_LOG: {CandidateCategory.EVIDENCE},
    DocumentType.MEDICAL_REPORT: {CandidateCategory.EVIDENCE},
    DocumentType.FINANCIAL_RECORD: {CandidateCategory.FINANCIAL},
    DocumentType.COMMUNICATION_RECORD: {CandidateCategory.COMMUNICATION},
    DocumentType.SURVEILLANCE_REPORT: {CandidateCategory.VEHICLE, CandidateCategory.LOCATION},
    DocumentType.GENERAL_DOCUMENT: set(),
}

# Document types whose text carries first-person alibi claims.
ALIBI_BEARING_TYPES = {
    DocumentType.INTERVIEW,
    DocumentType.WITNESS_STATEMENT,
    DocumentType.POLICE_REPORT,
    DocumentType.GENERAL_DOCUMENT,
}
