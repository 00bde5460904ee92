"""Fact extraction services.

Pattern extractors share the FactExtractor base and are collected in an
ExtractorRegistry. AlibiClaimExtractor and LLMCandidateSource produce drafts
in addition to candidates.
"""

from casegraph.services.extraction.alibi_extractor import AlibiClaimExtractor
from casegraph.services.extraction.base_extractor import FactExtractor
from casegraph.services.extraction.communication_extractor import CommunicationExtractor
from casegraph.services.extraction.date_extractor import DateExtractor
from casegraph.services.extraction.evidence_extractor import EvidenceExtractor
from casegraph.services.extraction.extractor_factory import ExtractorRegistry
from casegraph.services.extraction.financial_extractor import FinancialExtractor
from casegraph.services.extraction.llm_extractor import LLMCandidateSource
from casegraph.services.extraction.location_extractor import LocationExtractor
from casegraph.services.extraction.organization_extractor import OrganizationExtractor
from casegraph.services.extraction.person_extractor import PersonExtractor
from casegraph.services.extraction.vehicle_extractor import VehicleExtractor

__all__ = [
    "AlibiClaimExtractor",
    "CommunicationExtractor",
    "DateExtractor",
    "EvidenceExtractor",
    "ExtractorRegistry",
    "FactExtractor",
    "FinancialExtractor",
    "LLMCandidateSource",
    "LocationExtractor",
    "OrganizationExtractor",
    "PersonExtractor",
    "VehicleExtractor",
]
