"""Registry of fact extractors keyed by candidate category.

New categories are added by registering another extractor; nothing else in
the pipeline changes.
"""

from typing import Dict, List, Optional

from casegraph.models.case_models import Candidate, CandidateCategory
from casegraph.services.extraction.base_extractor import FactExtractor
from casegraph.utils.logging import get_logger

LOGGER = get_logger(__name__)


class ExtractorRegistry:
    """Holds one extractor instance per candidate category.

    Attributes:
        _registry: Mapping of category to extractor instance
    """

    def __init__(self):
        self._registry: Dict[CandidateCategory, FactExtractor] = {}

    def register_extractor(self, extractor: FactExtractor, category: Optional[CandidateCategory] = None) -> None:
        key = category or extractor.category
        if key in self._registry:
            LOGGER.info(
                f"Replacing extractor for {key.value}",
                extra={"old": type(self._registry[key]).__name__, "new": type(extractor).__name__},
            )
        self._registry[key] = extractor

    def get_extractor(self, category: CandidateCategory) -> Optional[FactExtractor]:
        return self._registry.get(category)

    @property
    def categories(self) -> List[CandidateCategory]:
        return list(self._registry.keys())

    def extract_all(self, text: str, document_id: str, offset: int = 0) -> List[Candidate]:
        """Run every registered extractor over the text, in registration order."""
        candidates: List[Candidate] = []
        for extractor in self._registry.values():
            candidates.extend(extractor.extract(text, document_id, offset))
        return candidates

    @classmethod
    def with_default_extractors(cls, context_radius: int = 100) -> "ExtractorRegistry":
        """Build a registry holding the standard extractor set."""
        # Imported here to keep the base module free of concrete extractors
        from casegraph.services.extraction.communication_extractor import CommunicationExtractor
        from casegraph.services.extraction.date_extractor import DateExtractor
        from casegraph.services.extraction.evidence_extractor import EvidenceExtractor
        from casegraph.services.extraction.financial_extractor import FinancialExtractor
        from casegraph.services.extraction.location_extractor import LocationExtractor
        from casegraph.services.extraction.organization_extractor import OrganizationExtractor
        from casegraph.services.extraction.person_extractor import PersonExtractor
        from casegraph.services.extraction.vehicle_extractor import VehicleExtractor

        registry = cls()
        for extractor_class in (
            DateExtractor,
            LocationExtractor,
            PersonExtractor,
            OrganizationExtractor,
            VehicleExtractor,
            CommunicationExtractor,
            FinancialExtractor,
            EvidenceExtractor,
        ):
            registry.register_extractor(extractor_class(context_radius=context_radius))

        LOGGER.debug("Initialized ExtractorRegistry", extra={"registered": len(registry._registry)})
        return registry
