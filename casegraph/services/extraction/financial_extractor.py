"""Financial instrument extraction: amounts, cards, accounts and checks."""

import re
from typing import List

from casegraph.models.case_models import Candidate, CandidateCategory
from casegraph.services.extraction.base_extractor import FactExtractor, Span


class FinancialExtractor(FactExtractor):
    """Extracts currency amounts and payment instrument references.

    Card numbers are masked to their last four digits before they leave the
    extractor.
    """

    category = CandidateCategory.FINANCIAL

    CURRENCY_PATTERN = r"\$\s?(\d{1,3}(?:,\d{3})+|\d+)(?:\.(\d{2}))?(?!\d)"
    DOLLARS_PATTERN = r"\b(\d{1,3}(?:,\d{3})+|\d+)\s+dollars\b"
    CARD_PATTERN = r"\b(?:\d{4}[\s-]){3}(\d{4})\b"
    CARD_ENDING_PATTERN = r"\bcard\s+ending\s+(?:in\s+)?(\d{4})\b"
    ACCOUNT_PATTERN = r"\b(?:account|acct)\.?\s*(?:number|no\.?|#)?\s*[:#]?\s*([\dX*]{4,17})\b"
    CHECK_PATTERN = r"\bcheck\s*(?:number|no\.?|#)\s*[:#]?\s*(\d{3,8})\b"

    def __init__(self, context_radius: int = 100):
        super().__init__(context_radius)
        self.currency = re.compile(self.CURRENCY_PATTERN)
        self.dollars = re.compile(self.DOLLARS_PATTERN, re.IGNORECASE)
        self.card = re.compile(self.CARD_PATTERN)
        self.card_ending = re.compile(self.CARD_ENDING_PATTERN, re.IGNORECASE)
        self.account = re.compile(self.ACCOUNT_PATTERN, re.IGNORECASE)
        self.check = re.compile(self.CHECK_PATTERN, re.IGNORECASE)

    def _extract(self, text: str, document_id: str, offset: int) -> List[Candidate]:
        candidates: List[Candidate] = []
        spans: List[Span] = []

        def add(start: int, end: int, value: str, confidence: int, **attributes) -> None:
            if self.overlaps(spans, start, end):
                return
            spans.append((start, end))
            candidates.append(
                self.make_candidate(text, document_id, offset, start, end, value, confidence, attributes)
            )

        for match in self.currency.finditer(text):
            amount = float(match.group(1).replace(",", "") + "." + (match.group(2) or "00"))
            add(*match.span(), f"${amount:,.2f}", 90, instrument="currency", amount=amount)

        for match in self.dollars.finditer(text):
            amount = float(match.group(1).replace(",", ""))
            add(*match.span(), f"${amount:,.2f}", 85, instrument="currency", amount=amount)

        for match in self.card.finditer(text):
            last_four = match.group(1)
            add(*match.span(), f"card ending {last_four}", 85, instrument="card", last_four=last_four)

        for match in self.card_ending.finditer(text):
            last_four = match.group(1)
            add(*match.span(), f"card ending {last_four}", 85, instrument="card", last_four=last_four)

        for match in self.account.finditer(text):
            number = match.group(1)
            add(*match.span(), f"account {number}", 75, instrument="account")

        for match in self.check.finditer(text):
            add(*match.span(), f"check #{match.group(1)}", 75, instrument="check")

        return candidates
