"""Communication identifiers: phone numbers, emails, handles, messaging apps."""

import re
from typing import List

from casegraph.models.case_models import Candidate, CandidateCategory
from casegraph.services.extraction.base_extractor import FactExtractor, Span


class CommunicationExtractor(FactExtractor):
    category = CandidateCategory.COMMUNICATION

    PHONE_PATTERN = r"(?<![\d-])(?:\+?1[\s.-]?)?\(?(\d{3})\)?[\s.-]?(\d{3})[\s.-](\d{4})(?![\d-])"
    LOCAL_PHONE_PATTERN = r"(?<![\d-])(\d{3})-(\d{4})(?![\d-])"
    EMAIL_PATTERN = r"\b[\w.+-]+@[\w-]+(?:\.[\w-]+)*\.[A-Za-z]{2,}\b"
    HANDLE_PATTERN = r"(?<![\w@.])@([A-Za-z0-9_]{2,30})\b"
    APP_PATTERN = (
        r"\b(WhatsApp|Signal|Telegram|Snapchat|Instagram|Facebook Messenger|Messenger|WeChat|"
        r"iMessage|Discord|Facebook|Twitter|TikTok)\b"
    )

    def __init__(self, context_radius: int = 100):
        super().__init__(context_radius)
        self.phone = re.compile(self.PHONE_PATTERN)
        self.local_phone = re.compile(self.LOCAL_PHONE_PATTERN)
        self.email = re.compile(self.EMAIL_PATTERN)
        self.handle = re.compile(self.HANDLE_PATTERN)
        self.app = re.compile(self.APP_PATTERN)

    def _extract(self, text: str, document_id: str, offset: int) -> List[Candidate]:
        candidates: List[Candidate] = []
        spans: List[Span] = []

        def add(start: int, end: int, value: str, confidence: int, comm_type: str) -> None:
            if self.overlaps(spans, start, end):
                return
            spans.append((start, end))
            candidates.append(
                self.make_candidate(
                    text, document_id, offset, start, end, value, confidence, {"comm_type": comm_type}
                )
            )

        for match in self.email.finditer(text):
            add(*match.span(), match.group(0).lower(), 95, "email")

        for match in self.phone.finditer(text):
            digits = "".join(match.groups())
            add(*match.span(), f"({digits[:3]}) {digits[3:6]}-{digits[6:]}", 95, "phone")

        for match in self.local_phone.finditer(text):
            add(*match.span(), f"{match.group(1)}-{match.group(2)}", 80, "phone")

        for match in self.handle.finditer(text):
            add(*match.span(), f"@{match.group(1)}", 80, "social_media")

        for match in self.app.finditer(text):
            add(*match.span(), match.group(1), 80, "messaging_app")

        return candidates
