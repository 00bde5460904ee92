"""Language-model candidate source.

Asks an OpenAI-compatible chat endpoint for entities, events, connections
and alibis as one JSON object and maps the answer onto the same candidate
and draft shapes the pattern extractors produce. Any failure surfaces as
``ExtractionError`` so the caller can fall back to pattern extraction.
"""

from typing import Any, List, Optional

from pydantic import ValidationError as PydanticValidationError

from casegraph.core.base_llm_client import BaseLLMClient
from casegraph.core.exceptions import APIClientError, ExtractionError
from casegraph.models.case_models import (
    AlibiDraft,
    Candidate,
    CandidateBundle,
    CandidateCategory,
    ConnectionConfidence,
    ConnectionDraft,
    DocumentType,
    EventDraft,
    EventType,
    TimePrecision,
)
from casegraph.utils.datetime_utils import parse_datetime_value
from casegraph.utils.json_parser import parse_json_safely
from casegraph.utils.logging import get_logger

LOGGER = get_logger(__name__)

ENTITY_TYPE_TO_CATEGORY = {
    "person": CandidateCategory.PERSON,
    "location": CandidateCategory.LOCATION,
    "evidence": CandidateCategory.EVIDENCE,
    "vehicle": CandidateCategory.VEHICLE,
    "organization": CandidateCategory.ORGANIZATION,
}


class LLMCandidateSource:
    """LLM-backed extraction of case graph artifacts."""

    SYSTEM_PROMPT = (
        "You are an investigative analyst. You extract structured facts from case documents "
        "and answer with JSON only."
    )

    EXTRACTION_PROMPT = """Extract the case facts from the {document_type} below.

RETURN JSON ONLY, in exactly this shape:
{{
  "entities": [
    {{"name": "...", "type": "person|location|evidence|vehicle|organization", "role": "...", "description": "...", "confidence": 0-100}}
  ],
  "events": [
    {{"title": "...", "description": "...", "event_time": "ISO 8601 or null", "time_precision": "exact|approximate|estimated|unknown",
      "event_type": "victim_action|suspect_movement|witness_account|evidence_found|phone_call|transaction|sighting|other",
      "location": "...", "participants": ["entity name"], "confidence": 0-100}}
  ],
  "connections": [
    {{"from": "entity name", "to": "entity name", "type": "...", "label": "...", "description": "...",
      "confidence": "confirmed|probable|possible|unverified"}}
  ],
  "alibis": [
    {{"subject": "person name", "location": "...", "activity": "...", "start_time": "ISO 8601 or null",
      "end_time": "ISO 8601 or null", "corroborators": ["person name"], "statement": "...", "confidence": 0-100}}
  ]
}}

Use only names that appear in the document. Leave out anything you are unsure of.

DOCUMENT ({document_id}):
{text}
"""

    def __init__(self, client: BaseLLMClient, max_input_chars: int = 12000):
        self.client = client
        self.max_input_chars = max_input_chars

    async def extract(self, document_id: str, text: str, document_type: DocumentType) -> CandidateBundle:
        """Extract a candidate bundle for one document.

        Raises:
            ExtractionError: If the call fails or the answer is not usable JSON
        """
        prompt = self.EXTRACTION_PROMPT.format(
            document_type=document_type.value.replace("_", " "),
            document_id=document_id,
            text=text[: self.max_input_chars],
        )
        try:
            content = await self.client.complete(self.SYSTEM_PROMPT, prompt)
        except APIClientError as e:
            raise ExtractionError(f"LLM extraction failed for {document_id}: {e}", e) from e

        data = parse_json_safely(content)
        if not isinstance(data, dict):
            raise ExtractionError(f"LLM returned no JSON object for {document_id}")

        bundle = CandidateBundle(
            document_id=document_id,
            document_type=document_type,
            candidates=self._candidates(data.get("entities"), text, document_id),
            events=self._events(data.get("events"), document_id),
            connections=self._connections(data.get("connections")),
            alibis=self._alibis(data.get("alibis"), document_id),
            source="llm",
        )
        LOGGER.info(
            "LLM extraction complete",
            extra={
                "document_id": document_id,
                "entities": len(bundle.candidates),
                "events": len(bundle.events),
                "connections": len(bundle.connections),
                "alibis": len(bundle.alibis),
            },
        )
        return bundle

    def _candidates(self, items: Any, text: str, document_id: str) -> List[Candidate]:
        candidates = []
        for item in _as_list(items):
            category = ENTITY_TYPE_TO_CATEGORY.get(str(item.get("type", "")).lower())
            name = _clean(item.get("name"))
            if category is None or not name:
                LOGGER.debug("Skipping unusable LLM entity", extra={"item": str(item)[:200]})
                continue
            start = max(text.find(name), 0)
            attributes = {"description": _clean(item.get("description"))}
            role = _clean(item.get("role"))
            if role:
                attributes["role"] = role.lower()
            try:
                candidates.append(
                    Candidate(
                        category=category,
                        original_text=name,
                        normalized_value=name,
                        context_window=attributes["description"] or "",
                        confidence_score=_score(item.get("confidence"), 70),
                        source_document_id=document_id,
                        start=start,
                        end=start + len(name),
                        attributes=attributes,
                    )
                )
            except PydanticValidationError as e:
                LOGGER.warning(f"Invalid LLM entity skipped: {e}", extra={"document_id": document_id})
        return candidates

    def _events(self, items: Any, document_id: str) -> List[EventDraft]:
        events = []
        for item in _as_list(items):
            title = _clean(item.get("title"))
            if not title:
                continue
            event_time = parse_datetime_value(item.get("event_time"))
            precision = _enum(TimePrecision, item.get("time_precision"), TimePrecision.APPROXIMATE)
            if event_time is None:
                precision = TimePrecision.UNKNOWN
            try:
                events.append(
                    EventDraft(
                        title=title[:200],
                        description=_clean(item.get("description")) or "",
                        event_type=_enum(EventType, item.get("event_type"), EventType.OTHER),
                        event_time=event_time,
                        time_precision=precision,
                        location=_clean(item.get("location")),
                        participant_names=[n for n in (_clean(p) for p in _as_list(item.get("participants"), str)) if n],
                        confidence_score=_score(item.get("confidence"), 50),
                        source_document_id=document_id,
                    )
                )
            except PydanticValidationError as e:
                LOGGER.warning(f"Invalid LLM event skipped: {e}", extra={"document_id": document_id})
        return events

    def _connections(self, items: Any) -> List[ConnectionDraft]:
        connections = []
        for item in _as_list(items):
            from_name, to_name = _clean(item.get("from")), _clean(item.get("to"))
            connection_type = _clean(item.get("type")) or "associated_with"
            if not from_name or not to_name:
                continue
            connections.append(
                ConnectionDraft(
                    from_name=from_name,
                    to_name=to_name,
                    connection_type=connection_type.lower().replace(" ", "_"),
                    label=_clean(item.get("label")),
                    description=_clean(item.get("description")),
                    confidence=_enum(ConnectionConfidence, item.get("confidence"), ConnectionConfidence.UNVERIFIED),
                )
            )
        return connections

    def _alibis(self, items: Any, document_id: str) -> List[AlibiDraft]:
        alibis = []
        for item in _as_list(items):
            subject = _clean(item.get("subject"))
            if not subject:
                continue
            try:
                alibis.append(
                    AlibiDraft(
                        subject_name=subject,
                        alibi_start=parse_datetime_value(item.get("start_time")),
                        alibi_end=parse_datetime_value(item.get("end_time")),
                        location_claimed=_clean(item.get("location")),
                        activity_claimed=_clean(item.get("activity")),
                        full_statement=_clean(item.get("statement")),
                        corroborator_names=[n for n in (_clean(c) for c in _as_list(item.get("corroborators"), str)) if n],
                        confidence_score=_score(item.get("confidence"), 50),
                        source_document_id=document_id,
                    )
                )
            except PydanticValidationError as e:
                LOGGER.warning(f"Invalid LLM alibi skipped: {e}", extra={"document_id": document_id})
        return alibis


def _as_list(value: Any, item_type: type = dict) -> List[Any]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, item_type)]


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = " ".join(str(value).split())
    return text or None


def _score(value: Any, default: int) -> int:
    try:
        score = int(float(value))
    except (TypeError, ValueError):
        return default
    return max(0, min(100, score))


def _enum(enum_class, value: Any, default):
    try:
        return enum_class(str(value).lower())
    except ValueError:
        return default
