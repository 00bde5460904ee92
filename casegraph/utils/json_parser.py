import json
import re
from typing import Any, Dict, List, Union

from casegraph.utils.logging import get_logger

LOGGER = get_logger(__name__)

_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def parse_json_safely(text: str) -> Union[Dict[str, Any], List[Any], None]:
    """Parse JSON from text, handling common LLM formatting issues.

    Handles:
    - Markdown code blocks (```json ... ```)
    - Leading/trailing prose around the payload
    - Concatenated JSON arrays (e.g., [...]\n[...])

    Args:
        text: The text containing JSON

    Returns:
        Parsed JSON object or None if parsing fails
    """
    if not text:
        return None

    cleaned_text = _FENCE_PATTERN.sub("", text.strip()).strip()

    try:
        return json.loads(cleaned_text)
    except json.JSONDecodeError as e:
        LOGGER.warning(f"Initial JSON parse failed: {e}, attempting repairs...")

    results = _decode_all(cleaned_text)
    if not results:
        LOGGER.error("Failed to parse JSON payload", extra={"length": len(cleaned_text)})
        return None

    if len(results) == 1:
        return results[0]

    # Several fragments: flatten arrays, keep objects in order
    merged: List[Any] = []
    for item in results:
        if isinstance(item, list):
            merged.extend(item)
        else:
            merged.append(item)
    LOGGER.info("Parsed concatenated JSON", extra={"fragments": len(results)})
    return merged


def _decode_all(text: str) -> List[Any]:
    """Decode every top-level JSON value found in text, skipping noise between them."""
    decoder = json.JSONDecoder()
    results: List[Any] = []
    idx = 0

    while idx < len(text):
        starts = [pos for pos in (text.find("{", idx), text.find("[", idx)) if pos != -1]
        if not starts:
            break
        start = min(starts)
        try:
            obj, end_idx = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            idx = start + 1
            continue
        results.append(obj)
        idx = end_idx

    return results
