"""Text normalization applied before any extraction.

Cleans line endings, blank-line runs, horizontal whitespace, typographic
quotes and a handful of common OCR digit confusions. Never raises.
"""

import re
from typing import Optional

_QUOTE_MAP = str.maketrans({
    "“": '"',
    "”": '"',
    "„": '"',
    "‘": "'",
    "’": "'",
    "‚": "'",
    " ": " ",
})

# (pattern, replacement) applied in order
_OCR_FIXES = [
    # letter o between digits read as a dash: 555o1234 -> 555-1234
    (re.compile(r"(?<=\d)[oO](?=\d)"), "-"),
    # lowercase l before digits read as one: l23 -> 123
    (re.compile(r"\bl(?=\d)"), "1"),
    # lowercase l after digits read as one: 20l -> 201
    (re.compile(r"(?<=\d)l\b"), "1"),
]

_BLANK_RUNS = re.compile(r"\n{3,}")
_HORIZONTAL_RUNS = re.compile(r"[ \t]+")
_TRAILING_SPACE = re.compile(r"[ \t]+\n")


def normalize_text(raw: Optional[str]) -> str:
    """Normalize raw document text.

    Args:
        raw: Unnormalized text; None is treated as empty

    Returns:
        Normalized text (possibly empty)
    """
    if not raw:
        return ""

    text = raw.replace("\r\n", "\n").replace("\r", "\n")
    text = text.translate(_QUOTE_MAP)
    text = _HORIZONTAL_RUNS.sub(" ", text)
    text = _TRAILING_SPACE.sub("\n", text)
    text = _BLANK_RUNS.sub("\n\n", text)

    for pattern, replacement in _OCR_FIXES:
        text = pattern.sub(replacement, text)

    return text.strip()
