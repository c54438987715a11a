"""
Balanced-brace scanner for JSON objects embedded in free text.
"""

from enum import Enum
from typing import NamedTuple, Optional


class ExtractionStatus(str, Enum):
    FOUND = "found"
    NO_CANDIDATE = "no_candidate"  # no "{" anywhere
    INCOMPLETE = "incomplete"      # "{" found but depth never returned to zero


class ExtractionResult(NamedTuple):
    status: ExtractionStatus
    candidate: Optional[str] = None


def extract_balanced_json(text: str) -> ExtractionResult:
    """
    Return the first balanced `{...}` substring of `text`.

    Only braces are counted; quotes and escapes are ignored, so the candidate
    is syntactically unchecked and may still fail to parse.
    """
    start = text.find("{")
    if start == -1:
        return ExtractionResult(ExtractionStatus.NO_CANDIDATE)

    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return ExtractionResult(ExtractionStatus.FOUND, text[start:i + 1])

    return ExtractionResult(ExtractionStatus.INCOMPLETE)
