"""Power whip pattern expansion pipeline package."""

from .models import (
    ExpandedRow,
    LookupRecord,
    NaturalLanguageSpec,
    ParsedPattern,
    ProcessingResult,
)

__all__ = [
    "ParsedPattern",
    "NaturalLanguageSpec",
    "LookupRecord",
    "ExpandedRow",
    "ProcessingResult",
]
