"""Persisting and applying proposed corrections."""

from .applier import (
    BulkResult,
    Match,
    ReviewResult,
    apply_corrections,
    apply_to_file,
    find_first,
    review_corrections,
    review_file,
)
from .persistence import CorrectionStore, write_text_atomic

__all__ = [
    "BulkResult",
    "CorrectionStore",
    "Match",
    "ReviewResult",
    "apply_corrections",
    "apply_to_file",
    "find_first",
    "review_corrections",
    "review_file",
    "write_text_atomic",
]
