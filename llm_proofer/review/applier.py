"""Apply corrections to document text.

Both modes share one matching rule: each correction, in list order, targets
the first literal occurrence of its ``old`` text in the *current* text, i.e.
after earlier replacements in the same pass. A correction whose ``old`` text
is missing is recorded and skipped; it never stops the batch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Sequence

from llm_proofer.config import ProofreaderConfiguration
from llm_proofer.models import Correction

from .persistence import CorrectionStore, write_text_atomic

logger = logging.getLogger(__name__)

Decision = Callable[[Correction, "Match", str], bool]
Highlighter = Callable[[str, "Match"], None]


@dataclass(frozen=True)
class Match:
    """Character span of a candidate occurrence in the current text."""

    start: int
    end: int


def find_first(text: str, old: str) -> Match | None:
    """Find the first literal occurrence of ``old`` in ``text``.

    An empty ``old`` never matches.
    """
    if not old:
        return None
    start = text.find(old)
    if start == -1:
        return None
    return Match(start, start + len(old))


def replace_span(text: str, match: Match, new: str) -> str:
    """Replace the matched span with ``new``, taken literally."""
    return text[: match.start] + new + text[match.end :]


@dataclass
class BulkResult:
    text: str
    applied: int = 0
    failures: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.applied + len(self.failures)

    def summary(self) -> str:
        if not self.failures:
            return f"Applied {self.applied} correction(s)."
        lines = [
            f"Applied {self.applied} correction(s); {len(self.failures)} failed:"
        ]
        lines.extend(f"  - {reason}" for reason in self.failures)
        return "\n".join(lines)


@dataclass
class ReviewResult:
    text: str
    applied: int = 0
    skipped: int = 0

    @property
    def total(self) -> int:
        return self.applied + self.skipped

    def summary(self) -> str:
        return f"Applied {self.applied} correction(s), skipped {self.skipped}."


def apply_corrections(text: str, corrections: Iterable[Correction]) -> BulkResult:
    """Apply every correction that matches, recording the reasons of misses."""
    result = BulkResult(text=text)
    for correction in corrections:
        match = find_first(result.text, correction.old)
        if match is None:
            logger.debug("No match for %r", correction.old)
            result.failures.append(correction.reason)
            continue
        result.text = replace_span(result.text, match, correction.new)
        result.applied += 1
    return result


def review_corrections(
    text: str,
    corrections: Iterable[Correction],
    decide: Decision,
    highlight: Highlighter | None = None,
) -> ReviewResult:
    """Ask about each matching correction before applying it.

    Args:
        text: Current document text
        corrections: Corrections in the order they should be offered
        decide: Called as ``decide(correction, match, text)`` for every
            correction that matches; returns True to apply it
        highlight: Optional transient emphasis of the match before asking

    Corrections that do not match are skipped without asking. Declined and
    unmatched corrections both count as skipped.
    """
    result = ReviewResult(text=text)
    _review_into(result, corrections, decide, highlight)
    return result


def _review_into(
    result: ReviewResult,
    corrections: Iterable[Correction],
    decide: Decision,
    highlight: Highlighter | None,
) -> None:
    for correction in corrections:
        match = find_first(result.text, correction.old)
        if match is None:
            result.skipped += 1
            continue

        if highlight is not None:
            highlight(result.text, match)

        if decide(correction, match, result.text):
            result.text = replace_span(result.text, match, correction.new)
            result.applied += 1
        else:
            result.skipped += 1


def _load(
    document: Path, config: ProofreaderConfiguration, store: CorrectionStore | None
) -> tuple[str, Sequence[Correction]]:
    store = store or CorrectionStore()
    corrections = store.read(config.get_output_path(document))
    # Line endings are kept as-is so "old" strings match byte for byte.
    with open(document, "r", encoding="utf-8", newline="") as f:
        return f.read(), corrections


def apply_to_file(
    document: Path,
    config: ProofreaderConfiguration,
    *,
    store: CorrectionStore | None = None,
) -> BulkResult:
    """Bulk-apply the side file next to ``document`` and save the document.

    Raises:
        CorrectionFileNotFoundError: If there is no side file
        CorrectionParseError: If the side file is malformed
    """
    text, corrections = _load(document, config, store)
    result = apply_corrections(text, corrections)
    if result.applied:
        write_text_atomic(Path(document), result.text)
    logger.info("Bulk apply on %s: %s", document, result.summary())
    return result


def review_file(
    document: Path,
    config: ProofreaderConfiguration,
    decide: Decision,
    highlight: Highlighter | None = None,
    *,
    store: CorrectionStore | None = None,
) -> ReviewResult:
    """Interactively apply the side file next to ``document`` and save it.

    Corrections confirmed before an interruption (Ctrl-C, or an error raised by
    ``decide``) are still saved before the exception propagates.
    """
    text, corrections = _load(document, config, store)
    result = ReviewResult(text=text)
    try:
        _review_into(result, corrections, decide, highlight)
    finally:
        if result.applied:
            write_text_atomic(Path(document), result.text)
    logger.info("Review on %s: %s", document, result.summary())
    return result
