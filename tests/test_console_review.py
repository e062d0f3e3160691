from __future__ import annotations

import io
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from rich.console import Console

from llm_proofer.models import Correction
from llm_proofer.review import console_review
from llm_proofer.review.applier import Match, review_corrections
from llm_proofer.review.console_review import ConsoleReviewer


def _reviewer() -> tuple[ConsoleReviewer, io.StringIO]:
    buffer = io.StringIO()
    console = Console(file=buffer, width=120, color_system=None)
    return ConsoleReviewer(console, context_chars=10), buffer


def test_highlight_shows_context_and_line():
    reviewer, buffer = _reviewer()
    text = "first line\nsecond line with teh typo in it and more text after"
    start = text.index("teh")

    reviewer.highlight(text, Match(start, start + 3))

    output = buffer.getvalue()
    assert "teh" in output
    assert "line 2" in output
    assert "…" in output


def test_decide_shows_reason_and_asks(monkeypatch):
    reviewer, buffer = _reviewer()
    asked = []

    def fake_ask(prompt, **kwargs):
        asked.append(prompt)
        return True

    monkeypatch.setattr(console_review.Confirm, "ask", fake_ask)
    correction = Correction(old="teh", new="the", reason="transposed letters")

    assert reviewer.decide(correction, Match(0, 3), "teh") is True

    output = buffer.getvalue()
    assert "transposed letters" in output
    assert "'teh'" in output and "'the'" in output
    assert asked == ["Apply this correction?"]


def test_reviewer_drives_interactive_apply(monkeypatch):
    reviewer, _ = _reviewer()
    answers = iter([False, True])
    monkeypatch.setattr(console_review.Confirm, "ask", lambda *a, **k: next(answers))

    result = review_corrections(
        "a b c",
        [
            Correction(old="a", new="A", reason="r"),
            Correction(old="zzz", new="x", reason="r"),
            Correction(old="c", new="C", reason="r"),
        ],
        reviewer.decide,
        reviewer.highlight,
    )

    assert result.text == "a b C"
    assert (result.applied, result.skipped) == (1, 2)
