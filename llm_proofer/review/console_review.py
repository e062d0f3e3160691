"""Terminal front end for interactive review, built on rich."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm
from rich.text import Text

from llm_proofer.models import Correction

from .applier import Match

CONTEXT_CHARS = 80


class ConsoleReviewer:
    """Shows each candidate match in context and asks whether to apply it."""

    def __init__(self, console: Console | None = None, context_chars: int = CONTEXT_CHARS):
        self.console = console or Console()
        self.context_chars = context_chars

    def highlight(self, text: str, match: Match) -> None:
        start = max(0, match.start - self.context_chars)
        end = min(len(text), match.end + self.context_chars)

        snippet = Text()
        if start > 0:
            snippet.append("…")
        snippet.append(text[start : match.start])
        snippet.append(text[match.start : match.end], style="bold reverse yellow")
        snippet.append(text[match.end : end])
        if end < len(text):
            snippet.append("…")

        line_number = text.count("\n", 0, match.start) + 1
        self.console.print(Panel(snippet, title=f"line {line_number}", expand=False))

    def decide(self, correction: Correction, match: Match, text: str) -> bool:
        self.console.print(Text.assemble(("Reason: ", "bold"), correction.reason))
        self.console.print(Text.assemble(("  old: ", "red"), repr(correction.old)))
        self.console.print(Text.assemble(("  new: ", "green"), repr(correction.new)))
        return Confirm.ask("Apply this correction?", console=self.console, default=False)
