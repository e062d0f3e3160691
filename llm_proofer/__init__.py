"""LLM proofreader: send text to a model CLI and apply its corrections."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = [
    "cli",
    "config",
    "llm",
    "models",
    "prompt",
    "review",
]
