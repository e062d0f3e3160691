"""Prompt template rendering."""

from __future__ import annotations

from .render_prompt import PROMPTS_DIR, build_prompt, load_template

__all__ = ["PROMPTS_DIR", "build_prompt", "load_template"]
