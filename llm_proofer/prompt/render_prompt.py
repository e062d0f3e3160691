"""Render the proofreading prompt with pystache.

The template is a Mustache file with a single ``{{{text}}}`` slot that
receives the document text. The bundled template lives in ``promptFiles``;
users can point ``LLM_PROOFER_PROMPT_TEMPLATE`` (or ``--prompt-template``) at
their own file.

Usage:
    python -m llm_proofer.prompt.render_prompt [document.txt]

Prints the rendered prompt for the given document (or stdin) to stdout.
"""

from __future__ import annotations

import re
import sys
from pathlib import Path

import pystache

from llm_proofer.llm.errors import PromptTemplateError

PROMPTS_DIR = Path(__file__).parent / "promptFiles"
DEFAULT_TEMPLATE = "proofreader.md"

_TEXT_TAG = re.compile(r"\{\{\{\s*text\s*\}\}\}|\{\{\s*&?\s*text\s*\}\}")


def _read_prompt(name: str) -> str:
    p = PROMPTS_DIR / name
    if not p.exists():
        raise FileNotFoundError(f"Prompt file not found: {p}")
    return p.read_text(encoding="utf-8")


def _strip_code_fences(s: str) -> str:
    """Strip a single leading and trailing code-fence block if present.

    Handles fences like ``` or ```` optionally followed by a language tag.
    """
    lines = s.splitlines()
    if not lines:
        return s
    first = lines[0].lstrip()
    last = lines[-1].lstrip()
    if first.startswith("```"):
        lines = lines[1:]
    if lines and last.startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()


def load_template(path: str | Path | None = None) -> str:
    """Load a user template file, or the bundled one when ``path`` is None."""
    if path is None:
        return _strip_code_fences(_read_prompt(DEFAULT_TEMPLATE))
    template_path = Path(path)
    if not template_path.exists():
        raise FileNotFoundError(f"Prompt file not found: {template_path}")
    # User templates are used as written; fences may be part of the prompt.
    return template_path.read_text(encoding="utf-8")


def build_prompt(text: str, template: str | None = None) -> str:
    """Substitute ``text`` into the proofreading template.

    Args:
        text: The document text (or selected range) to proofread
        template: Template source; the bundled template when None

    Returns:
        The complete prompt to send on the model CLI's stdin

    Raises:
        PromptTemplateError: If the template has no ``text`` placeholder
    """
    if template is None:
        template = load_template()
    if not _TEXT_TAG.search(template):
        raise PromptTemplateError(
            "Prompt template has no {{{text}}} placeholder for the document text"
        )

    # The document is inserted as-is, even through a double-mustache tag.
    renderer = pystache.Renderer(escape=lambda u: u)
    return renderer.render(template, {"text": text})


if __name__ == "__main__":
    if len(sys.argv) > 1:
        source_text = Path(sys.argv[1]).read_text(encoding="utf-8")
    else:
        source_text = sys.stdin.read()
    print(build_prompt(source_text))
