"""Tests for prompt template rendering with pystache."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from llm_proofer.llm.errors import PromptTemplateError
from llm_proofer.prompt.render_prompt import (
    PROMPTS_DIR,
    _strip_code_fences,
    build_prompt,
    load_template,
)


class TestStripCodeFences:
    """Tests for _strip_code_fences helper."""

    def test_strip_with_language_tag(self) -> None:
        text = "```markdown\nHello world\n```"
        assert _strip_code_fences(text) == "Hello world"

    def test_no_fences(self) -> None:
        assert _strip_code_fences("Hello world") == "Hello world"

    def test_empty_string(self) -> None:
        assert _strip_code_fences("") == ""


class TestDefaultTemplate:
    def test_bundled_template_exists(self) -> None:
        assert (PROMPTS_DIR / "proofreader.md").exists()

    def test_document_text_is_inserted(self) -> None:
        prompt = build_prompt("This is teh text.")
        assert "This is teh text." in prompt
        assert "{{" not in prompt

    def test_instructions_present(self) -> None:
        prompt = build_prompt("x").lower()
        assert "json array" in prompt
        assert '"old"' in prompt and '"new"' in prompt and '"reason"' in prompt
        assert "archaic" in prompt
        assert "blockquote" in prompt
        assert "proper nouns" in prompt
        assert "code fences" in prompt

    def test_text_is_not_html_escaped(self) -> None:
        text = '<b>"quoted" & \'single\'</b>'
        assert text in build_prompt(text)

    def test_mustache_in_text_is_not_rendered(self) -> None:
        text = "{{text}} and {{#section}}x{{/section}}"
        assert text in build_prompt(text)


class TestCustomTemplate:
    def test_double_mustache_placeholder_is_not_escaped(self) -> None:
        assert build_prompt("a < b", "Fix: {{text}}") == "Fix: a < b"

    def test_ampersand_placeholder(self) -> None:
        assert build_prompt("a & b", "Fix: {{&text}}") == "Fix: a & b"

    def test_missing_placeholder_raises(self) -> None:
        with pytest.raises(PromptTemplateError):
            build_prompt("text", "Fix the following document.")

    def test_load_template_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.md"
        path.write_text("Proofread:\n{{{text}}}", encoding="utf-8")
        template = load_template(path)
        assert build_prompt("abc", template) == "Proofread:\nabc"

    def test_user_template_keeps_fences_around_text(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.md"
        path.write_text("```\n{{{text}}}\n```", encoding="utf-8")
        template = load_template(path)
        assert template == "```\n{{{text}}}\n```"
        assert build_prompt("abc", template) == "```\nabc\n```"

    def test_load_missing_template(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_template(tmp_path / "missing.md")
