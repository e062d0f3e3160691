"""Tests for reading and writing the corrections side file."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from llm_proofer.llm.errors import CorrectionFileNotFoundError, CorrectionParseError
from llm_proofer.models import Correction
from llm_proofer.review.persistence import CorrectionStore, write_text_atomic


@pytest.fixture
def store() -> CorrectionStore:
    return CorrectionStore()


def test_write_persists_text_verbatim(store: CorrectionStore, tmp_path: Path):
    path = tmp_path / "replacements.json"
    text = '[ {"old": "teh",  "new": "the", "reason": "typo"} ]'

    saved = store.write(path, text)

    assert saved == path
    assert path.read_text(encoding="utf-8") == text


def test_write_overwrites_previous_content(store: CorrectionStore, tmp_path: Path):
    path = tmp_path / "replacements.json"
    path.write_text('[{"old": "a", "new": "b", "reason": "long old content"}]')

    store.write(path, "[]")

    assert path.read_text(encoding="utf-8") == "[]"


def test_write_leaves_no_temp_files(store: CorrectionStore, tmp_path: Path):
    store.write(tmp_path / "replacements.json", "[]")
    assert [p.name for p in tmp_path.iterdir()] == ["replacements.json"]


def test_write_creates_parent_directory(store: CorrectionStore, tmp_path: Path):
    path = tmp_path / "nested" / "replacements.json"
    store.write(path, "[]")
    assert path.exists()


def test_write_keeps_unicode(store: CorrectionStore, tmp_path: Path):
    path = tmp_path / "replacements.json"
    text = '[{"old": "こんにちわ", "new": "こんにちは", "reason": "誤字"}]'
    store.write(path, text)
    assert store.read(path)[0].new == "こんにちは"


def test_read_missing_file_raises_not_found(store: CorrectionStore, tmp_path: Path):
    with pytest.raises(CorrectionFileNotFoundError) as excinfo:
        store.read(tmp_path / "replacements.json")
    assert isinstance(excinfo.value, FileNotFoundError)


def test_read_empty_array_means_no_corrections(store: CorrectionStore, tmp_path: Path):
    path = tmp_path / "replacements.json"
    path.write_text("[]", encoding="utf-8")
    assert store.read(path) == []


def test_read_returns_corrections_in_order(store: CorrectionStore, tmp_path: Path):
    path = tmp_path / "replacements.json"
    path.write_text(
        '[{"old": "b", "new": "B", "reason": "first"},'
        ' {"old": "a", "new": "A", "reason": "second"}]',
        encoding="utf-8",
    )

    corrections = store.read(path)

    assert corrections == [
        Correction(old="b", new="B", reason="first"),
        Correction(old="a", new="A", reason="second"),
    ]


def test_read_accepts_empty_old(store: CorrectionStore, tmp_path: Path):
    path = tmp_path / "replacements.json"
    path.write_text(
        '[{"old": "brown", "new": "red", "reason": "r1"},'
        ' {"old": "", "new": "x", "reason": "r2"}]',
        encoding="utf-8",
    )

    corrections = store.read(path)

    assert [c.old for c in corrections] == ["brown", ""]


def test_read_keeps_whitespace_exact(store: CorrectionStore, tmp_path: Path):
    path = tmp_path / "replacements.json"
    path.write_text('[{"old": " a \\n", "new": "b ", "reason": "r"}]', encoding="utf-8")
    correction = store.read(path)[0]
    assert correction.old == " a \n"
    assert correction.new == "b "


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        '{"old": "a", "new": "b", "reason": "c"}',
        '["just a string"]',
        '[{"old": "a", "new": "b"}]',
        '[{"old": 1, "new": "b", "reason": "c"}]',
    ],
)
def test_read_malformed_file_raises_parse_error(
    store: CorrectionStore, tmp_path: Path, content: str
):
    path = tmp_path / "replacements.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(CorrectionParseError):
        store.read(path)


def test_write_text_atomic_preserves_mode(tmp_path: Path):
    path = tmp_path / "doc.txt"
    path.write_text("old", encoding="utf-8")
    path.chmod(0o644)

    write_text_atomic(path, "new")

    assert path.read_text(encoding="utf-8") == "new"
    assert path.stat().st_mode & 0o777 == 0o644
