"""JSON array extraction for model CLI output.

The model is asked to reply with nothing but a JSON array, but in practice the
output may still carry a preamble, markdown fences or a closing remark. This
module locates the first top-level array in such text by scanning brackets
structurally, so bracket characters inside JSON strings do not confuse it.
"""

from __future__ import annotations

import json
from typing import Any

from .errors import CorrectionParseError

_OPENERS = {"[": "]", "{": "}"}
_CLOSERS = {"]", "}"}


def extract_json_array(text: str) -> str | None:
    """Return the first balanced ``[...]`` span in ``text``, verbatim.

    Scanning starts at the first ``[`` and keeps a stack of expected closers.
    While inside a double-quoted string, brackets are ignored and a backslash
    escapes the following character.

    Args:
        text: Raw output from the model CLI

    Returns:
        The exact substring from the first ``[`` to its matching ``]``, or
        ``None`` when there is no ``[`` or the structure never balances.

    Example:
        >>> extract_json_array('Sure: [{"old": "a]", "new": "b"}] done')
        '[{"old": "a]", "new": "b"}]'
    """
    if not isinstance(text, str):
        raise ValueError(f"Expected string input, got {type(text)}")

    start = text.find("[")
    if start == -1:
        return None

    stack: list[str] = []
    in_string = False
    escaped = False

    for index in range(start, len(text)):
        char = text[index]

        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char in _OPENERS:
            stack.append(_OPENERS[char])
        elif char in _CLOSERS:
            if not stack or stack.pop() != char:
                # A closer that does not match its opener: not a valid array.
                return None
            if not stack:
                return text[start : index + 1]

    return None


def parse_json_array(text: str) -> list[Any]:
    """Parse ``text`` as JSON and require a top-level array.

    Raises:
        CorrectionParseError: If the text is not valid JSON or not an array
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CorrectionParseError(f"Invalid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise CorrectionParseError(
            f"Expected a JSON array, got {type(data).__name__}"
        )
    return data
