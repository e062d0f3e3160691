"""Pydantic model for a single proposed text correction.

Each correction maps to one object of the JSON array the model returns:
``{"old": ..., "new": ..., "reason": ...}``. Unlike most text fields in the
project, ``old`` and ``new`` are kept exactly as given (no trimming) because
they are matched literally against the document.
"""

from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from llm_proofer.llm.errors import CorrectionParseError


class Correction(BaseModel):
    """One proposed substitution with a human-readable justification.

    Contract:
    - old: exact literal substring expected in the source text; an empty
      string never matches and is reported as a miss when applied
    - new: replacement text, inserted literally
    - reason: justification shown during interactive review
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    old: str
    new: str
    reason: str

    @field_validator("old", "new", "reason", mode="before")
    def _require_string(cls, value: object) -> str:  # type: ignore[override]
        if not isinstance(value, str):
            raise ValueError("must be a string")
        return value


def corrections_from_json(items: List[Any]) -> List[Correction]:
    """Validate decoded JSON array items into Correction models.

    Raises:
        CorrectionParseError: If any item is not an object of the expected shape
    """
    corrections: List[Correction] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise CorrectionParseError(
                f"Item {index} is {type(item).__name__}, expected an object"
            )
        try:
            corrections.append(Correction.model_validate(item))
        except ValidationError as exc:
            raise CorrectionParseError(f"Item {index} is invalid: {exc}") from exc
    return corrections
