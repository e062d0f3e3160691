"""Public model exports for the project.

Tests and other modules should import ``from llm_proofer.models import Correction``.
"""

from __future__ import annotations

from .correction import Correction, corrections_from_json

__all__ = ["Correction", "corrections_from_json"]
