from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path

DEFAULT_COMMAND = "claude"
DEFAULT_MODEL = "sonnet"
DEFAULT_OUTPUT_FILENAME = "replacements.json"

ENV_PREFIX = "LLM_PROOFER"


@dataclass
class ProofreaderConfiguration:
    """User-overridable settings for sending and applying corrections."""

    # External tool
    command: str = DEFAULT_COMMAND
    model: str = DEFAULT_MODEL

    # Side file
    output_filename: str = DEFAULT_OUTPUT_FILENAME
    default_directory: Path = field(default_factory=Path.cwd)

    # Prompt template file (None = bundled template)
    prompt_template: Path | None = None

    @classmethod
    def from_env(cls) -> "ProofreaderConfiguration":
        """Build a configuration from ``LLM_PROOFER_*`` environment variables."""
        template = os.environ.get(f"{ENV_PREFIX}_PROMPT_TEMPLATE")
        default_dir = os.environ.get(f"{ENV_PREFIX}_DEFAULT_DIR")
        return cls(
            command=os.environ.get(f"{ENV_PREFIX}_COMMAND", DEFAULT_COMMAND),
            model=os.environ.get(f"{ENV_PREFIX}_MODEL", DEFAULT_MODEL),
            output_filename=os.environ.get(
                f"{ENV_PREFIX}_OUTPUT_FILENAME", DEFAULT_OUTPUT_FILENAME
            ),
            default_directory=Path(default_dir) if default_dir else Path.cwd(),
            prompt_template=Path(template) if template else None,
        )

    def with_overrides(self, **overrides: object) -> "ProofreaderConfiguration":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)

    def get_output_path(self, source: Path | None) -> Path:
        """Get the side-file path for a source document.

        Path: <directory of source>/<output_filename>, or
        <default_directory>/<output_filename> when the source has no location.
        """
        directory = Path(source).parent if source is not None else self.default_directory
        return directory / self.output_filename

    def tool_arguments(self) -> list[str]:
        """Command line for the model CLI: print mode, chosen model, plain text."""
        return [self.command, "-p", "--model", self.model, "--output-format", "text"]
