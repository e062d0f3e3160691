from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path

from llm_proofer.llm.errors import CorrectionFileNotFoundError, CorrectionParseError
from llm_proofer.llm.json_utils import parse_json_array
from llm_proofer.models import Correction, corrections_from_json

logger = logging.getLogger(__name__)


def write_text_atomic(path: Path, text: str) -> Path:
    """Write ``text`` to ``path`` through a temp file in the same directory.

    The target keeps its old content until the new content is fully written,
    and an existing file keeps its permission bits.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    temp_file = Path(temp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        if path.exists():
            os.chmod(temp_file, stat.S_IMODE(path.stat().st_mode))
        temp_file.replace(path)
    except OSError as e:
        logger.error("Error writing to %s: %s", path, e)
        if temp_file.exists():
            temp_file.unlink()
        raise

    return path


class CorrectionStore:
    """Reads and writes the JSON side file holding pending corrections."""

    def write(self, path: Path, json_array_text: str) -> Path:
        """Persist the model's JSON array verbatim, replacing any prior file.

        Returns:
            Path to the saved file
        """
        saved = write_text_atomic(path, json_array_text)
        logger.info("Wrote corrections to %s", saved)
        return saved

    def read(self, path: Path) -> list[Correction]:
        """Load the correction list from a side file.

        An empty array is a valid result meaning "no corrections".

        Raises:
            CorrectionFileNotFoundError: If the file does not exist
            CorrectionParseError: If the file is not a JSON array of
                ``{old, new, reason}`` objects
        """
        path = Path(path)
        if not path.exists():
            raise CorrectionFileNotFoundError(path)

        text = path.read_text(encoding="utf-8")
        try:
            return corrections_from_json(parse_json_array(text))
        except CorrectionParseError as exc:
            raise CorrectionParseError(f"{path}: {exc}") from exc
