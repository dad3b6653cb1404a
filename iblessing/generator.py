"""Base class of the generators that turn analysis reports into scripts."""

from __future__ import annotations

import logging
from pathlib import Path

log = logging.getLogger(__name__)


class GeneratorError(Exception):
    """Raised when a generator cannot produce its output."""


class Generator:
    """A named producer of output files from one input file.

    ``options`` holds the generator's string options, ``input_path`` the
    file it reads, ``output_path`` the directory it writes to and
    ``file_name`` the base name its outputs are named after.
    """

    def __init__(self, identifier: str, desc: str) -> None:
        self.identifier = identifier
        self.desc = desc
        self.options: dict[str, str] = {}
        self.input_path = ""
        self.output_path = ""
        self.file_name = ""

    def start(self) -> Path | None:
        """Produce the generator's output; the base generator produces nothing."""
        return None

    def _output_file(self, suffix: str) -> Path:
        return Path(self.output_path) / f"{self.file_name}{suffix}"

    def _write(self, path: Path, text: str) -> Path:
        try:
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise GeneratorError(f"cannot open output file {path}") from exc
        log.info("saved to %s", path)
        return path

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.identifier!r})"