\
from __future__ import annotations
from pathlib import Path
from typing import Iterator, List
from ..core.models import SourceLine


class ParserPlugin:
    NAME = "base"
    SUPPORTED_EXTENSIONS: List[str] = []  # override in subclasses

    def parse(self, path: Path, max_bytes: int = 5_000_000) -> Iterator[SourceLine]:
        """Yield classified lines of ``path``; re-reads the file on each call."""
        raise NotImplementedError("parse must be implemented in subclasses")
