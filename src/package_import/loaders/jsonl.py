"""Line-delimited JSON export loader."""

import json
import logging
from pathlib import Path
from typing import Iterator

from package_import.loaders.base import BaseLoader, SourceError
from package_import.models.raw import RawRecord

logger = logging.getLogger(__name__)


class JsonLinesLoader(BaseLoader):
    """Reads one JSON package object per line. Bad lines are logged and skipped."""

    source_id = "json"

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _lines(self) -> Iterator[str]:
        try:
            with self.path.open(encoding="utf-8") as f:
                yield from f
        except (OSError, UnicodeDecodeError) as e:
            raise SourceError(f"Cannot read JSON file {self.path}: {e}") from e

    def iter_raw(self) -> Iterator[RawRecord]:
        for line_no, line in enumerate(self._lines(), start=1):
            if not line.strip():
                continue
            try:
                obj = json.loads(line)
            except ValueError as e:
                logger.warning("%s line %d: invalid JSON, skipping: %s", self.path, line_no, e)
                continue
            if not isinstance(obj, dict):
                logger.warning("%s line %d: expected an object, got %s, skipping", self.path, line_no, type(obj).__name__)
                continue
            yield RawRecord(data=obj, source_ref=f"{self.path.name}:{line_no}")
