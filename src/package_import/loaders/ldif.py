"""LDIF dump loader.

Handles the parts of the LDIF format that directory dumps actually use:
`attr: value` and `attr:: base64` lines, folded continuation lines, comments,
the `version:` header and blank lines between entries. Entries without a
uuid (organizational units, users, ...) are not packages and are dropped.
"""

import base64
import binascii
import logging
from pathlib import Path
from typing import Any, Iterator, Optional

from package_import.loaders.base import BaseLoader, SourceError
from package_import.models.package import PackageRecord
from package_import.models.raw import RawRecord

logger = logging.getLogger(__name__)


class LdifLoader(BaseLoader):
    """Reads package entries from an LDIF file."""

    source_id = "ldif"

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read_lines(self) -> Iterator[str]:
        try:
            with self.path.open(encoding="utf-8") as f:
                for line in f:
                    yield line.rstrip("\r\n")
        except (OSError, UnicodeDecodeError) as e:
            raise SourceError(f"Cannot read LDIF file {self.path}: {e}") from e

    def _blocks(self) -> Iterator[tuple[int, list[tuple[int, str]]]]:
        """Yield (first line number, [(line number, unfolded line)]) per entry."""
        block: list[tuple[int, str]] = []
        in_comment = False
        for line_no, line in enumerate(self._read_lines(), start=1):
            if not line.strip():
                if block:
                    yield block[0][0], block
                block = []
                in_comment = False
                continue
            if line.startswith(" "):
                # Folded line: continues whatever came before, comments included
                if not in_comment and block:
                    prev_no, prev = block[-1]
                    block[-1] = (prev_no, prev + line[1:])
                continue
            in_comment = line.startswith("#")
            if in_comment or line == "-":
                continue
            block.append((line_no, line))
        if block:
            yield block[0][0], block

    def _parse_value(self, line_no: int, name: str, rest: str) -> tuple[bool, Any]:
        """Decode the text after the first colon. Returns (ok, value)."""
        if rest.startswith(":"):
            try:
                raw = base64.b64decode(rest[1:].strip(), validate=True)
            except (binascii.Error, ValueError):
                logger.warning("%s line %d: bad base64 for %s, skipping attribute", self.path, line_no, name)
                return False, None
            try:
                return True, raw.decode("utf-8")
            except UnicodeDecodeError:
                return True, raw
        if rest.startswith("<"):
            logger.warning("%s line %d: URL value for %s not supported, skipping attribute", self.path, line_no, name)
            return False, None
        return True, rest.lstrip(" ")

    def _assemble(self, lines: list[tuple[int, str]]) -> dict[str, Any]:
        attrs: dict[str, Any] = {}
        for line_no, line in lines:
            name, sep, rest = line.partition(":")
            if not sep or not name.strip():
                logger.warning("%s line %d: not an attribute line, skipping: %r", self.path, line_no, line)
                continue
            name = name.strip().lower()
            ok, value = self._parse_value(line_no, name, rest)
            if not ok:
                continue
            if name not in attrs:
                attrs[name] = value
            elif isinstance(attrs[name], list):
                attrs[name].append(value)
            else:
                attrs[name] = [attrs[name], value]
        return attrs

    def iter_raw(self) -> Iterator[RawRecord]:
        first = True
        for start, lines in self._blocks():
            if first and lines[0][1].lower().startswith("version:"):
                lines = lines[1:]
            first = False
            if not lines:
                continue
            attrs = self._assemble(lines)
            dn: Optional[Any] = attrs.get("dn")
            ref = dn if isinstance(dn, str) else f"{self.path.name}:{start}"
            yield RawRecord(data=attrs, source_ref=ref)

    def accept(self, record: PackageRecord) -> bool:
        return record.uuid is not None
