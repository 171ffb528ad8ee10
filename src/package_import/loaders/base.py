"""Abstract base class for package source loaders."""

from abc import ABC, abstractmethod
from typing import Iterator

from package_import.decoder import decode
from package_import.models.package import PackageRecord
from package_import.models.raw import RawRecord


class SourceError(Exception):
    """The source medium could not be read. Fatal for the whole run."""


class BaseLoader(ABC):
    """
    Standard interface for package sources.
    Loaders stream raw attribute maps from their medium; `load` decodes each
    one as it arrives. Malformed entries are logged and skipped, while an
    unreadable medium raises SourceError.
    """

    source_id: str = ""

    @abstractmethod
    def iter_raw(self) -> Iterator[RawRecord]:
        """
        Yield raw records in source order.
        """
        pass

    def accept(self, record: PackageRecord) -> bool:
        """
        Whether a decoded record belongs in the output. Default: keep all.
        """
        return True

    def load(self) -> Iterator[PackageRecord]:
        """
        Yield decoded package records lazily, one per accepted raw record.
        """
        for raw in self.iter_raw():
            record = decode(raw)
            if self.accept(record):
                yield record
