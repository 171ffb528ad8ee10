"""Target store interface for imported packages."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


class StoreError(Exception):
    """The target store rejected or failed a request."""


class AlreadyExistsError(StoreError):
    """A create-only write found the key already present."""

    def __init__(self, key: str):
        super().__init__(f"Package {key} already exists")
        self.key = key


@dataclass(frozen=True)
class WriteContext:
    """Per-write options handed to the store."""

    immutable_fields: frozenset[str] = field(default_factory=frozenset)


class TargetStore(ABC):
    """
    Standard interface for package stores.
    `create` must be atomic: it is the only authority on duplicates, so
    callers never probe with `exists` before writing.
    """

    @abstractmethod
    def create(self, key: str, record: dict[str, Any], context: WriteContext) -> None:
        """Insert a new package. Raises AlreadyExistsError if key is taken."""
        pass

    @abstractmethod
    def update(self, key: str, record: dict[str, Any], context: WriteContext) -> None:
        """Replace an existing package, keeping its immutable fields."""
        pass

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Return whether a package with this key is stored."""
        pass

    def close(self) -> None:
        """Release client resources. Default: nothing to release."""


class DryRunStore(TargetStore):
    """Stand-in target for dry runs. Opens nothing and refuses every write."""

    def create(self, key: str, record: dict[str, Any], context: WriteContext) -> None:
        raise StoreError(f"Dry run: refusing to create {key}")

    def update(self, key: str, record: dict[str, Any], context: WriteContext) -> None:
        raise StoreError(f"Dry run: refusing to update {key}")

    def exists(self, key: str) -> bool:
        return False
