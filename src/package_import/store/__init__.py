"""Target stores for imported packages."""

from package_import.config import TargetConfig
from package_import.store.base import AlreadyExistsError, DryRunStore, StoreError, TargetStore, WriteContext
from package_import.store.http_store import HttpPackageStore
from package_import.store.sqlite_store import SqlitePackageStore


def build_store(target: TargetConfig) -> TargetStore:
    """Create the store described by the target config."""
    if target.kind == "http":
        return HttpPackageStore(target.url or "", timeout=target.timeout)
    return SqlitePackageStore(target.path, timeout=target.timeout)


__all__ = [
    "AlreadyExistsError",
    "DryRunStore",
    "HttpPackageStore",
    "SqlitePackageStore",
    "StoreError",
    "TargetStore",
    "WriteContext",
    "build_store",
]
