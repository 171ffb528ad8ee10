"""Source loaders for legacy package records."""

from package_import.loaders.base import BaseLoader, SourceError
from package_import.loaders.directory import DirectoryLoader
from package_import.loaders.jsonl import JsonLinesLoader
from package_import.loaders.ldif import LdifLoader
from package_import.loaders.registry import LoaderRegistry

__all__ = [
    "BaseLoader",
    "DirectoryLoader",
    "JsonLinesLoader",
    "LdifLoader",
    "LoaderRegistry",
    "SourceError",
]
