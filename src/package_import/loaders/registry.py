"""Lookup from a package source medium to the loader that reads it."""

from typing import Type

from package_import.loaders.base import BaseLoader
from package_import.loaders.directory import DirectoryLoader
from package_import.loaders.jsonl import JsonLinesLoader
from package_import.loaders.ldif import LdifLoader


class LoaderRegistry:
    """The three package media: a live directory, an LDIF dump and a JSON-lines export."""

    _loaders: dict[str, tuple[Type[BaseLoader], str]] = {
        "ldap": (DirectoryLoader, "directory server"),
        "ldif": (LdifLoader, "LDIF dump"),
        "json": (JsonLinesLoader, "JSON-lines export"),
    }

    @classmethod
    def get(cls, source_id: str, **kwargs) -> BaseLoader:
        """Build the loader for a medium; kwargs go to its constructor unchanged."""
        entry = cls._loaders.get(source_id.lower())
        if entry is None:
            media = ", ".join(f"{name} ({label})" for name, (_, label) in cls._loaders.items())
            raise ValueError(f"Unknown package source {source_id!r}; expected one of {media}")
        loader_cls, _ = entry
        return loader_cls(**kwargs)

    @classmethod
    def available_sources(cls) -> list[str]:
        return list(cls._loaders)
