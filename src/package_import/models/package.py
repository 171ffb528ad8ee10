"""Decoded package record and decode warnings."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class DecodeWarning(BaseModel):
    """A single field that could not be coerced during decode."""

    model_config = ConfigDict(frozen=True)

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class PackageRecord(BaseModel):
    """
    Canonical package record produced by every source loader.
    `data` holds the decoded attributes keyed by schema field name; whether
    they are usable is decided by the schema validator, not here.
    """

    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[DecodeWarning] = Field(default_factory=list)
    source_ref: Optional[str] = None

    @property
    def uuid(self) -> Optional[str]:
        value = self.data.get("uuid")
        return value if isinstance(value, str) and value else None

    @property
    def key(self) -> str:
        """Reconciliation key: the uuid, or the source reference when it has none."""
        return self.uuid or self.source_ref or "<unknown>"
