"""Data models for raw, decoded and reconciled package records."""

from package_import.models.outcome import Disposition, ImportOutcome, ImportSummary
from package_import.models.package import DecodeWarning, PackageRecord
from package_import.models.raw import RawRecord

__all__ = [
    "DecodeWarning",
    "Disposition",
    "ImportOutcome",
    "ImportSummary",
    "PackageRecord",
    "RawRecord",
]
