"""Per-record import outcomes and the run summary."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable


class Disposition(str, Enum):
    """Terminal classification of one record's processing."""

    IMPORTED = "imported"
    SKIPPED_DUPLICATE = "skipped-duplicate"
    SKIPPED_INVALID = "skipped-invalid"
    FAILED = "failed"


@dataclass(frozen=True)
class ImportOutcome:
    """Outcome of reconciling one input record."""

    key: str
    disposition: Disposition
    detail: str = ""
    dry_run: bool = False
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "disposition": self.disposition.value,
            "detail": self.detail,
            "dry_run": self.dry_run,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


@dataclass
class ImportSummary:
    """Counts per disposition over every outcome of a run."""

    total: int = 0
    imported: int = 0
    skipped_duplicate: int = 0
    skipped_invalid: int = 0
    failed: int = 0
    outcomes: list[ImportOutcome] = field(default_factory=list)

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[ImportOutcome]) -> "ImportSummary":
        summary = cls()
        for outcome in outcomes:
            summary.outcomes.append(outcome)
            summary.total += 1
            if outcome.disposition is Disposition.IMPORTED:
                summary.imported += 1
            elif outcome.disposition is Disposition.SKIPPED_DUPLICATE:
                summary.skipped_duplicate += 1
            elif outcome.disposition is Disposition.SKIPPED_INVALID:
                summary.skipped_invalid += 1
            else:
                summary.failed += 1
        return summary

    @property
    def ok(self) -> bool:
        """True when no record failed. Duplicates and invalid records are expected."""
        return self.failed == 0

    def by_key(self) -> dict[str, list[ImportOutcome]]:
        grouped: dict[str, list[ImportOutcome]] = {}
        for outcome in self.outcomes:
            grouped.setdefault(outcome.key, []).append(outcome)
        return grouped

    def to_text(self) -> str:
        return (
            f"Packages: {self.total} processed, {self.imported} imported, "
            f"{self.skipped_duplicate} duplicate, {self.skipped_invalid} invalid, "
            f"{self.failed} failed"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "completed" if self.ok else "completed_with_failures",
            "summary": {
                "total": self.total,
                "imported": self.imported,
                "skipped_duplicate": self.skipped_duplicate,
                "skipped_invalid": self.skipped_invalid,
                "failed": self.failed,
            },
            "outcomes": [o.to_dict() for o in self.outcomes],
        }
