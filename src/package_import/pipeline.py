"""Reconciliation pipeline: validate → create-or-skip-or-update against the target store."""

import logging
from concurrent.futures import ALL_COMPLETED, FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from threading import Lock
from typing import Iterable, Optional

from package_import.loaders.base import SourceError
from package_import.models.outcome import Disposition, ImportOutcome, ImportSummary
from package_import.models.package import PackageRecord
from package_import.schema.fields import FieldSchema
from package_import.schema.validator import validate
from package_import.store.base import AlreadyExistsError, StoreError, TargetStore, WriteContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileOptions:
    """Run-level switches for reconcile()."""

    dry_run: bool = False
    overwrite: bool = False
    max_workers: int = 5


class OutcomeCollector:
    """Thread-safe sink holding exactly one outcome per input position."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._outcomes: dict[int, ImportOutcome] = {}

    def add(self, index: int, outcome: ImportOutcome) -> None:
        with self._lock:
            if index in self._outcomes:
                raise ValueError(f"Outcome for input #{index} already recorded")
            self._outcomes[index] = outcome

    def outcomes(self) -> list[ImportOutcome]:
        """Outcomes in input order, whatever order they completed in."""
        with self._lock:
            return [self._outcomes[i] for i in sorted(self._outcomes)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._outcomes)


def _log_outcome(outcome: ImportOutcome) -> None:
    if outcome.warnings:
        logger.warning("Package %s decoded with warnings: %s", outcome.key, "; ".join(outcome.warnings))
    if outcome.disposition is Disposition.IMPORTED:
        logger.info("Package %s %s", outcome.key, outcome.detail)
    elif outcome.disposition is Disposition.SKIPPED_DUPLICATE:
        logger.info("Package %s already exists, skipping", outcome.key)
    elif outcome.disposition is Disposition.SKIPPED_INVALID:
        logger.warning("Package %s is invalid, skipping: %s", outcome.key, "; ".join(outcome.errors))
    else:
        logger.error("Error importing package %s: %s", outcome.key, outcome.detail)


def check_record(record: PackageRecord, schema: FieldSchema) -> Optional[ImportOutcome]:
    """Return the skipped-invalid outcome for a record that fails the schema, else None."""
    errors = validate(record, schema)
    if not errors:
        return None
    return ImportOutcome(
        key=record.key,
        disposition=Disposition.SKIPPED_INVALID,
        detail=f"{len(errors)} schema error(s)",
        errors=tuple(str(e) for e in errors),
        warnings=tuple(str(w) for w in record.warnings),
    )


def reconcile_one(
    record: PackageRecord,
    target: TargetStore,
    options: ReconcileOptions,
    context: WriteContext,
) -> ImportOutcome:
    """
    Write a single record that already passed check_record(). Never raises:
    every problem becomes the record's outcome so one bad record cannot stop
    the batch.
    """
    key = record.key
    warnings = tuple(str(w) for w in record.warnings)

    if options.dry_run:
        return ImportOutcome(
            key=key,
            disposition=Disposition.IMPORTED,
            detail="would be imported (dry run)",
            dry_run=True,
            warnings=warnings,
        )

    try:
        try:
            target.create(key, record.data, context)
            detail = "imported"
        except AlreadyExistsError:
            if not options.overwrite:
                return ImportOutcome(
                    key=key,
                    disposition=Disposition.SKIPPED_DUPLICATE,
                    detail="already in target store",
                    warnings=warnings,
                )
            target.update(key, record.data, context)
            detail = "updated"
    except StoreError as e:
        return ImportOutcome(key=key, disposition=Disposition.FAILED, detail=str(e), warnings=warnings)
    except Exception as e:
        logger.exception("Unexpected error writing package %s", key)
        return ImportOutcome(
            key=key,
            disposition=Disposition.FAILED,
            detail=f"{type(e).__name__}: {e}",
            warnings=warnings,
        )

    return ImportOutcome(key=key, disposition=Disposition.IMPORTED, detail=detail, warnings=warnings)


def _collect(pending: dict[Future, int], collector: OutcomeCollector, return_when: str) -> None:
    """Move finished futures from pending into the collector."""
    done, _ = wait(list(pending), return_when=return_when)
    for future in done:
        index = pending.pop(future)
        outcome = future.result()
        collector.add(index, outcome)
        _log_outcome(outcome)


def reconcile(
    records: Iterable[PackageRecord],
    target: TargetStore,
    schema: FieldSchema,
    options: Optional[ReconcileOptions] = None,
) -> ImportSummary:
    """
    Reconcile every record against the target store with bounded concurrency.
    Records are pulled lazily, so a streaming loader keeps reading while
    earlier records are written; at most 2 x max_workers are in flight.
    Validation runs here, before the in-batch duplicate check, so only a
    uuid whose record was submitted for writing makes later copies
    duplicates. SourceError from the records iterable stops new work, lets
    in-flight writes finish, then propagates.
    """
    options = options or ReconcileOptions()
    context = WriteContext(immutable_fields=schema.immutable_fields())
    collector = OutcomeCollector()
    seen: set[str] = set()
    pending: dict[Future, int] = {}
    max_in_flight = max(1, options.max_workers) * 2

    with ThreadPoolExecutor(max_workers=max(1, options.max_workers)) as executor:
        try:
            for index, record in enumerate(records):
                outcome = check_record(record, schema)
                uuid = record.uuid
                if outcome is None and uuid is not None and uuid in seen:
                    outcome = ImportOutcome(
                        key=record.key,
                        disposition=Disposition.SKIPPED_DUPLICATE,
                        detail="duplicate uuid earlier in input",
                        warnings=tuple(str(w) for w in record.warnings),
                    )
                if outcome is not None:
                    collector.add(index, outcome)
                    _log_outcome(outcome)
                    continue
                if len(pending) >= max_in_flight:
                    _collect(pending, collector, FIRST_COMPLETED)
                if uuid is not None:
                    seen.add(uuid)
                future = executor.submit(reconcile_one, record, target, options, context)
                pending[future] = index
        except SourceError:
            logger.error("Source failed; waiting for %d in-flight writes", len(pending))
            if pending:
                _collect(pending, collector, ALL_COMPLETED)
            logger.error("Import aborted after %d records; summary is incomplete", len(collector))
            raise
        if pending:
            _collect(pending, collector, ALL_COMPLETED)

    summary = ImportSummary.from_outcomes(collector.outcomes())
    logger.info("%s", summary.to_text())
    return summary
