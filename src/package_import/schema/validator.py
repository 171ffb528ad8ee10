"""Shape validation of decoded package records against a FieldSchema."""

import uuid as uuidlib
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable

from package_import.models.package import PackageRecord
from package_import.schema.fields import FieldSchema


@dataclass(frozen=True)
class FieldError:
    """One schema violation on one field."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


def _is_uuid(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        uuidlib.UUID(value)
    except ValueError:
        return False
    return True


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_date(value: Any) -> bool:
    if isinstance(value, datetime) or _is_number(value):
        return True
    if isinstance(value, str):
        try:
            # fromisoformat only accepts a trailing Z from 3.11 on
            datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return False
        return True
    return False


def _is_uuid_list(value: Any) -> bool:
    return isinstance(value, list) and all(_is_uuid(v) for v in value)


TYPE_CHECKS: dict[str, Callable[[Any], bool]] = {
    "uuid": _is_uuid,
    "string": lambda v: isinstance(v, str),
    "number": _is_number,
    "double": _is_number,
    "boolean": lambda v: isinstance(v, bool),
    "date": _is_date,
    "object": lambda v: isinstance(v, dict),
    "[uuid]": _is_uuid_list,
}


def validate(record: PackageRecord, schema: FieldSchema) -> list[FieldError]:
    """
    Check a record against the schema. Returns every error found (empty when valid).
    Uniqueness and cross-record constraints are left to the target store.
    """
    errors: list[FieldError] = []
    for name, spec in schema.fields.items():
        if name not in record.data or record.data[name] is None:
            if spec.required:
                errors.append(FieldError(field=name, message="is required"))
            continue
        value = record.data[name]
        if not TYPE_CHECKS[spec.type](value):
            errors.append(
                FieldError(field=name, message=f"expected {spec.type}, got {type(value).__name__}: {value!r}")
            )
    return errors


def check_immutable(existing: dict[str, Any], incoming: dict[str, Any], immutable: Iterable[str]) -> list[str]:
    """Return immutable fields whose incoming value differs from the stored one."""
    return sorted(
        name
        for name in immutable
        if name in existing and name in incoming and existing[name] != incoming[name]
    )
