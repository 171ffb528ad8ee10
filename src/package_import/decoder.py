"""Decode raw legacy attribute maps into canonical package records.

Legacy stores keep every attribute as a string (or a list of strings when the
attribute repeats), so numbers, booleans and nested JSON documents all need
repairing. Coercions are driven by FIELD_COERCIONS so each field's treatment
can be looked up and tested on its own.
"""

import copy
import json
import math
from typing import Any, Optional

from package_import.models.package import DecodeWarning, PackageRecord
from package_import.models.raw import RawRecord

# Directory bookkeeping and provisioning-overhead hints that are no longer tracked.
IGNORED_ATTRIBUTES = frozenset(
    {
        "dn",
        "objectclass",
        "controls",
        "overprovision_cpu",
        "overprovision_memory",
        "overprovision_storage",
        "overprovision_network",
        "overprovision_io",
    }
)

INTEGER = "integer"
DOUBLE = "double"
BOOLEAN = "boolean"
JSON_LIST = "json_list"
UUID_LIST = "uuid_list"
JSON_OBJECT = "json_object"
DATE = "date"

FIELD_COERCIONS: dict[str, str] = {
    "max_physical_memory": INTEGER,
    "max_swap": INTEGER,
    "vcpus": INTEGER,
    "cpu_cap": INTEGER,
    "max_lwps": INTEGER,
    "quota": INTEGER,
    "zfs_io_priority": INTEGER,
    "fss": INTEGER,
    "cpu_burst_ratio": DOUBLE,
    "ram_ratio": DOUBLE,
    "active": BOOLEAN,
    "default": BOOLEAN,
    "networks": JSON_LIST,
    "owner_uuids": UUID_LIST,
    "traits": JSON_OBJECT,
    "min_platform": JSON_OBJECT,
    "created_at": DATE,
    "updated_at": DATE,
}

LEGACY_OWNER_FIELD = "owner_uuid"
OWNERS_FIELD = "owner_uuids"


def _text(value: Any) -> Any:
    """Turn UTF-8 bytes into text; leave anything else alone."""
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError:
            return bytes(value)
    if isinstance(value, list):
        return [_text(v) for v in value]
    return value


def _to_number(value: Any, integer: bool) -> Optional[int | float]:
    """Parse a finite number, or return None when the value is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number: int | float = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            number = int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                return None
    else:
        return None
    if isinstance(number, float):
        if not math.isfinite(number):
            return None
        if integer and number.is_integer():
            return int(number)
    if not integer:
        return float(number)
    return number


def _uuid_list_from_string(text: str) -> list:
    """JSON-decode a stringified list, falling back to a single-element list."""
    try:
        parsed = json.loads(text)
    except ValueError:
        return [text]
    return parsed if isinstance(parsed, list) else [text]


def _coerce(field: str, kind: str, value: Any, warnings: list[DecodeWarning]) -> tuple[bool, Any]:
    """Coerce one value. Returns (keep, value); keep=False leaves the field absent."""
    if kind in (INTEGER, DOUBLE):
        number = _to_number(value, integer=kind == INTEGER)
        if number is None:
            warnings.append(DecodeWarning(field=field, message=f"not a number: {value!r}"))
            return False, None
        if kind == INTEGER and isinstance(number, float):
            warnings.append(DecodeWarning(field=field, message=f"not an integer: {value!r}"))
            return False, None
        return True, number

    if kind == BOOLEAN:
        return True, value is True or value == "true"

    if kind == JSON_LIST:
        if isinstance(value, list):
            return True, list(value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
            except ValueError:
                warnings.append(DecodeWarning(field=field, message="invalid JSON, using []"))
                return True, []
            if isinstance(parsed, list):
                return True, parsed
        warnings.append(DecodeWarning(field=field, message="not a list, using []"))
        return True, []

    if kind == UUID_LIST:
        if isinstance(value, list):
            return True, list(value)
        if isinstance(value, str):
            return True, _uuid_list_from_string(value)
        return True, value

    if kind == JSON_OBJECT:
        if isinstance(value, dict):
            return True, value
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
            except ValueError:
                warnings.append(DecodeWarning(field=field, message="invalid JSON, using {}"))
                return True, {}
            if isinstance(parsed, dict):
                return True, parsed
        warnings.append(DecodeWarning(field=field, message="not an object, using {}"))
        return True, {}

    if kind == DATE:
        if isinstance(value, str) and value.strip().isdigit():
            return True, int(value.strip())
        return True, value

    raise ValueError(f"Unknown coercion kind: {kind}")


def _migrate_owner(data: dict[str, Any], warnings: list[DecodeWarning]) -> None:
    """Replace the legacy singular owner_uuid with the owner_uuids list."""
    if LEGACY_OWNER_FIELD not in data:
        return
    legacy = data.pop(LEGACY_OWNER_FIELD)
    if OWNERS_FIELD in data:
        warnings.append(
            DecodeWarning(field=LEGACY_OWNER_FIELD, message="ignored, owner_uuids already present")
        )
        return
    if isinstance(legacy, list):
        data[OWNERS_FIELD] = list(legacy)
    elif isinstance(legacy, str):
        data[OWNERS_FIELD] = _uuid_list_from_string(legacy)
    else:
        data[OWNERS_FIELD] = [legacy]


def decode(raw: RawRecord) -> PackageRecord:
    """
    Normalize one raw attribute map into a PackageRecord.
    Never raises on bad values: problems become warnings on the record, and
    the schema validator decides whether the result is importable.
    """
    warnings: list[DecodeWarning] = []
    data: dict[str, Any] = {}

    for name in sorted(raw.data):
        key = name.lower()
        if key in IGNORED_ATTRIBUTES:
            continue
        data[key] = _text(copy.deepcopy(raw.data[name]))

    _migrate_owner(data, warnings)

    for field in sorted(data):
        kind = FIELD_COERCIONS.get(field)
        if kind is None:
            continue
        keep, value = _coerce(field, kind, data[field], warnings)
        if keep:
            data[field] = value
        else:
            del data[field]

    return PackageRecord(data=data, warnings=warnings, source_ref=raw.source_ref)
