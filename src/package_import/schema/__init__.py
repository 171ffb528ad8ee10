"""Declarative package field schema and record validation."""

from package_import.schema.fields import FieldSchema, FieldSpec, load_schema
from package_import.schema.validator import FieldError, check_immutable, validate

__all__ = [
    "FieldError",
    "FieldSchema",
    "FieldSpec",
    "check_immutable",
    "load_schema",
    "validate",
]
