"""Field schema model loaded from a YAML document."""

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from package_import.config import ConfigError

DEFAULT_SCHEMA_PATH = Path(__file__).parent / "packages.yaml"

FieldType = Literal["uuid", "string", "number", "double", "boolean", "date", "object", "[uuid]"]


class FieldSpec(BaseModel):
    """Declared type and constraints for one package field."""

    model_config = ConfigDict(frozen=True)

    type: FieldType
    required: bool = False
    immutable: bool = False
    index: bool = False
    unique: bool = False

    @field_validator("type", mode="before")
    @classmethod
    def _alias_list_of_uuid(cls, value):
        return "[uuid]" if value == "list-of-uuid" else value


class FieldSchema(BaseModel):
    """Package schema: field name -> FieldSpec. Read once, never mutated."""

    model_config = ConfigDict(frozen=True)

    fields: dict[str, FieldSpec] = Field(default_factory=dict)

    def required_fields(self) -> list[str]:
        return [name for name, spec in self.fields.items() if spec.required]

    def immutable_fields(self) -> frozenset[str]:
        return frozenset(name for name, spec in self.fields.items() if spec.immutable)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "FieldSchema":
        """Load schema from YAML. Accepts a top-level `schema:` mapping or a bare field mapping."""
        path = Path(path)
        try:
            data = yaml.safe_load(path.read_text()) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read schema {path}: {e}") from e
        if isinstance(data, dict) and isinstance(data.get("schema"), dict):
            data = data["schema"]
        try:
            return cls.model_validate({"fields": data})
        except ValidationError as e:
            raise ConfigError(f"Invalid schema {path}: {e}") from e


def load_schema(path: Optional[str | Path] = None) -> FieldSchema:
    """Load the schema at path, or the bundled package schema."""
    return FieldSchema.from_yaml(path or DEFAULT_SCHEMA_PATH)
