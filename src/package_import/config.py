"""Import configuration, loaded once from YAML and passed explicitly."""

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

DEFAULT_CONFIG_PATH = Path("etc/config.yaml")


class ConfigError(Exception):
    """Configuration or schema document is missing or invalid."""


class TargetConfig(BaseModel):
    """Where imported packages are written."""

    kind: Literal["sqlite", "http"] = "sqlite"
    path: Path = Path("packages.db")
    url: Optional[str] = None
    timeout: float = Field(default=30.0, gt=0)

    @model_validator(mode="after")
    def _url_required_for_http(self) -> "TargetConfig":
        if self.kind == "http" and not self.url:
            raise ValueError("target.url is required when target.kind is 'http'")
        return self


class DirectoryConfig(BaseModel):
    """Search parameters for the directory loader."""

    base: str = "o=smartdc"
    filter: str = "(&(objectclass=sdcpackage))"
    page_size: int = Field(default=500, gt=0)


class ImportConfig(BaseModel):
    """Top-level settings for one import run."""

    target: TargetConfig = Field(default_factory=TargetConfig)
    directory: DirectoryConfig = Field(default_factory=DirectoryConfig)
    workers: int = Field(default=5, ge=1, description="Concurrent store writes")
    schema_path: Optional[Path] = Field(
        default=None,
        description="Field schema YAML; the bundled package schema when unset",
    )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ImportConfig":
        """Load config from a YAML file. Relative paths inside resolve against its directory."""
        path = Path(path)
        try:
            data = yaml.safe_load(path.read_text()) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config {path}: {e}") from e
        try:
            cfg = cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid config {path}: {e}") from e
        base = path.parent
        if cfg.schema_path is not None and not cfg.schema_path.is_absolute():
            cfg = cfg.model_copy(update={"schema_path": base / cfg.schema_path})
        return cfg


def load_config(path: Optional[str | Path] = None) -> ImportConfig:
    """
    Load the config at path. With no path, read DEFAULT_CONFIG_PATH if it
    exists and fall back to built-in defaults otherwise.
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return ImportConfig()
        path = DEFAULT_CONFIG_PATH
    return ImportConfig.from_yaml(path)
