"""Unit tests for import configuration loading."""

from pathlib import Path

import pytest

from package_import.config import ConfigError, ImportConfig, load_config
from package_import.store import HttpPackageStore, SqlitePackageStore, build_store


class TestImportConfig:
    """Tests for ImportConfig and load_config."""

    def test_defaults(self) -> None:
        cfg = ImportConfig()
        assert cfg.target.kind == "sqlite"
        assert cfg.workers == 5
        assert cfg.directory.base == "o=smartdc"
        assert cfg.schema_path is None

    def test_no_path_and_no_default_file_uses_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert load_config() == ImportConfig()

    def test_default_file_is_read(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "etc").mkdir()
        (tmp_path / "etc" / "config.yaml").write_text("workers: 2\n")
        assert load_config().workers == 2

    def test_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "target:\n  kind: http\n  url: http://papi.test\n  timeout: 5\n"
            "workers: 8\nschema_path: schema.yaml\n"
        )
        cfg = load_config(path)
        assert cfg.target.kind == "http"
        assert cfg.target.url == "http://papi.test"
        assert cfg.workers == 8
        assert cfg.schema_path == tmp_path / "schema.yaml"

    def test_http_requires_url(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("target:\n  kind: http\n")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config(path)

    def test_zero_workers_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("workers: 0\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_missing_explicit_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Cannot read config"):
            load_config(tmp_path / "missing.yaml")

    def test_bad_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("target: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(path)


class TestBuildStore:
    """Tests for build_store."""

    def test_sqlite(self, tmp_path: Path) -> None:
        cfg = ImportConfig.model_validate({"target": {"path": str(tmp_path / "p.db")}})
        assert isinstance(build_store(cfg.target), SqlitePackageStore)

    def test_http(self) -> None:
        cfg = ImportConfig.model_validate({"target": {"kind": "http", "url": "http://papi.test"}})
        store = build_store(cfg.target)
        assert isinstance(store, HttpPackageStore)
        store.close()
