"""Pytest fixtures for package-import tests."""

import json
import tempfile
from pathlib import Path

import pytest

from package_import.models.raw import RawRecord
from package_import.schema import FieldSchema, load_schema
from package_import.store import SqlitePackageStore

PACKAGE_UUID = "7fc87f43-2def-4e6f-9f4c-bd2f9a4d7e3a"
OWNER_UUID = "930896af-bf8c-48d4-885c-6573a94b1853"
NETWORK_UUID = "1e7bb0e1-25a9-43b6-bb19-f79ae9540b39"


def make_attrs(uuid: str = PACKAGE_UUID, **overrides) -> dict:
    """Directory-style attribute map for one package: every value a string."""
    attrs = {
        "dn": f"uuid={uuid}, ou=packages, o=smartdc",
        "objectclass": "sdcpackage",
        "uuid": uuid,
        "name": "sdc_128",
        "version": "1.0.0",
        "active": "true",
        "default": "false",
        "vcpus": "1",
        "cpu_cap": "100",
        "max_lwps": "1000",
        "max_physical_memory": "128",
        "max_swap": "256",
        "quota": "10240",
        "zfs_io_priority": "10",
        "fss": "25",
        "cpu_burst_ratio": "0.5",
        "ram_ratio": "1.5",
        "networks": json.dumps([NETWORK_UUID]),
        "owner_uuid": OWNER_UUID,
        "traits": '{"ssd": true}',
        "overprovision_cpu": "2",
    }
    attrs.update(overrides)
    return attrs


def write_jsonl(path: Path, objects: list) -> Path:
    path.write_text("\n".join(json.dumps(o) for o in objects) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def sample_attrs() -> dict:
    """Attribute map for one valid package as stored in the directory."""
    return make_attrs()


@pytest.fixture
def raw_package(sample_attrs: dict) -> RawRecord:
    """RawRecord built from the sample attributes."""
    return RawRecord(data=sample_attrs, source_ref=sample_attrs["dn"])


@pytest.fixture
def schema() -> FieldSchema:
    """Bundled package schema."""
    return load_schema()


@pytest.fixture
def temp_db() -> Path:
    """Temporary database path for isolated tests."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        path = Path(f.name)
    yield path
    path.unlink(missing_ok=True)


@pytest.fixture
def store(temp_db: Path) -> SqlitePackageStore:
    """SqlitePackageStore with temporary database."""
    return SqlitePackageStore(temp_db)
