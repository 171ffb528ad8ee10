"""Unit tests for the record decoder."""

import pytest

from package_import.decoder import FIELD_COERCIONS, IGNORED_ATTRIBUTES, decode
from package_import.models.raw import RawRecord
from tests.conftest import NETWORK_UUID, OWNER_UUID, PACKAGE_UUID


def _decode(**attrs):
    return decode(RawRecord(data=attrs))


def _warned(record, field: str) -> bool:
    return any(w.field == field for w in record.warnings)


class TestDecodeFullRecord:
    """Decoding a complete directory entry."""

    def test_sample_entry(self, raw_package: RawRecord) -> None:
        """All coercions applied to a typical entry."""
        record = decode(raw_package)
        data = record.data
        assert data["uuid"] == PACKAGE_UUID
        assert data["vcpus"] == 1
        assert data["max_physical_memory"] == 128
        assert data["cpu_burst_ratio"] == 0.5
        assert isinstance(data["ram_ratio"], float)
        assert data["active"] is True
        assert data["default"] is False
        assert data["networks"] == [NETWORK_UUID]
        assert data["owner_uuids"] == [OWNER_UUID]
        assert data["traits"] == {"ssd": True}
        assert record.warnings == []
        assert record.source_ref == raw_package.source_ref

    def test_drops_bookkeeping_attributes(self, raw_package: RawRecord) -> None:
        """dn, objectclass and overprovision hints never reach the record."""
        record = decode(raw_package)
        for name in ("dn", "objectclass", "overprovision_cpu", "owner_uuid"):
            assert name not in record.data

    def test_attribute_names_are_case_folded(self) -> None:
        """Directory attribute names are case-insensitive."""
        record = _decode(objectClass="sdcpackage", UUID=PACKAGE_UUID, Max_Swap="512")
        assert record.data == {"uuid": PACKAGE_UUID, "max_swap": 512}

    def test_deterministic(self, raw_package: RawRecord) -> None:
        """Decoding the same input twice gives identical output."""
        first = decode(raw_package)
        second = decode(raw_package)
        assert first.model_dump_json() == second.model_dump_json()

    def test_input_not_mutated(self, raw_package: RawRecord) -> None:
        """The raw record is left as it was."""
        before = raw_package.model_dump()
        decode(raw_package)
        assert raw_package.model_dump() == before


class TestNumericCoercion:
    """Numeric field coercion."""

    def test_integer_string(self) -> None:
        assert _decode(quota="10240").data["quota"] == 10240

    def test_integral_float_string_becomes_int(self) -> None:
        assert _decode(vcpus="2.0").data["vcpus"] == 2

    @pytest.mark.parametrize("value", ["1.5", 0.25])
    def test_fractional_integer_field_left_absent_with_warning(self, value) -> None:
        record = _decode(vcpus=value)
        assert "vcpus" not in record.data
        assert any(w.field == "vcpus" and "not an integer" in w.message for w in record.warnings)

    def test_fractional_double_field_kept(self) -> None:
        assert _decode(ram_ratio="1.5").data["ram_ratio"] == 1.5

    def test_double_field_is_float(self) -> None:
        value = _decode(cpu_burst_ratio="1").data["cpu_burst_ratio"]
        assert value == 1.0
        assert isinstance(value, float)

    def test_native_number_kept(self) -> None:
        assert _decode(max_lwps=2000).data["max_lwps"] == 2000

    @pytest.mark.parametrize("value", ["lots", "", "NaN", "inf", ["1", "2"], True])
    def test_not_a_number_left_absent_with_warning(self, value) -> None:
        """Unparsable numbers become a warning, never NaN."""
        record = _decode(cpu_cap=value)
        assert "cpu_cap" not in record.data
        assert _warned(record, "cpu_cap")


class TestBooleanCoercion:
    """Boolean field coercion."""

    def test_true_string(self) -> None:
        assert _decode(active="true").data["active"] is True

    def test_true_boolean(self) -> None:
        assert _decode(active=True).data["active"] is True

    @pytest.mark.parametrize("value", ["false", "yes", "1", "", False])
    def test_other_values_are_false(self, value) -> None:
        assert _decode(default=value).data["default"] is False

    def test_absent_stays_absent(self) -> None:
        """A missing boolean is not defaulted."""
        record = _decode(uuid=PACKAGE_UUID)
        assert "active" not in record.data
        assert "default" not in record.data


class TestNetworks:
    """networks decoding."""

    def test_json_string(self) -> None:
        assert _decode(networks='["n1", "n2"]').data["networks"] == ["n1", "n2"]

    def test_list_kept_in_order(self) -> None:
        assert _decode(networks=["n1", "n2"]).data["networks"] == ["n1", "n2"]

    def test_invalid_json_becomes_empty_list(self) -> None:
        record = _decode(networks="n1")
        assert record.data["networks"] == []
        assert _warned(record, "networks")

    def test_non_list_json_becomes_empty_list(self) -> None:
        record = _decode(networks='{"a": 1}')
        assert record.data["networks"] == []
        assert _warned(record, "networks")


class TestOwnerMigration:
    """Legacy owner_uuid -> owner_uuids rename."""

    def test_plain_string(self) -> None:
        record = _decode(owner_uuid="abc")
        assert record.data["owner_uuids"] == ["abc"]
        assert "owner_uuid" not in record.data

    def test_json_list_string(self) -> None:
        record = _decode(owner_uuid='["a","b"]')
        assert record.data["owner_uuids"] == ["a", "b"]
        assert "owner_uuid" not in record.data

    def test_list_copied(self) -> None:
        record = _decode(owner_uuid=["a", "b"])
        assert record.data["owner_uuids"] == ["a", "b"]

    def test_json_scalar_falls_back_to_raw_string(self) -> None:
        assert _decode(owner_uuid="42").data["owner_uuids"] == ["42"]

    def test_plural_present_wins(self) -> None:
        """Migration does not run when owner_uuids came from the source."""
        record = _decode(owner_uuid="legacy", owner_uuids=["a"])
        assert record.data["owner_uuids"] == ["a"]
        assert "owner_uuid" not in record.data
        assert _warned(record, "owner_uuid")

    def test_single_valued_plural_becomes_list(self) -> None:
        assert _decode(owner_uuids="a").data["owner_uuids"] == ["a"]


class TestStructuredBlobs:
    """traits and min_platform decoding."""

    def test_traits_json(self) -> None:
        assert _decode(traits='{"hw": "x"}').data["traits"] == {"hw": "x"}

    def test_traits_invalid_json(self) -> None:
        """Unparsable traits become {} plus a warning, never the raw string."""
        record = _decode(traits="not-json{")
        assert record.data["traits"] == {}
        assert _warned(record, "traits")

    def test_min_platform_non_object(self) -> None:
        record = _decode(min_platform='["7.0"]')
        assert record.data["min_platform"] == {}
        assert _warned(record, "min_platform")

    def test_native_object_kept(self) -> None:
        assert _decode(min_platform={"7.0": "20130917"}).data["min_platform"] == {"7.0": "20130917"}


class TestOtherCoercions:
    """Dates, bytes and untouched fields."""

    def test_epoch_string_date(self) -> None:
        assert _decode(created_at="1380000000000").data["created_at"] == 1380000000000

    def test_iso_date_kept(self) -> None:
        assert _decode(updated_at="2013-09-24T10:00:00Z").data["updated_at"] == "2013-09-24T10:00:00Z"

    def test_utf8_bytes_become_text(self) -> None:
        assert _decode(description="café".encode()).data["description"] == "café"

    def test_binary_bytes_kept(self) -> None:
        assert _decode(description=b"\xff\xfe").data["description"] == b"\xff\xfe"

    def test_unknown_fields_pass_through(self) -> None:
        assert _decode(group="Standard").data["group"] == "Standard"


class TestCoercionTable:
    """The coercion table itself."""

    def test_covers_numeric_and_boolean_fields(self) -> None:
        for name in ("vcpus", "cpu_cap", "max_lwps", "max_physical_memory", "max_swap", "quota", "zfs_io_priority", "fss"):
            assert FIELD_COERCIONS[name] == "integer"
        assert FIELD_COERCIONS["cpu_burst_ratio"] == "double"
        assert FIELD_COERCIONS["active"] == "boolean"

    def test_ignored_attributes_not_coerced(self) -> None:
        assert not IGNORED_ATTRIBUTES & set(FIELD_COERCIONS)
