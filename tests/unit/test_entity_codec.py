"""Tests for the Redis field-map codec."""

import json
from datetime import date
from decimal import Decimal

import pytest

from barangay_registry.models import Household, Resident
from barangay_registry.repositories import codec
from barangay_registry.repositories.errors import RecordValidationError


@pytest.fixture
def resident() -> Resident:
    return Resident(
        id="res:1",
        first_name="Maria",
        last_name="Santos",
        birth_date=date(1990, 5, 1),
        gender="Female",
        civil_status="Married",
        category_tags=["Senior", "PWD"],
        is_head=True,
    )


class TestEncode:
    """Test flattening models into string field maps."""

    def test_uses_camel_case_aliases(self, resident):
        fields = codec.encode(resident)

        assert fields["firstName"] == "Maria"
        assert fields["civilStatus"] == "Married"
        assert "first_name" not in fields

    def test_tags_are_a_json_list(self, resident):
        fields = codec.encode(resident)

        assert json.loads(fields["categoryTags"]) == ["Senior", "PWD"]

    def test_booleans_and_dates(self, resident):
        fields = codec.encode(resident)

        assert fields["isHead"] == "true"
        assert fields["birthDate"] == "1990-05-01"

    def test_every_value_is_a_string(self, resident):
        assert all(isinstance(v, str) for v in codec.encode(resident).values())

    def test_decimal_income(self):
        household = Household(id="hh:1", address_line1="1 Mabini St", monthly_income=Decimal("75000"))

        assert codec.encode(household)["monthlyIncome"] == "75000"


class TestDecode:
    """Test rebuilding models from stored field maps."""

    def test_empty_map_is_absent(self):
        assert codec.decode(Household, {}) is None

    def test_round_trip(self, resident):
        decoded = codec.decode(Resident, codec.encode(resident))

        assert decoded.model_dump() == resident.model_dump()
        assert decoded.category_tags == ["Senior", "PWD"]
        assert decoded.is_head is True

    def test_missing_tags_decode_to_empty_list(self):
        decoded = codec.decode(Household, {"id": "hh:1", "addressLine1": "1 Mabini St"})

        assert decoded.category_tags == []

    def test_false_string_decodes_to_false(self, resident):
        fields = codec.encode(resident)
        fields["isHead"] = "false"

        assert codec.decode(Resident, fields).is_head is False

    def test_malformed_tags_raise(self):
        with pytest.raises(RecordValidationError) as exc_info:
            codec.decode(Household, {"id": "hh:1", "addressLine1": "x", "categoryTags": "[oops"})

        assert "categoryTags" in exc_info.value.fields

    def test_unknown_stored_fields_ignored(self, resident):
        fields = codec.encode(resident)
        fields["indexedAge"] = "36"

        assert codec.decode(Resident, fields).model_dump() == resident.model_dump()


class TestNormalizeKeys:
    """Test mapping attribute names onto stored aliases."""

    def test_snake_case_mapped_to_alias(self):
        normalized = codec.normalize_keys(Household, {"address_line1": "A", "zipCode": "6000"})

        assert normalized == {"addressLine1": "A", "zipCode": "6000"}

    def test_unknown_keys_dropped(self):
        assert codec.normalize_keys(Household, {"favouriteColour": "blue"}) == {}


class TestValidate:
    """Test pydantic errors surface as RecordValidationError."""

    def test_missing_required_field_named(self):
        with pytest.raises(RecordValidationError) as exc_info:
            codec.validate(Resident, {"id": "res:1", "firstName": "Juan"})

        assert "lastName" in exc_info.value.fields
        assert "birthDate" in exc_info.value.fields
