"""Unit tests for ResidentRepository."""

from datetime import date

import pytest

from barangay_registry.config import Config
from barangay_registry.main import create_registry
from barangay_registry.repositories.errors import NotFoundError, RecordValidationError

from conftest import TODAY, years_ago


@pytest.fixture
def residents(registry):
    return registry.residents


class TestCreate:
    """Test creating residents and their index entries."""

    def test_round_trip(self, residents):
        resident_id = residents.create({
            "firstName": "Maria",
            "middleName": "Lopez",
            "lastName": "Santos",
            "birthDate": "1990-05-01",
            "gender": "Female",
            "civilStatus": "Married",
            "occupation": "Teacher",
            "contactNumber": "09171234567",
            "categoryTags": ["Senior"],
            "isHead": True,
        })

        resident = residents.get(resident_id)

        assert resident_id.startswith("res:")
        assert resident.full_name == "Maria Santos"
        assert resident.middle_name == "Lopez"
        assert resident.birth_date == date(1990, 5, 1)
        assert resident.occupation == "Teacher"
        assert resident.is_head is True
        assert resident.household_id == ""

    def test_index_entries_written(self, residents, redis_client):
        resident_id = residents.create({
            "firstName": "Juan",
            "lastName": "Dela Cruz",
            "birthDate": years_ago(42).isoformat(),
            "gender": "Male",
            "civilStatus": "Married",
            "householdId": "hh:1",
            "categoryTags": ["PWD"],
        })

        assert redis_client.sismember("residents:ids", resident_id)
        assert redis_client.sismember("residents:index:name:juan dela cruz", resident_id)
        assert redis_client.sismember("residents:index:age:42", resident_id)
        assert redis_client.sismember("residents:household:hh:1", resident_id)
        assert redis_client.sismember("residents:index:tag:pwd", resident_id)

    def test_age_is_birthday_aware(self, residents, redis_client):
        # Birthday falls later in the year than TODAY
        resident_id = residents.create({
            "firstName": "Ana",
            "lastName": "Reyes",
            "birthDate": date(TODAY.year - 20, 12, 25).isoformat(),
            "gender": "Female",
            "civilStatus": "Single",
        })

        assert redis_client.sismember("residents:index:age:19", resident_id)

    def test_missing_required_fields(self, residents, redis_client):
        with pytest.raises(RecordValidationError) as exc_info:
            residents.create({"firstName": "Juan"})

        assert {"lastName", "birthDate", "gender", "civilStatus"} <= set(exc_info.value.fields)
        assert redis_client.dbsize() == 0


class TestHouseholdMembership:
    """Test membership index maintenance on update and delete."""

    def test_move_between_households(self, residents, make_household, make_resident, redis_client):
        first = make_household(addressLine1="1 Rizal St")
        second = make_household(addressLine1="2 Rizal St")
        resident_id = make_resident(householdId=first)

        residents.update(resident_id, {"householdId": second})

        assert not redis_client.sismember(f"residents:household:{first}", resident_id)
        assert redis_client.sismember(f"residents:household:{second}", resident_id)
        assert [r.id for r in residents.get_by_household(second)] == [resident_id]
        assert residents.get_by_household(first) == []

    def test_clearing_household(self, residents, make_household, make_resident, redis_client):
        household_id = make_household()
        resident_id = make_resident(householdId=household_id)

        updated = residents.update(resident_id, {"householdId": None})

        assert updated.household_id == ""
        assert not redis_client.exists(f"residents:household:{household_id}")

    def test_rename_moves_name_index(self, residents, make_resident, redis_client):
        resident_id = make_resident()

        residents.update(resident_id, {"lastName": "Santos"})

        assert not redis_client.exists("residents:index:name:juan dela cruz")
        assert redis_client.sismember("residents:index:name:juan santos", resident_id)

    def test_get_by_household_skips_dangling(self, residents, make_household, make_resident, redis_client):
        household_id = make_household()
        resident_id = make_resident(householdId=household_id)
        redis_client.sadd(f"residents:household:{household_id}", "res:ghost")

        assert [r.id for r in residents.get_by_household(household_id)] == [resident_id]


class TestDelete:
    """Test resident deletion."""

    def test_delete_retracts_every_index(self, residents, make_resident, redis_client):
        resident_id = make_resident(householdId="hh:1", categoryTags=["Senior", "PWD"])

        assert residents.delete(resident_id) is True

        assert residents.get(resident_id) is None
        assert redis_client.dbsize() == 0

    def test_delete_missing(self, residents):
        with pytest.raises(NotFoundError):
            residents.delete("res:missing")

    def test_update_missing(self, residents):
        with pytest.raises(NotFoundError):
            residents.update("res:missing", {"occupation": "Farmer"})


class TestAgeIndex:
    """Test the age index and its explicit refresh."""

    def test_find_by_age(self, residents, make_resident):
        thirty = make_resident()
        make_resident(firstName="Lola", birthDate=years_ago(70).isoformat())

        assert [r.id for r in residents.find_by_age(30)] == [thirty]

    def test_update_retracts_indexed_age(self, residents, make_resident, redis_client):
        resident_id = make_resident()

        residents.update(resident_id, {"birthDate": years_ago(45).isoformat()})

        assert not redis_client.exists("residents:index:age:30")
        assert redis_client.sismember("residents:index:age:45", resident_id)
        assert redis_client.hget(f"residents:{resident_id}", "indexedAge") == "45"

    def test_reindex_moves_drifted_ages(self, residents, make_resident, redis_client):
        resident_id = make_resident()
        next_year = date(TODAY.year + 1, 2, 1)

        moved = residents.reindex_ages(today=next_year)

        assert moved == 1
        assert not redis_client.exists("residents:index:age:30")
        assert redis_client.sismember("residents:index:age:31", resident_id)
        assert redis_client.hget(f"residents:{resident_id}", "indexedAge") == "31"

    def test_reindex_is_noop_when_current(self, residents, make_resident):
        make_resident()

        assert residents.reindex_ages() == 0

    def test_reindexed_entry_retracted_on_delete(self, residents, make_resident, redis_client):
        resident_id = make_resident()
        residents.reindex_ages(today=date(TODAY.year + 1, 2, 1))

        residents.delete(resident_id)

        assert redis_client.dbsize() == 0


class TestTags:
    """Test tag lookup."""

    def test_find_by_tag(self, residents, make_resident):
        tagged = make_resident(categoryTags=["Solo Parent"])
        make_resident(firstName="Pedro")

        assert [r.id for r in residents.find_by_tag("SOLO PARENT")] == [tagged]

    def test_tag_change_updates_index(self, residents, make_resident, redis_client):
        resident_id = make_resident(categoryTags=["Student"])

        residents.update(resident_id, {"categoryTags": ["Voter"]})

        assert not redis_client.exists("residents:index:tag:student")
        assert redis_client.sismember("residents:index:tag:voter", resident_id)


class TestHouseholdReferenceValidation:
    """Test the optional check that householdId names a real household."""

    @pytest.fixture
    def strict_registry(self, tmp_path, redis_client):
        config = Config(
            _env_file=None,
            log_file=str(tmp_path / "registry.log"),
            validate_household_reference=True,
        )
        return create_registry(config=config, client=redis_client, clock=lambda: TODAY)

    def test_unchecked_by_default(self, residents, make_resident, redis_client):
        resident_id = make_resident(householdId="hh:ghost")

        assert residents.get(resident_id).household_id == "hh:ghost"
        assert redis_client.sismember("residents:household:hh:ghost", resident_id)

    def test_unknown_household_rejected(self, strict_registry, redis_client):
        with pytest.raises(RecordValidationError) as exc_info:
            strict_registry.residents.create({
                "firstName": "Juan",
                "lastName": "Dela Cruz",
                "birthDate": "1990-01-01",
                "gender": "Male",
                "civilStatus": "Single",
                "householdId": "hh:ghost",
            })

        assert exc_info.value.fields == ["householdId"]
        assert redis_client.dbsize() == 0

    def test_existing_household_accepted(self, strict_registry):
        household_id = strict_registry.households.create({"addressLine1": "1 Rizal St"})

        resident_id = strict_registry.residents.create({
            "firstName": "Juan",
            "lastName": "Dela Cruz",
            "birthDate": "1990-01-01",
            "gender": "Male",
            "civilStatus": "Single",
            "householdId": household_id,
        })

        assert strict_registry.residents.get(resident_id).household_id == household_id

    def test_update_to_unknown_household_rejected(self, strict_registry):
        household_id = strict_registry.households.create({"addressLine1": "1 Rizal St"})
        resident_id = strict_registry.residents.create({
            "firstName": "Juan",
            "lastName": "Dela Cruz",
            "birthDate": "1990-01-01",
            "gender": "Male",
            "civilStatus": "Single",
            "householdId": household_id,
        })

        with pytest.raises(RecordValidationError):
            strict_registry.residents.update(resident_id, {"householdId": "hh:ghost"})

        assert strict_registry.residents.get(resident_id).household_id == household_id
