"""Unit tests for index-key substring search."""

import pytest

from barangay_registry.repositories.errors import RecordValidationError
from barangay_registry.services.search_service import escape_glob


@pytest.fixture
def search(registry):
    return registry.search


class TestEscapeGlob:
    """Test Redis MATCH pattern escaping."""

    def test_plain_text_unchanged(self):
        assert escape_glob("rizal st") == "rizal st"

    def test_metacharacters_escaped(self):
        assert escape_glob("a*b?[c]") == r"a\*b\?\[c\]"
        assert escape_glob("back\\slash") == "back\\\\slash"


class TestSearchHouseholds:
    """Test household matching on address and tag keys."""

    def test_address_substring_case_insensitive(self, search, make_household):
        household_id = make_household(addressLine1="123 Rizal St")
        make_household(addressLine1="5 Mabini Ave")

        assert [h.id for h in search.search_households("RIZAL")] == [household_id]

    def test_matches_address_line2(self, search, make_household):
        household_id = make_household(addressLine1="Blk 4", addressLine2="Purok Malipayon")

        assert [h.id for h in search.search_households("malipayon")] == [household_id]

    def test_matches_tag(self, search, make_household):
        household_id = make_household(addressLine1="5 Mabini Ave", categoryTags=["Flood Zone"])

        assert [h.id for h in search.search_households("flood")] == [household_id]

    def test_same_household_listed_once(self, search, make_household):
        household_id = make_household(addressLine1="Riverside Rd", categoryTags=["Riverside"])

        assert [h.id for h in search.search_households("riverside")] == [household_id]

    def test_notes_are_not_searched(self, search, make_household):
        make_household(notes="near the chapel")

        assert search.search_households("chapel") == []

    def test_glob_characters_match_literally(self, search, make_household):
        make_household(addressLine1="123 Rizal St")
        starred = make_household(addressLine1="Unit *7")

        assert [h.id for h in search.search_households("*")] == [starred]
        assert search.search_households("?") == []

    def test_results_sorted_by_id(self, search, make_household):
        ids = [make_household(addressLine1=f"{n} Rizal St") for n in range(5)]

        assert [h.id for h in search.search_households("rizal")] == sorted(ids)


class TestSearchResidents:
    """Test resident matching on name and tag keys."""

    def test_full_name_substring(self, search, make_resident):
        resident_id = make_resident(firstName="Maria", lastName="Santos")
        make_resident(firstName="Pedro", lastName="Reyes")

        assert [r.id for r in search.search_residents("ria san")] == [resident_id]

    def test_matches_tag(self, search, make_resident):
        resident_id = make_resident(categoryTags=["Senior Citizen"])

        assert [r.id for r in search.search_residents("senior")] == [resident_id]

    def test_occupation_is_not_searched(self, search, make_resident):
        make_resident(occupation="Fisherman")

        assert search.search_residents("fisherman") == []

    def test_middle_name_is_not_searched(self, search, make_resident):
        make_resident(middleName="Bautista")

        assert search.search_residents("bautista") == []


class TestCombinedSearch:
    """Test the combined entry point."""

    def test_returns_both_kinds(self, search, make_household, make_resident):
        household_id = make_household(addressLine1="Santos Compound")
        resident_id = make_resident(lastName="Santos")

        results = search.search("santos")

        assert set(results) == {"residents", "households"}
        assert [r.id for r in results["residents"]] == [resident_id]
        assert [h.id for h in results["households"]] == [household_id]

    def test_no_matches(self, search, make_household):
        make_household()

        assert search.search("zzz") == {"residents": [], "households": []}

    @pytest.mark.parametrize("query", ["", "   ", None])
    def test_blank_query_rejected(self, search, query):
        with pytest.raises(RecordValidationError):
            search.search(query)

    def test_dangling_member_skipped(self, search, make_household, redis_client):
        household_id = make_household(addressLine1="123 Rizal St")
        redis_client.sadd("households:index:address:123 rizal st ", "hh:ghost")

        assert [h.id for h in search.search_households("rizal")] == [household_id]
