"""Key-space layout, identifier prefixes and statistics bucket labels."""

# Identifier prefixes ({prefix}:{uuid4})
HOUSEHOLD_ID_PREFIX = "hh"
RESIDENT_ID_PREFIX = "res"
USER_ID_PREFIX = "user"

# Key namespaces. The layout is shared with other deployments reading the
# same Redis database and must not change.
HOUSEHOLDS_NAMESPACE = "households"
RESIDENTS_NAMESPACE = "residents"
USERS_NAMESPACE = "users"

HOUSEHOLD_ADDRESS_INDEX = "households:index:address:"
HOUSEHOLD_BARANGAY_INDEX = "households:index:barangay:"
HOUSEHOLD_TAG_INDEX = "households:index:tag:"

RESIDENT_HOUSEHOLD_INDEX = "residents:household:"
RESIDENT_NAME_INDEX = "residents:index:name:"
RESIDENT_AGE_INDEX = "residents:index:age:"
RESIDENT_TAG_INDEX = "residents:index:tag:"

USER_USERNAME_INDEX = "users:index:username:"
USER_EMAIL_INDEX = "users:index:email:"

# Monthly income brackets: (label, lower bound inclusive, upper bound exclusive)
INCOME_BRACKETS: list[tuple[str, int, int | None]] = [
    ("Below 10k", 0, 10_000),
    ("10k-20k", 10_000, 20_000),
    ("20k-50k", 20_000, 50_000),
    ("50k-100k", 50_000, 100_000),
    ("Above 100k", 100_000, None),
]

# Household size buckets: (label, min residents, max residents inclusive)
HOUSEHOLD_SIZE_BUCKETS: list[tuple[str, int, int | None]] = [
    ("0", 0, 0),
    ("1", 1, 1),
    ("2-3", 2, 3),
    ("4-5", 4, 5),
    ("6+", 6, None),
]

# Age groups: (label, min age, max age inclusive)
AGE_GROUPS: list[tuple[str, int, int | None]] = [
    ("0-17", 0, 17),
    ("18-30", 18, 30),
    ("31-45", 31, 45),
    ("46-60", 46, 60),
    ("61+", 61, None),
]
