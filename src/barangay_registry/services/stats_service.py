"""
Demographic and socioeconomic statistics.

Both pipelines scan every record of a kind once and fold it into bucket
counts. No index is consulted: ages are recomputed from birth dates at
aggregation time, and household sizes come from the residents themselves.
"""

from collections import Counter
from datetime import date
from decimal import Decimal
from typing import Any, Callable

from loguru import logger

from barangay_registry.config.constants import AGE_GROUPS, HOUSEHOLD_SIZE_BUCKETS, INCOME_BRACKETS
from barangay_registry.repositories import HouseholdRepository, ResidentRepository


def _bucket(value: int | Decimal, buckets: list[tuple[str, int, int | None]], inclusive_upper: bool) -> str | None:
    for label, low, high in buckets:
        if value < low:
            continue
        if high is None:
            return label
        within = value <= high if inclusive_upper else value < high
        if within:
            return label
    return None


def income_bracket(monthly_income: Decimal) -> str:
    """Label of the income bracket ``monthly_income`` falls in."""
    return _bucket(monthly_income, INCOME_BRACKETS, inclusive_upper=False)


def household_size_bucket(size: int) -> str:
    return _bucket(size, HOUSEHOLD_SIZE_BUCKETS, inclusive_upper=True)


def age_group(age: int) -> str:
    return _bucket(max(age, 0), AGE_GROUPS, inclusive_upper=True)


class StatsAggregator:
    """Read-only aggregation over households and residents."""

    def __init__(
        self,
        households: HouseholdRepository,
        residents: ResidentRepository,
        clock: Callable[[], date] | None = None,
    ) -> None:
        self.households = households
        self.residents = residents
        self.clock = clock or residents.clock

    def household_stats(self) -> dict[str, Any]:
        """Income brackets, size distribution and average size.

        Returns:
            Dict with totalHouseholds, incomeGroups, householdSizeDistribution,
            averageHouseholdSize and totalResidents.
        """
        households = self.households.all()
        members = Counter(
            resident.household_id
            for resident in self.residents.all()
            if resident.household_id
        )

        stats: dict[str, Any] = {
            "totalHouseholds": len(households),
            "incomeGroups": {label: 0 for label, _, _ in INCOME_BRACKETS},
            "householdSizeDistribution": {label: 0 for label, _, _ in HOUSEHOLD_SIZE_BUCKETS},
            "averageHouseholdSize": 0.0,
            "totalResidents": 0,
        }

        for household in households:
            size = members.get(household.id, 0)
            stats["incomeGroups"][income_bracket(household.monthly_income)] += 1
            stats["householdSizeDistribution"][household_size_bucket(size)] += 1
            stats["totalResidents"] += size

        stats["averageHouseholdSize"] = stats["totalResidents"] / max(1, stats["totalHouseholds"])
        logger.debug(f"Household stats over {len(households)} households")
        return stats

    def demographic_stats(self, today: date | None = None) -> dict[str, Any]:
        """Gender, age-group, civil-status and occupation distributions.

        Args:
            today: Reference date for ages; defaults to the clock.

        Returns:
            Dict with total, genderDistribution, ageGroups,
            civilStatusDistribution and occupationDistribution.
        """
        today = today or self.clock()
        residents = self.residents.all()

        genders: Counter[str] = Counter()
        civil_statuses: Counter[str] = Counter()
        occupations: Counter[str] = Counter()
        age_groups = {label: 0 for label, _, _ in AGE_GROUPS}

        for resident in residents:
            genders[resident.gender] += 1
            civil_statuses[resident.civil_status] += 1
            if resident.occupation:
                occupations[resident.occupation] += 1
            age_groups[age_group(resident.age(today))] += 1

        logger.debug(f"Demographic stats over {len(residents)} residents")
        return {
            "total": len(residents),
            "genderDistribution": dict(genders),
            "ageGroups": age_groups,
            "civilStatusDistribution": dict(civil_statuses),
            "occupationDistribution": dict(occupations),
        }
