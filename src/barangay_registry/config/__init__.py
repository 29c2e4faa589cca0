"""Configuration module for the barangay registry."""

from barangay_registry.config.constants import (
    AGE_GROUPS,
    HOUSEHOLD_SIZE_BUCKETS,
    INCOME_BRACKETS,
)
from barangay_registry.config.settings import Config, get_config

__all__ = [
    "Config",
    "get_config",
    "AGE_GROUPS",
    "HOUSEHOLD_SIZE_BUCKETS",
    "INCOME_BRACKETS",
]
