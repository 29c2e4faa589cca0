"""Version information for the barangay registry."""

import importlib.metadata

__all__ = ["VERSION", "format_version_string"]

# Version from pyproject.toml
try:
    VERSION = importlib.metadata.version("barangay-registry")
except importlib.metadata.PackageNotFoundError:
    VERSION = "0.1.0-dev"


def format_version_string() -> str:
    """Format version information as a human-readable string."""
    version_str = f"Barangay Registry v{VERSION}"
    if "dev" in VERSION:
        version_str += " (development)"
    return version_str
