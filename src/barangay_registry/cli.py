"""Command-line interface for the barangay registry.

Maintenance commands run against the configured Redis store.
"""

import json
import sys
from typing import Any

from loguru import logger

from barangay_registry.main import create_registry, setup_logging
from barangay_registry.repositories.errors import RegistryError
from barangay_registry.version import format_version_string

__all__ = ["cli_main"]


def print_version() -> None:
    """Print version information."""
    print(format_version_string())


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def cmd_ping() -> int:
    """Check that the store answers.

    Returns:
        Exit code (0 if reachable, 1 otherwise)
    """
    with create_registry() as registry:
        if registry.db.test_connection():
            print(f"✓ Redis reachable at {registry.db.url}")
            return 0
        print(f"✗ Redis not reachable at {registry.db.url}")
        return 1


def cmd_init_admin() -> int:
    """Create the configured admin account if missing."""
    with create_registry() as registry:
        user_id = registry.auth.initialize_admin()
    if user_id:
        print(f"✓ Admin user created: {user_id}")
    else:
        print("✓ Admin user already exists")
    return 0


def cmd_stats(kind: str) -> int:
    """Print household or resident statistics as JSON."""
    with create_registry() as registry:
        if kind == "households":
            _print_json(registry.stats.household_stats())
        elif kind == "residents":
            _print_json(registry.stats.demographic_stats())
        else:
            print(f"✗ Unknown stats kind: {kind} (expected households or residents)")
            return 1
    return 0


def cmd_search(query: str) -> int:
    """Print combined search results as JSON."""
    with create_registry() as registry:
        results = registry.search.search(query)
    _print_json({
        kind: [record.model_dump(mode="json", by_alias=True) for record in records]
        for kind, records in results.items()
    })
    return 0


def cmd_reindex_ages() -> int:
    """Refresh the resident age index."""
    with create_registry() as registry:
        moved = registry.residents.reindex_ages()
    print(f"✓ Reindexed {moved} residents")
    return 0


def print_help() -> None:
    """Print CLI help message."""
    print_version()
    print()
    print("Usage: barangay-registry [COMMAND]")
    print()
    print("Commands:")
    print("  ping                      Check the Redis connection")
    print("  init-admin                Create the admin account if missing")
    print("  stats households          Household income and size statistics")
    print("  stats residents           Resident demographic statistics")
    print("  search QUERY              Search households and residents")
    print("  reindex-ages              Refresh the resident age index")
    print("  version                   Show version information")
    print("  help                      Show this help message")
    print()


def cli_main(args: list[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    if args is None:
        args = sys.argv[1:]

    # No command or help
    if not args or args[0] in ("help", "-h", "--help"):
        print_help()
        return 0

    command = args[0].lower()
    rest = args[1:]

    if command == "version":
        print_version()
        return 0

    setup_logging()

    try:
        if command == "ping":
            return cmd_ping()
        elif command == "init-admin":
            return cmd_init_admin()
        elif command == "stats":
            return cmd_stats(rest[0] if rest else "households")
        elif command == "search":
            if not rest:
                print("✗ search needs a query")
                return 1
            return cmd_search(" ".join(rest))
        elif command == "reindex-ages":
            return cmd_reindex_ages()
        else:
            print(f"✗ Unknown command: {command}")
            print()
            print_help()
            return 1
    except RegistryError as e:
        logger.exception(f"Command {command} failed")
        print(f"✗ Error: {e}")
        return 1
