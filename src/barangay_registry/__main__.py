"""Entry point for the barangay-registry command."""

import sys


def main() -> int:
    """Main entry point for barangay-registry command.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    from barangay_registry.cli import cli_main

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
