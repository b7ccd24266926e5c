"""CLI entry point for madcoord."""

import sys


def main() -> int:
    """Main entry point for the madcoord CLI."""
    from madcoord.cli import run_cli

    return run_cli(sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())
