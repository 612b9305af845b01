#!/usr/bin/env python3
"""
Command-line entry point for the onboarding heuristics tool.

Importing the subcommand modules registers them on the shared click group.
"""

from onboard_heuristics.cli import config_cmd, suggest_cmd  # noqa: F401
from onboard_heuristics.cli.common import cli, handle_exception  # noqa: F401


def main() -> None:
    """Run the click CLI group."""
    cli()


if __name__ == "__main__":
    main()
