"""CLI command handler for writing a starter config file."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from onboard_heuristics.cli.common import cli
from onboard_heuristics.core.config import create_default_config
from onboard_heuristics.utils.logging import setup_logger

# ---------------------------------------------------------------------------
# init-config subcommand
# ---------------------------------------------------------------------------


@cli.command("init-config")
@click.option(
    "--output",
    default="onboard.yaml",
    show_default=True,
    help="Where to write the config file",
)
def init_config(output: str) -> None:
    """Write a default config file, never overwriting an existing one.

    Args:
        output: Path of the config file to create.
    """
    setup_logger()
    if not create_default_config(Path(output)):
        sys.exit(1)
