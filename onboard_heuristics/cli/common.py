"""Shared CLI infrastructure: option decorators, error handlers, and the CLI group."""

from __future__ import annotations

import logging
from typing import Callable

import click

import onboard_heuristics
from onboard_heuristics.exceptions import (
    CannotProvideError,
    ConfigError,
    OnboardError,
    OperationInterruptedError,
)
from onboard_heuristics.utils.logging import log_with_context

# ---------------------------------------------------------------------------
# Shared option decorator
# ---------------------------------------------------------------------------


def common_options(f: Callable[..., None]) -> Callable[..., None]:
    """Decorator that adds options shared across multiple subcommands.

    Args:
        f: The Click command function to decorate.

    Returns:
        The decorated function with common options attached.
    """
    f = click.option(
        "--config",
        default="onboard.yaml",
        show_default=True,
        help="Path to config YAML",
    )(f)
    f = click.option(
        "--verbose",
        "-v",
        is_flag=True,
        default=False,
        help="Enable verbose console logging (shows DEBUG level messages)",
    )(f)
    f = click.option(
        "--log_dir",
        default=None,
        help="Directory for the heuristics.log file (no log file when omitted)",
    )(f)
    f = click.option(
        "--json_logs",
        is_flag=True,
        default=False,
        help="Write the log file as JSON lines",
    )(f)
    return f


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group(
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(
    version=onboard_heuristics.__version__, prog_name="onboard-heuristics"
)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Infer migration config fields from an upstream repo and a synced tree.

    Args:
        ctx: The Click context (injected by ``@click.pass_context``).
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------


def handle_exception(e: BaseException) -> None:
    """Handle different types of exceptions.

    Args:
        e: The exception to handle.
    """
    if isinstance(e, ConfigError):
        log_with_context(logging.ERROR, f"Invalid configuration: {e}")
        log_with_context(
            logging.INFO, "Run 'onboard-heuristics init-config' for a valid example."
        )
    elif isinstance(e, CannotProvideError):
        log_with_context(logging.ERROR, f"Missing input: {e}")
    elif isinstance(e, (OperationInterruptedError, KeyboardInterrupt)):
        log_with_context(logging.WARNING, "Interrupted by user.")
    elif isinstance(e, OnboardError):
        log_with_context(logging.ERROR, str(e))
    else:
        log_with_context(logging.ERROR, f"Heuristics failed: {e}", exc_info=True)
