"""CLI command handler for the suggest workflow."""

from __future__ import annotations

import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

import click
import yaml

from onboard_heuristics.cli.common import cli, common_options, handle_exception
from onboard_heuristics.core.config import HeuristicsConfig, load_config
from onboard_heuristics.core.heuristics_provider import ConfigHeuristicsInputProvider
from onboard_heuristics.core.inputs import (
    ConstantProvider,
    InputProviderResolver,
    Inputs,
)
from onboard_heuristics.core.options import GeneralOptions, GeneratorOptions, GitOptions
from onboard_heuristics.utils.logging import log_with_context, setup_logger

# ---------------------------------------------------------------------------
# suggest subcommand
# ---------------------------------------------------------------------------


@cli.command()
@common_options
@click.option("--origin_url", required=True, help="URL of the upstream git repository")
@click.option(
    "--current_version",
    required=True,
    help="Upstream version the destination was synced from (approximate is fine)",
)
@click.option(
    "--destination",
    required=True,
    type=click.Path(path_type=Path),
    help="Path to the already-synced destination tree",
)
@click.option(
    "--destination_only",
    multiple=True,
    help="Destination path that must never be overwritten (repeatable)",
)
@click.option(
    "--percent_similar",
    type=click.IntRange(0, 100),
    default=None,
    help="Similarity threshold (0-100), overrides the config file",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Write the suggestions to this YAML file instead of stdout",
)
def suggest(
    config: str,
    verbose: bool,
    log_dir: str | None,
    json_logs: bool,
    origin_url: str,
    current_version: str,
    destination: Path,
    destination_only: tuple[str, ...],
    percent_similar: int | None,
    output: Path | None,
) -> None:
    """Suggest origin_files, transformations and destination excludes.

    Args:
        config: Path to config YAML.
        verbose: Enable verbose console logging.
        log_dir: Directory for the log file.
        json_logs: Write the log file as JSON lines.
        origin_url: URL of the upstream git repository.
        current_version: Version the destination was synced from.
        destination: Path to the destination tree.
        destination_only: Extra destination-only paths.
        percent_similar: Similarity threshold override.
        output: Optional YAML output file.
    """
    setup_logger(verbose, log_dir, json_logs)

    general_options = None
    try:
        cfg = apply_overrides(
            load_config(Path(config)), destination_only, percent_similar
        )
        general_options = GeneralOptions.from_config(cfg)
        suggestions = collect_suggestions(
            cfg, general_options, origin_url, current_version, destination
        )
    except (Exception, KeyboardInterrupt) as e:
        handle_exception(e)
        sys.exit(1)
    finally:
        if general_options is not None:
            general_options.dir_factory.cleanup()

    if not any(v is not None for v in suggestions.values()):
        log_with_context(
            logging.WARNING,
            "No suggestions could be inferred, check the log for details",
            origin_url=origin_url,
        )

    rendered = yaml.safe_dump(suggestions, default_flow_style=False, sort_keys=False)
    if output is not None:
        output.write_text(rendered)
        log_with_context(logging.INFO, f"Suggestions written to {output}")
    else:
        click.echo(rendered, nl=False)


def apply_overrides(
    cfg: HeuristicsConfig,
    destination_only: tuple[str, ...],
    percent_similar: int | None,
) -> HeuristicsConfig:
    """Return ``cfg`` with command line values layered on top."""
    changes: dict[str, Any] = {}
    if destination_only:
        changes["destination_only_paths"] = [
            *cfg.destination_only_paths,
            *destination_only,
        ]
    if percent_similar is not None:
        changes["percent_similar"] = percent_similar
    return replace(cfg, **changes) if changes else cfg


def build_resolver(
    cfg: HeuristicsConfig,
    general_options: GeneralOptions,
    origin_url: str,
    current_version: str,
    destination: Path,
) -> InputProviderResolver:
    """Wire the command line values and the heuristics provider together."""
    flags = ConstantProvider(
        {
            Inputs.GIT_ORIGIN_URL: origin_url,
            Inputs.CURRENT_VERSION: current_version,
            Inputs.GENERATOR_FOLDER: destination,
        }
    )
    heuristics = ConfigHeuristicsInputProvider(
        GitOptions.from_config(cfg, general_options),
        general_options,
        GeneratorOptions.from_config(cfg),
        cfg.destination_only_path_set,
        cfg.percent_similar,
    )
    return InputProviderResolver([flags, heuristics])


def collect_suggestions(
    cfg: HeuristicsConfig,
    general_options: GeneralOptions,
    origin_url: str,
    current_version: str,
    destination: Path,
) -> dict[str, Any]:
    """Resolve every inferred input into a YAML-friendly dict."""
    resolver = build_resolver(
        cfg, general_options, origin_url, current_version, destination
    )
    suggestions: dict[str, Any] = {}
    for key in (
        Inputs.ORIGIN_GLOB,
        Inputs.TRANSFORMATIONS,
        Inputs.DESTINATION_EXCLUDE_PATHS,
    ):
        value = resolver.resolve_optional(key)
        suggestions[key.name] = value.to_dict() if value is not None else None
    return suggestions
