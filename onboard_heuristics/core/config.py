"""
Configuration module for the onboarding heuristics tool.

This module provides functions for loading heuristics settings from YAML
files, validating them, and creating a default configuration file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from onboard_heuristics.constants import (
    DEFAULT_PERCENT_SIMILAR,
    DEFAULT_REPO_STORAGE,
    MAX_PERCENT_SIMILAR,
    MIN_PERCENT_SIMILAR,
)
from onboard_heuristics.exceptions import ConfigError
from onboard_heuristics.utils.logging import log_with_context


@dataclass
class HeuristicsConfig:
    """Typed configuration for the heuristics pipeline.

    All fields have defaults so an absent or empty YAML file is valid.
    """

    # Similarity
    percent_similar: int = DEFAULT_PERCENT_SIMILAR
    ignore_carriage_return: bool = True
    ignore_whitespace: bool = True

    # Destination paths that are never compared against the origin
    destination_only_paths: list[str] = field(default_factory=list)

    # Local storage
    repo_storage: str = DEFAULT_REPO_STORAGE
    temp_dir: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.percent_similar, bool) or not isinstance(
            self.percent_similar, int
        ):
            raise ConfigError(
                f"percent_similar must be an integer, got {self.percent_similar!r}"
            )
        if not MIN_PERCENT_SIMILAR <= self.percent_similar <= MAX_PERCENT_SIMILAR:
            raise ConfigError(
                f"percent_similar must be between {MIN_PERCENT_SIMILAR} and "
                f"{MAX_PERCENT_SIMILAR}, got {self.percent_similar}"
            )
        if not isinstance(self.destination_only_paths, list) or not all(
            isinstance(p, str) for p in self.destination_only_paths
        ):
            raise ConfigError("destination_only_paths must be a list of paths")

    @property
    def destination_only_path_set(self) -> frozenset[Path]:
        """Destination-only paths as relative ``Path`` objects."""
        return frozenset(Path(p) for p in self.destination_only_paths)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HeuristicsConfig:
        """Create a HeuristicsConfig from a raw config dictionary."""
        return cls(
            percent_similar=data.get("percent_similar", DEFAULT_PERCENT_SIMILAR),
            ignore_carriage_return=data.get("ignore_carriage_return", True),
            ignore_whitespace=data.get("ignore_whitespace", True),
            destination_only_paths=data.get("destination_only_paths") or [],
            repo_storage=data.get("repo_storage") or DEFAULT_REPO_STORAGE,
            temp_dir=data.get("temp_dir"),
        )


def load_config(config_path: Path) -> HeuristicsConfig:
    """
    Load configuration from a YAML file and apply default values.

    A missing or unparsable file is logged and replaced by the defaults.
    Values that parse but make no sense raise ``ConfigError``.

    Args:
        config_path: Path to the config YAML file

    Returns:
        HeuristicsConfig with all necessary defaults applied

    Raises:
        ConfigError: If the file holds something other than a mapping, or a
            value is out of range.
    """
    raw: dict[str, Any] = {}

    if config_path.exists():
        try:
            with open(config_path) as f:
                loaded_config = yaml.safe_load(f)
            # Handle None result from empty file
            if loaded_config is not None:
                if not isinstance(loaded_config, dict):
                    raise ConfigError(
                        f"Config file {config_path} must contain a mapping"
                    )
                raw = loaded_config
            log_with_context(logging.INFO, f"Loaded configuration from {config_path}")
        except (yaml.YAMLError, OSError) as e:
            log_with_context(
                logging.WARNING, f"Failed to load config file {config_path}: {e}"
            )
    else:
        log_with_context(
            logging.WARNING,
            f"Config file {config_path} not found, using default settings",
        )

    return HeuristicsConfig.from_dict(raw)


def create_default_config(output_path: Path) -> bool:
    """
    Create a default configuration file with recommended settings.

    The function will not overwrite an existing configuration file.

    Args:
        output_path: Path where the default config should be saved

    Returns:
        True if the config file was created successfully, False otherwise
    """
    if output_path.exists():
        log_with_context(
            logging.WARNING,
            f"Config file {output_path} already exists, not overwriting",
        )
        return False

    default_config = {
        # Minimum similarity (0-100) for an origin file to match a destination file
        "percent_similar": DEFAULT_PERCENT_SIMILAR,
        "ignore_carriage_return": True,
        "ignore_whitespace": True,
        # Files that only exist in the destination and must never be overwritten
        "destination_only_paths": ["BUILD", "METADATA"],
        "repo_storage": DEFAULT_REPO_STORAGE,
    }

    try:
        with open(output_path, "w") as f:
            yaml.safe_dump(default_config, f, default_flow_style=False)
        log_with_context(logging.INFO, f"Created default config file at {output_path}")
        return True
    except OSError as e:
        log_with_context(logging.ERROR, f"Failed to create default config file: {e}")
        return False
