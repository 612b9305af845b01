"""Unit tests for the config module."""

from pathlib import Path

import pytest
import yaml

from onboard_heuristics.constants import DEFAULT_PERCENT_SIMILAR, DEFAULT_REPO_STORAGE
from onboard_heuristics.core.config import (
    HeuristicsConfig,
    create_default_config,
    load_config,
)
from onboard_heuristics.exceptions import ConfigError


def test_load_config_with_empty_file(tmp_path):
    """Test loading config from an empty file."""
    config_file = tmp_path / "onboard.yaml"
    config_file.write_text("")

    config = load_config(config_file)

    assert config.percent_similar == DEFAULT_PERCENT_SIMILAR
    assert config.ignore_carriage_return is True
    assert config.ignore_whitespace is True
    assert config.destination_only_paths == []
    assert config.repo_storage == DEFAULT_REPO_STORAGE
    assert config.temp_dir is None


def test_load_config_with_values(tmp_path):
    """Test loading config with specific values."""
    config_file = tmp_path / "onboard.yaml"
    config_data = {
        "percent_similar": 60,
        "ignore_whitespace": False,
        "destination_only_paths": ["BUILD", "METADATA"],
        "repo_storage": str(tmp_path / "repos"),
        "temp_dir": str(tmp_path / "tmp"),
    }
    with open(config_file, "w") as f:
        yaml.dump(config_data, f)

    config = load_config(config_file)

    assert config.percent_similar == 60
    assert config.ignore_whitespace is False
    assert config.ignore_carriage_return is True
    assert config.destination_only_paths == ["BUILD", "METADATA"]
    assert config.repo_storage == str(tmp_path / "repos")
    assert config.temp_dir == str(tmp_path / "tmp")


def test_load_config_missing_file_uses_defaults(tmp_path):
    config = load_config(tmp_path / "missing.yaml")
    assert config == HeuristicsConfig()


def test_load_config_invalid_yaml_uses_defaults(tmp_path):
    config_file = tmp_path / "onboard.yaml"
    config_file.write_text("percent_similar: [unclosed\n")

    config = load_config(config_file)

    assert config.percent_similar == DEFAULT_PERCENT_SIMILAR


def test_load_config_non_mapping_raises(tmp_path):
    config_file = tmp_path / "onboard.yaml"
    config_file.write_text("- just\n- a list\n")

    with pytest.raises(ConfigError, match="mapping"):
        load_config(config_file)


def test_load_config_out_of_range_threshold_raises(tmp_path):
    config_file = tmp_path / "onboard.yaml"
    config_file.write_text("percent_similar: 150\n")

    with pytest.raises(ConfigError, match="between 0 and 100"):
        load_config(config_file)


@pytest.mark.parametrize("value", [-1, 101, "30", 30.5, True])
def test_invalid_percent_similar(value):
    with pytest.raises(ConfigError):
        HeuristicsConfig(percent_similar=value)


@pytest.mark.parametrize("value", [0, 100])
def test_percent_similar_bounds_are_inclusive(value):
    assert HeuristicsConfig(percent_similar=value).percent_similar == value


def test_destination_only_paths_must_be_strings():
    with pytest.raises(ConfigError, match="destination_only_paths"):
        HeuristicsConfig(destination_only_paths=["BUILD", 3])


def test_destination_only_path_set():
    config = HeuristicsConfig(destination_only_paths=["BUILD", "tools/defs.bzl"])
    assert config.destination_only_path_set == frozenset(
        {Path("BUILD"), Path("tools/defs.bzl")}
    )


def test_from_dict_treats_null_lists_as_empty():
    config = HeuristicsConfig.from_dict(
        {"destination_only_paths": None, "repo_storage": None}
    )
    assert config.destination_only_paths == []
    assert config.repo_storage == DEFAULT_REPO_STORAGE


def test_create_default_config(tmp_path):
    """Test creating a default config file."""
    config_path = tmp_path / "onboard.yaml"

    assert create_default_config(config_path) is True
    assert config_path.exists()

    with open(config_path) as f:
        data = yaml.safe_load(f)
    assert data["percent_similar"] == DEFAULT_PERCENT_SIMILAR
    assert data["destination_only_paths"] == ["BUILD", "METADATA"]

    # The generated file must load cleanly
    assert load_config(config_path).destination_only_paths == ["BUILD", "METADATA"]


def test_create_default_config_does_not_overwrite(tmp_path):
    config_path = tmp_path / "onboard.yaml"
    config_path.write_text("percent_similar: 80\n")

    assert create_default_config(config_path) is False
    assert config_path.read_text() == "percent_similar: 80\n"


def test_create_default_config_unwritable_location(tmp_path):
    config_path = tmp_path / "no-such-dir" / "onboard.yaml"
    assert create_default_config(config_path) is False
