"""Unit test configuration and shared fixtures."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from onboard_heuristics.core.heuristics_provider import ConfigHeuristicsInputProvider
from onboard_heuristics.core.inputs import (
    ConstantProvider,
    InputProviderResolver,
    Inputs,
)
from onboard_heuristics.core.options import DirFactory, GeneralOptions, GeneratorOptions
from onboard_heuristics.types import (
    DestinationExcludePaths,
    GeneratorTransformations,
    GitRevision,
    Glob,
    HeuristicsResult,
    Transformation,
    TransformationKind,
)

ORIGIN_URL = "https://example/repo"
TAG_SHA = "a" * 40
BRANCH_SHA = "b" * 40


@pytest.fixture(autouse=True)
def _clean_logger():
    """Remove handlers CLI tests attached to the onboard_heuristics logger."""
    yield
    logger = logging.getLogger("onboard_heuristics")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)


# ---------------------------------------------------------------------------
# Data builders
# ---------------------------------------------------------------------------


def build_result(
    origin_glob: Glob | None = None,
    transformations: GeneratorTransformations | None = None,
    exclude_paths: DestinationExcludePaths | None = None,
) -> HeuristicsResult:
    """Build a HeuristicsResult with realistic defaults."""
    return HeuristicsResult(
        origin_glob=origin_glob or Glob.create(["src/**"], ["src/internal.py"]),
        transformations=transformations
        or GeneratorTransformations(
            (Transformation(TransformationKind.WHITESPACE, paths=("src/main.py",)),)
        ),
        destination_exclude_paths=exclude_paths
        or DestinationExcludePaths(frozenset({Path("BUILD")})),
    )


# ---------------------------------------------------------------------------
# Provider wiring
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_repo():
    """A MagicMock GitRepository whose fetches succeed."""
    repo = MagicMock(name="GitRepository")
    repo.with_work_tree.return_value = repo
    repo.fetch_single_ref_with_tags.return_value = GitRevision(
        sha1=TAG_SHA, reference="v1.2"
    )
    repo.fetch_single_ref.return_value = GitRevision(sha1=BRANCH_SHA, reference="v1.2")
    repo.show_ref.return_value = {
        "refs/heads/main": "1" * 40,
        "refs/tags/v1.2": "2" * 40,
        "refs/tags/v1.3": "3" * 40,
    }
    return repo


@pytest.fixture()
def destination(tmp_path):
    """An existing, empty destination directory."""
    path = tmp_path / "destination"
    path.mkdir()
    return path


@pytest.fixture()
def make_provider(tmp_path, mock_repo):
    """Factory fixture returning a provider wired to mocks.

    The provider's git options hand out ``mock_repo``, its version selector
    answers ``"v1.2"`` and ``get_config_gen_heuristics`` returns an engine
    mock whose ``run()`` yields ``result``. The mocks are reachable as
    ``provider.git_options``, ``provider.version_selector`` and
    ``provider.engine``.
    """

    def _build(result: HeuristicsResult | None = None, **kwargs: Any):
        git_options = MagicMock(name="GitOptions")
        git_options.cached_bare_repo_for_url.return_value = mock_repo

        selector = MagicMock(name="FuzzyClosestVersionSelector")
        selector.select_version.return_value = "v1.2"

        general_options = GeneralOptions(dir_factory=DirFactory(tmp_path / "scratch"))

        provider = ConfigHeuristicsInputProvider(
            git_options,
            general_options,
            GeneratorOptions(),
            frozenset({Path("BUILD")}),
            30,
            version_selector=selector,
            **kwargs,
        )
        engine = MagicMock(name="ConfigGenHeuristics")
        engine.run.return_value = result if result is not None else build_result()
        provider.get_config_gen_heuristics = MagicMock(return_value=engine)
        provider.engine = engine
        return provider

    return _build


@pytest.fixture()
def resolver(destination):
    """A resolver that knows the origin URL, version and destination."""
    return InputProviderResolver(
        [
            ConstantProvider(
                {
                    Inputs.GIT_ORIGIN_URL: ORIGIN_URL,
                    Inputs.CURRENT_VERSION: "1.2",
                    Inputs.GENERATOR_FOLDER: destination,
                }
            )
        ]
    )


@pytest.fixture()
def make_result():
    """Factory fixture building HeuristicsResult values."""
    return build_result
