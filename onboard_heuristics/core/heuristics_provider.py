"""
Input provider that infers config fields by comparing origin and destination.

The provider checks out the upstream repository at (roughly) the version the
destination was synced from, runs the heuristics engine against the
destination tree and answers ``ORIGIN_GLOB``, ``TRANSFORMATIONS`` and
``DESTINATION_EXCLUDE_PATHS`` from that one result.

The pipeline is expensive (network fetch, checkout, full tree comparison), so
it runs at most once per provider instance. Its outcome, a result or "nothing
useful", is cached for the lifetime of the instance. The heuristics are only
advice: any failure is logged and turned into "no value" so that other
providers can still answer.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Iterable

from onboard_heuristics.constants import TAG_REF_PREFIX
from onboard_heuristics.core.inputs import (
    Input,
    InputResolver,
    Inputs,
    default_priority,
)
from onboard_heuristics.exceptions import OnboardError, RepoError, ValidationError
from onboard_heuristics.services.heuristics import ConfigGenHeuristics
from onboard_heuristics.services.version_selector import FuzzyClosestVersionSelector
from onboard_heuristics.types import (
    CacheSlot,
    Failed,
    GitRevision,
    HeuristicsResult,
    NotComputed,
    Ready,
)
from onboard_heuristics.utils.logging import log_with_context

if TYPE_CHECKING:
    from onboard_heuristics.core.options import (
        GeneralOptions,
        GeneratorOptions,
        GitOptions,
    )
    from onboard_heuristics.services.git_repository import GitRepository
    from onboard_heuristics.utils.console import Console

# Resolves the destination tree to compare against. Lets the destination
# differ from the folder the generated config is written to.
DestinationPathProvider = Callable[[InputResolver], Path]


def resolve_generator_folder(resolver: InputResolver) -> Path:
    return resolver.resolve(Inputs.GENERATOR_FOLDER)


# ---------------------------------------------------------------------------
# Answerable inputs
# ---------------------------------------------------------------------------


def _extract_origin_glob(result: HeuristicsResult) -> Any:
    # A no-op glob says nothing and must not hide a better informed provider
    if result.origin_glob.is_noop():
        return None
    return Inputs.ORIGIN_GLOB.as_value(result.origin_glob)


def _extract_transformations(result: HeuristicsResult) -> Any:
    return Inputs.TRANSFORMATIONS.as_value(result.transformations)


def _extract_destination_exclude_paths(result: HeuristicsResult) -> Any:
    return Inputs.DESTINATION_EXCLUDE_PATHS.as_value(result.destination_exclude_paths)


class HeuristicField(Enum):
    """The inputs this provider answers, each with its extractor."""

    ORIGIN_GLOB = (Inputs.ORIGIN_GLOB, _extract_origin_glob)
    TRANSFORMATIONS = (Inputs.TRANSFORMATIONS, _extract_transformations)
    DESTINATION_EXCLUDE_PATHS = (
        Inputs.DESTINATION_EXCLUDE_PATHS,
        _extract_destination_exclude_paths,
    )

    def __init__(
        self,
        input: Input[Any],
        extractor: Callable[[HeuristicsResult], Any],
    ) -> None:
        self.input = input
        self.extractor = extractor

    def extract(self, result: HeuristicsResult) -> Any:
        return self.extractor(result)

    @classmethod
    def for_input(cls, input: Input[Any]) -> HeuristicField | None:
        for member in cls:
            if member.input is input:
                return member
        return None


# ---------------------------------------------------------------------------
# Fetch strategy
# ---------------------------------------------------------------------------


def should_fall_back(error: BaseException) -> bool:
    """Whether a failed tag-aware fetch is worth retrying without tags.

    Only git-level rejections qualify. Interruptions and local failures are
    not retried.
    """
    return isinstance(error, RepoError)


def fetch_with_fallback(
    repo: GitRepository,
    url: str,
    ref: str,
    fall_back_on: Callable[[BaseException], bool] = should_fall_back,
) -> GitRevision:
    """Fetch ``ref`` with all tags, or just ``ref`` if that is rejected.

    The narrower fetch is attempted exactly once.
    """
    try:
        return repo.fetch_single_ref_with_tags(
            url, ref, fetch_tags=True, partial_fetch=False
        )
    except OnboardError as e:
        if not fall_back_on(e):
            raise
        log_with_context(
            logging.DEBUG,
            f"Fetching {ref} with tags failed, retrying without tags: {e}",
            origin_url=url,
            component="git",
        )
    return repo.fetch_single_ref(url, ref, partial_fetch=False)


def tag_inventory(refs: Iterable[str]) -> tuple[str, ...]:
    """Refs under ``refs/tags/``, in the order they were listed."""
    return tuple(ref for ref in refs if ref.startswith(TAG_REF_PREFIX))


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------


class ConfigHeuristicsInputProvider:
    """Answers config inputs from a comparison of origin and destination.

    Not safe for concurrent use: serialize queries to one instance, or give
    each resolution session its own instance.
    """

    def __init__(
        self,
        git_options: GitOptions,
        general_options: GeneralOptions,
        generator_options: GeneratorOptions,
        destination_only_paths: frozenset[Path],
        percent_similar: int,
        console: Console | None = None,
        destination_path_provider: DestinationPathProvider = resolve_generator_folder,
        version_selector: FuzzyClosestVersionSelector | None = None,
    ) -> None:
        self.git_options = git_options
        self.general_options = general_options
        self.generator_options = generator_options
        self.destination_only_paths = frozenset(destination_only_paths)
        self.percent_similar = percent_similar
        self.console = console or general_options.console
        self.destination_path_provider = destination_path_provider
        self.version_selector = version_selector or FuzzyClosestVersionSelector()
        self._cached: CacheSlot = NotComputed()

    @property
    def cache_state(self) -> CacheSlot:
        return self._cached

    def resolve(self, input: Input[Any], resolver: InputResolver) -> Any | None:
        """Return the inferred value for ``input``, or None.

        Raises:
            CannotProvideError: If the origin URL, current version or
                destination path cannot be resolved.
        """
        field = HeuristicField.for_input(input)
        if field is None:
            return None

        origin_url = resolver.resolve(Inputs.GIT_ORIGIN_URL)
        current_version = resolver.resolve(Inputs.CURRENT_VERSION)
        destination = self.destination_path_provider(resolver)

        result = self.compute_heuristic(origin_url, current_version, destination)
        if result is None:
            return None
        return field.extract(result)

    def provides(self) -> dict[Input[Any], int]:
        return default_priority(field.input for field in HeuristicField)

    def compute_heuristic(
        self, origin_url: str, current_version: str, destination: Path
    ) -> HeuristicsResult | None:
        """Run the heuristics pipeline once and remember the outcome.

        A missing destination directory is not remembered: it is checked on
        every call, before the cache.
        """
        if not destination.is_dir():
            log_with_context(
                logging.DEBUG,
                f"Destination {destination} is not a directory, skipping heuristics",
                origin_url=origin_url,
            )
            return None
        if isinstance(self._cached, Ready):
            return self._cached.result
        if isinstance(self._cached, Failed):
            return None

        try:
            result = self._run_pipeline(origin_url, current_version, destination)
        except (ValidationError, OSError, RepoError) as e:
            log_with_context(
                logging.WARNING,
                f"Cannot compute heuristics for repository {origin_url}: {e}",
                origin_url=origin_url,
                exc_info=e,
            )
            self._cached = Failed()
            return None

        self._cached = Ready(result)
        return result

    def _run_pipeline(
        self, origin_url: str, current_version: str, destination: Path
    ) -> HeuristicsResult:
        origin = self.general_options.dir_factory.new_temp_dir("checkout")
        repo = self.git_options.cached_bare_repo_for_url(origin_url).with_work_tree(
            origin
        )

        version = self.version_selector.select_version(
            current_version, repo, origin_url, self.console
        )

        self.console.progress_fmt("Fetching '%s' from %s", version, origin_url)
        revision = fetch_with_fallback(repo, origin_url, version)
        upstream_tags = tag_inventory(repo.show_ref())

        self.console.progress("Checking out git files")
        repo.with_work_tree(origin).force_checkout(revision.sha1)

        heuristics = self.get_config_gen_heuristics(
            destination,
            origin,
            self.destination_only_paths,
            self.percent_similar,
            self.generator_options,
            self.general_options,
            upstream_tags,
        )

        self.console.progress("Computing globs")
        return heuristics.run()

    def get_config_gen_heuristics(
        self,
        destination: Path,
        origin: Path,
        destination_only_paths: frozenset[Path],
        percent_similar: int,
        generator_options: GeneratorOptions,
        general_options: GeneralOptions,
        versions: tuple[str, ...],
    ) -> ConfigGenHeuristics:
        """
        Build the heuristics engine for one run.

        Args:
            destination: Local path to the destination tree
            origin: Local path to the origin checkout
            destination_only_paths: Paths considered destination-only and
                excluded from the comparison
            percent_similar: Threshold for an origin file to count as similar
                to a destination file
            generator_options: Content normalization flags
            general_options: Shared runtime options
            versions: Tag refs found upstream

        Returns:
            The engine, ready to ``run()``
        """
        return ConfigGenHeuristics(
            origin,
            destination,
            destination_only_paths,
            percent_similar,
            generator_options.compute_glob_ignore_carriage_return,
            generator_options.compute_glob_ignore_whitespace,
            general_options,
            versions,
        )
