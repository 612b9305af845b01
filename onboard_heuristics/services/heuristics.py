"""
Inference of migration settings from an origin checkout and a destination tree.

Every destination file is paired with its most likely origin counterpart
(same relative path, else a unique file with the same name) and the two are
compared line by line after optional carriage-return and whitespace
normalization. The pairs that are similar enough drive three suggestions:

- the ``origin_files`` glob: top-level origin entries holding matched files,
  minus unmatched files inside included directories;
- transformations: directory moves, whitespace normalization and version
  string replacements;
- destination exclude paths: configured destination-only paths that the
  origin does not contain.
"""

from __future__ import annotations

import difflib
import logging
import os
from collections import defaultdict
from fnmatch import fnmatch
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Sequence

from tqdm import tqdm

from onboard_heuristics.constants import (
    IGNORED_DIR_NAMES,
    MATCH_ALL_PATTERN,
    MAX_PERCENT_SIMILAR,
    MIN_PERCENT_SIMILAR,
    TAG_REF_PREFIX,
)
from onboard_heuristics.exceptions import ValidationError
from onboard_heuristics.types import (
    INCLUDE_EXCLUDE_NOOP,
    DestinationExcludePaths,
    GeneratorTransformations,
    Glob,
    HeuristicsResult,
    Transformation,
    TransformationKind,
)
from onboard_heuristics.utils.logging import log_with_context

if TYPE_CHECKING:
    from onboard_heuristics.core.options import GeneralOptions


def list_files(root: Path) -> list[Path]:
    """Return every regular file under ``root`` relative to it.

    VCS metadata and symlinks, which may dangle or leave the tree, are skipped.
    """
    files: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in IGNORED_DIR_NAMES)
        base = Path(dirpath)
        for name in sorted(filenames):
            path = base / name
            if path.is_symlink():
                log_with_context(logging.DEBUG, f"Skipping symlink {path}")
                continue
            files.append(path.relative_to(root))
    return files


def _read_text(path: Path) -> str | None:
    """Return the file contents as text, or None for binary files."""
    try:
        return path.read_bytes().decode("utf-8")
    except UnicodeDecodeError:
        return None


def _collapse_whitespace(lines: Iterable[str]) -> list[str]:
    collapsed = (" ".join(line.split()) for line in lines)
    return [line for line in collapsed if line]


class ConfigGenHeuristics:
    """Compares an origin checkout against a destination tree."""

    def __init__(
        self,
        origin: Path,
        destination: Path,
        destination_only_paths: frozenset[Path],
        percent_similar: int,
        ignore_carriage_return: bool,
        ignore_whitespace: bool,
        general_options: GeneralOptions,
        versions: Sequence[str],
    ) -> None:
        if not MIN_PERCENT_SIMILAR <= percent_similar <= MAX_PERCENT_SIMILAR:
            raise ValidationError(
                f"percent_similar must be between {MIN_PERCENT_SIMILAR} and "
                f"{MAX_PERCENT_SIMILAR}, got {percent_similar}"
            )
        self.origin = origin
        self.destination = destination
        self.destination_only_paths = destination_only_paths
        self.percent_similar = percent_similar
        self.ignore_carriage_return = ignore_carriage_return
        self.ignore_whitespace = ignore_whitespace
        self.general_options = general_options
        self.versions = [
            v[len(TAG_REF_PREFIX) :] if v.startswith(TAG_REF_PREFIX) else v
            for v in versions
        ]

    def run(self) -> HeuristicsResult:
        """Compute the suggestions.

        Raises:
            OSError: If either tree cannot be read.
            OperationInterruptedError: If cancellation was requested.
        """
        origin_files = list_files(self.origin)
        destination_files = [
            p for p in list_files(self.destination) if not self.is_destination_only(p)
        ]
        log_with_context(
            logging.DEBUG,
            f"Comparing {len(destination_files)} destination files against "
            f"{len(origin_files)} origin files",
        )

        origin_set = set(origin_files)
        by_name: dict[str, list[Path]] = defaultdict(list)
        for path in origin_files:
            by_name[path.name].append(path)

        matches: dict[Path, Path] = {}
        whitespace_paths: list[str] = []
        replacements: dict[tuple[str, str], list[str]] = defaultdict(list)

        for dest_path in tqdm(destination_files, desc="Comparing files", disable=None):
            self.general_options.check_interrupted()

            origin_path = self._counterpart(dest_path, origin_set, by_name)
            if origin_path is None or origin_path in matches:
                continue

            origin_text = _read_text(self.origin / origin_path)
            dest_text = _read_text(self.destination / dest_path)
            if origin_text is None or dest_text is None:
                same = (self.origin / origin_path).read_bytes() == (
                    self.destination / dest_path
                ).read_bytes()
                if same:
                    matches[origin_path] = dest_path
                continue

            if self.similarity(origin_text, dest_text) < self.percent_similar:
                continue
            matches[origin_path] = dest_path

            if self._differs_only_in_whitespace(origin_text, dest_text):
                whitespace_paths.append(dest_path.as_posix())
            for pair in self._version_replacements(origin_text, dest_text):
                replacements[pair].append(dest_path.as_posix())

        return HeuristicsResult(
            origin_glob=self._origin_glob(origin_files, matches),
            transformations=self._transformations(
                matches, whitespace_paths, replacements
            ),
            destination_exclude_paths=DestinationExcludePaths(
                frozenset(
                    p
                    for p in self.destination_only_paths
                    if not (self.origin / p).exists()
                )
            ),
        )

    def is_destination_only(self, path: Path) -> bool:
        for only in self.destination_only_paths:
            if path == only or only in path.parents:
                return True
            if fnmatch(path.as_posix(), only.as_posix()):
                return True
        return False

    def similarity(self, origin_text: str, dest_text: str) -> float:
        """Percentage (0-100) of matching lines after normalization."""
        a = self._normalize(origin_text)
        b = self._normalize(dest_text)
        if not a and not b:
            return 100.0
        matcher = difflib.SequenceMatcher(a=a, b=b, autojunk=False)
        if matcher.real_quick_ratio() * 100 < self.percent_similar:
            return matcher.real_quick_ratio() * 100
        return matcher.ratio() * 100

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _normalize(self, text: str) -> list[str]:
        if self.ignore_carriage_return:
            text = text.replace("\r", "")
        lines = text.split("\n")
        if self.ignore_whitespace:
            return _collapse_whitespace(lines)
        return lines

    @staticmethod
    def _counterpart(
        dest_path: Path, origin_set: set[Path], by_name: dict[str, list[Path]]
    ) -> Path | None:
        if dest_path in origin_set:
            return dest_path
        candidates = by_name.get(dest_path.name, [])
        if len(candidates) == 1:
            return candidates[0]
        return None

    @staticmethod
    def _differs_only_in_whitespace(origin_text: str, dest_text: str) -> bool:
        if origin_text == dest_text:
            return False
        return _collapse_whitespace(origin_text.splitlines()) == _collapse_whitespace(
            dest_text.splitlines()
        )

    def _version_replacements(
        self, origin_text: str, dest_text: str
    ) -> set[tuple[str, str]]:
        """Find lines where one known version was swapped for another."""
        if not self.versions or origin_text == dest_text:
            return set()
        a = origin_text.splitlines()
        b = dest_text.splitlines()
        found: set[tuple[str, str]] = set()
        matcher = difflib.SequenceMatcher(a=a, b=b, autojunk=False)
        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag != "replace" or (i2 - i1) != (j2 - j1):
                continue
            for origin_line, dest_line in zip(a[i1:i2], b[j1:j2]):
                before = [v for v in self.versions if v in origin_line]
                after = [v for v in self.versions if v in dest_line]
                for old in before:
                    for new in after:
                        if old != new and origin_line.replace(old, new) == dest_line:
                            found.add((old, new))
        return found

    def _origin_glob(self, origin_files: list[Path], matches: dict[Path, Path]) -> Glob:
        if not matches:
            return INCLUDE_EXCLUDE_NOOP

        include: set[str] = set()
        included_dirs: set[str] = set()
        for origin_path in matches:
            if len(origin_path.parts) == 1:
                include.add(origin_path.as_posix())
            else:
                top = origin_path.parts[0]
                included_dirs.add(top)
                include.add(f"{top}/{MATCH_ALL_PATTERN}")

        exclude = [
            p.as_posix()
            for p in origin_files
            if p not in matches and len(p.parts) > 1 and p.parts[0] in included_dirs
        ]
        return Glob.create(include, exclude)

    @staticmethod
    def _transformations(
        matches: dict[Path, Path],
        whitespace_paths: list[str],
        replacements: dict[tuple[str, str], list[str]],
    ) -> GeneratorTransformations:
        suggestions: list[Transformation] = []

        moved_dirs: dict[tuple[str, str], list[str]] = defaultdict(list)
        for origin_path, dest_path in matches.items():
            if origin_path.parent != dest_path.parent:
                key = (origin_path.parent.as_posix(), dest_path.parent.as_posix())
                moved_dirs[key].append(dest_path.as_posix())
        for (before, after), paths in sorted(moved_dirs.items()):
            suggestions.append(
                Transformation(
                    TransformationKind.MOVE, before, after, tuple(sorted(paths))
                )
            )

        for (before, after), paths in sorted(replacements.items()):
            suggestions.append(
                Transformation(
                    TransformationKind.REPLACE, before, after, tuple(sorted(paths))
                )
            )

        if whitespace_paths:
            suggestions.append(
                Transformation(
                    TransformationKind.WHITESPACE, paths=tuple(sorted(whitespace_paths))
                )
            )

        return GeneratorTransformations(tuple(suggestions))
