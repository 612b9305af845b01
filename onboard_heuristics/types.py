"""Shared type definitions for the onboarding heuristics tool.

Provides the immutable value types flowing out of the heuristics pipeline
(globs, transformation suggestions, destination-only paths), the git revision
handle, and the tri-state cache slot held by the heuristics input provider.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Iterator, Union

from onboard_heuristics.constants import MATCH_ALL_PATTERN

# ---------------------------------------------------------------------------
# Path patterns
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Glob:
    """An include/exclude pair of path patterns relative to a tree root."""

    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()

    @classmethod
    def create(cls, include: Iterable[str], exclude: Iterable[str] = ()) -> Glob:
        """Build a Glob with sorted, de-duplicated patterns."""
        return cls(
            include=tuple(sorted(set(include))),
            exclude=tuple(sorted(set(exclude))),
        )

    def is_noop(self) -> bool:
        """True when the glob carries no information about which files matter.

        Covers both the degenerate "include everything, exclude everything"
        answer and a bare "include everything".
        """
        if self.include != (MATCH_ALL_PATTERN,):
            return False
        return self.exclude in ((), (MATCH_ALL_PATTERN,))

    def to_dict(self) -> dict[str, list[str]]:
        data = {"include": list(self.include)}
        if self.exclude:
            data["exclude"] = list(self.exclude)
        return data


INCLUDE_EXCLUDE_NOOP = Glob(
    include=(MATCH_ALL_PATTERN,), exclude=(MATCH_ALL_PATTERN,)
)


# ---------------------------------------------------------------------------
# Transformation suggestions
# ---------------------------------------------------------------------------


class TransformationKind(str, Enum):
    """What kind of rewrite a suggested transformation performs."""

    MOVE = "move"
    WHITESPACE = "whitespace"
    REPLACE = "replace"


@dataclass(frozen=True)
class Transformation:
    """A single suggested transformation.

    ``before``/``after`` are paths for moves, version strings for replaces and
    empty for whitespace normalization. ``paths`` lists the destination files
    the suggestion was derived from.
    """

    kind: TransformationKind
    before: str = ""
    after: str = ""
    paths: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind.value}
        if self.before:
            data["before"] = self.before
        if self.after:
            data["after"] = self.after
        if self.paths:
            data["paths"] = list(self.paths)
        return data


@dataclass(frozen=True)
class GeneratorTransformations:
    """Ordered collection of suggested transformations."""

    transformations: tuple[Transformation, ...] = ()

    def __iter__(self) -> Iterator[Transformation]:
        return iter(self.transformations)

    def __len__(self) -> int:
        return len(self.transformations)

    def to_dict(self) -> list[dict[str, Any]]:
        return [t.to_dict() for t in self.transformations]


@dataclass(frozen=True)
class DestinationExcludePaths:
    """Destination paths that must never be overwritten by a migration."""

    paths: frozenset[Path] = field(default_factory=frozenset)

    def __iter__(self) -> Iterator[Path]:
        return iter(sorted(self.paths))

    def __len__(self) -> int:
        return len(self.paths)

    def __contains__(self, item: object) -> bool:
        return item in self.paths

    def to_dict(self) -> list[str]:
        return [p.as_posix() for p in sorted(self.paths)]


@dataclass(frozen=True)
class HeuristicsResult:
    """Everything the heuristics engine inferred in one run."""

    origin_glob: Glob
    transformations: GeneratorTransformations
    destination_exclude_paths: DestinationExcludePaths

    def to_dict(self) -> dict[str, Any]:
        return {
            "origin_glob": self.origin_glob.to_dict(),
            "transformations": self.transformations.to_dict(),
            "destination_exclude_paths": self.destination_exclude_paths.to_dict(),
        }


# ---------------------------------------------------------------------------
# Git
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GitRevision:
    """A fetched commit and the reference it was fetched for."""

    sha1: str
    reference: str = ""
    work_tree: Path | None = None


# ---------------------------------------------------------------------------
# Heuristics cache slot
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NotComputed:
    """No pipeline attempt has been made yet."""


@dataclass(frozen=True)
class Failed:
    """A pipeline attempt was made and produced nothing."""


@dataclass(frozen=True)
class Ready:
    """A pipeline attempt produced a result."""

    result: HeuristicsResult


CacheSlot = Union[NotComputed, Failed, Ready]
