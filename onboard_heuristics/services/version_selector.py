"""
Approximate matching of a requested version string against upstream tags.

Users rarely know the exact tag spelling an upstream project uses ("1.2" vs
"v1.2.0" vs "release-1.2"), so the requested version is matched against the
tags advertised by the remote: exact name first, then a normalized comparison,
then the best rapidfuzz score above a cutoff.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from rapidfuzz import fuzz, process

from onboard_heuristics.constants import (
    FUZZY_VERSION_SCORE_CUTOFF,
    PEELED_TAG_SUFFIX,
    TAG_REF_PREFIX,
)
from onboard_heuristics.exceptions import ValidationError
from onboard_heuristics.utils.logging import log_with_context

if TYPE_CHECKING:
    from onboard_heuristics.services.git_repository import GitRepository
    from onboard_heuristics.utils.console import Console

_SHA1_RE = re.compile(r"^[0-9a-fA-F]{7,40}$")
_VERSION_PREFIX_RE = re.compile(
    r"^(?:version|release|rel|v)[-_.]?(?=\d)", re.IGNORECASE
)
_SEPARATOR_RE = re.compile(r"[-_]")


def normalize_version(name: str) -> str:
    """Lowercase ``name`` and drop common prefixes and separator differences.

    ``release-1_2``, ``v1.2`` and ``1-2`` all normalize to ``1.2``.
    """
    stripped = _VERSION_PREFIX_RE.sub("", name.strip())
    return _SEPARATOR_RE.sub(".", stripped).lower()


def looks_like_commit(value: str) -> bool:
    """Whether ``value`` is a plausible abbreviated or full commit hash.

    All-digit strings shorter than a full hash are versions (``20240116``),
    not commits.
    """
    if not _SHA1_RE.match(value):
        return False
    return len(value) == 40 or not value.isdigit()


def tag_names(refs: dict[str, str]) -> list[str]:
    """Extract tag names from a ref listing, dropping peeled duplicates."""
    names: list[str] = []
    seen: set[str] = set()
    for ref in refs:
        if not ref.startswith(TAG_REF_PREFIX):
            continue
        name = ref[len(TAG_REF_PREFIX) :]
        if name.endswith(PEELED_TAG_SUFFIX):
            name = name[: -len(PEELED_TAG_SUFFIX)]
        if name not in seen:
            seen.add(name)
            names.append(name)
    return names


class FuzzyClosestVersionSelector:
    """Selects the upstream tag closest to a requested version."""

    def __init__(self, score_cutoff: float = FUZZY_VERSION_SCORE_CUTOFF) -> None:
        self.score_cutoff = score_cutoff

    def select_version(
        self, requested: str, repo: GitRepository, url: str, console: Console
    ) -> str:
        """Return the tag that best matches ``requested``.

        Commit hashes are returned untouched. When the remote has no tags, or
        none is close enough, the requested string is returned as-is and git
        gets to decide whether it is a valid ref.

        Raises:
            ValidationError: If ``requested`` is empty.
            RepoError: If the remote cannot be listed.
        """
        if not requested or not requested.strip():
            raise ValidationError("A version to look for is required")
        requested = requested.strip()

        if looks_like_commit(requested):
            return requested

        console.progress_fmt(
            "Looking for a version close to '%s' in %s", requested, url
        )
        tags = tag_names(repo.ls_remote(url, tags=True))
        if not tags:
            console.warn_fmt(
                "No tags found in %s, using '%s' as the version", url, requested
            )
            return requested

        selected = self.closest(requested, tags)
        if selected is None:
            console.warn_fmt(
                "No tag in %s is close to '%s', using it as-is", url, requested
            )
            return requested

        if selected != requested:
            console.info(
                f"Using tag '{selected}' for requested version '{requested}'"
            )
        log_with_context(
            logging.DEBUG,
            f"Selected version {selected} for {requested}",
            origin_url=url,
        )
        return selected

    def closest(self, requested: str, tags: list[str]) -> str | None:
        """Pick the tag from ``tags`` that best matches ``requested``, if any."""
        if requested in tags:
            return requested

        wanted = normalize_version(requested)
        normalized = {tag: normalize_version(tag) for tag in tags}
        for tag, norm in normalized.items():
            if norm == wanted:
                return tag

        match = process.extractOne(
            wanted,
            normalized,
            scorer=fuzz.ratio,
            score_cutoff=self.score_cutoff,
        )
        if match is None:
            return None
        # With a dict of choices extractOne returns (value, score, key)
        return match[2]
