"""Collaborators of the heuristics provider: git access, version matching, diffing."""

__all__ = [
    "git_repository",
    "heuristics",
    "version_selector",
]
