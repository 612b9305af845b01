"""Shared test fixtures for the onboard_heuristics test suite."""

from pathlib import Path

import pytest


def write_tree(root: Path, files: dict) -> Path:
    """Create ``files`` (relative path -> str or bytes contents) under ``root``."""
    root.mkdir(parents=True, exist_ok=True)
    for rel, contents in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(contents, bytes):
            path.write_bytes(contents)
        else:
            path.write_text(contents)
    return root


@pytest.fixture()
def make_tree(tmp_path):
    """Factory fixture: ``make_tree("origin", {"a.txt": "x"})`` -> Path."""

    def _make(name: str, files: dict) -> Path:
        return write_tree(tmp_path / name, files)

    return _make


@pytest.fixture()
def sample_origin_files():
    """Return the files of a small upstream project."""
    return {
        "README.md": "# Project\n\nSome documentation.\n",
        "src/main.py": "def main():\n    return 1\n\n\nif __name__ == '__main__':\n    main()\n",
        "src/util.py": "def helper(x):\n    return x * 2\n",
        "src/version.py": "NAME = 'project'\nVERSION = '1.2.0'\nAUTHOR = 'someone'\nLICENSE = 'MIT'\n",
        "docs/guide.md": "# Guide\n",
        "METADATA": "upstream metadata\n",
    }
