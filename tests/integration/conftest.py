"""Integration test configuration.

These tests drive a real ``git`` binary against repositories created in a
temporary directory. They are skipped when git is not installed.
"""

import os
import subprocess

import pytest

_GIT_IDENTITY = [
    "-c",
    "user.name=Onboard Tests",
    "-c",
    "user.email=tests@example.com",
    "-c",
    "commit.gpgsign=false",
    "-c",
    "tag.gpgsign=false",
]


def git(cwd, *args):
    """Run git in ``cwd`` and return its stdout."""
    return subprocess.run(
        ["git", *_GIT_IDENTITY, *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    ).stdout


@pytest.fixture()
def upstream(make_tree, sample_origin_files):
    """An upstream repo tagged ``v1.2.0`` and, one commit later, ``v1.3.0``."""
    root = make_tree("upstream", sample_origin_files)
    os.symlink("missing-target", root / "src" / "gen.py")
    git(root, "init", "--quiet")
    git(root, "add", "-A")
    git(root, "commit", "--quiet", "-m", "Release 1.2.0")
    git(root, "tag", "v1.2.0")

    (root / "README.md").write_text("Rewritten\nfrom\nscratch\nfor\n1.3\n")
    git(root, "commit", "--quiet", "-am", "Release 1.3.0")
    git(root, "tag", "v1.3.0")
    return root
