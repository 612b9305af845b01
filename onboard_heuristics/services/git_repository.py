"""
Thin adapter over the ``git`` command line for local repository mirrors.

Every command runs against an explicit ``--git-dir`` (and ``--work-tree`` when
one is bound), so a single bare mirror can be checked out into any number of
throwaway directories.
"""

from __future__ import annotations

import logging
import os
import subprocess
import threading
from pathlib import Path

from onboard_heuristics.constants import SUBPROCESS_POLL_INTERVAL
from onboard_heuristics.exceptions import OperationInterruptedError, RepoError
from onboard_heuristics.types import GitRevision
from onboard_heuristics.utils.logging import log_with_context

# Disable credential prompts: a hung prompt looks like a hung fetch.
_GIT_ENV_OVERRIDES = {"GIT_TERMINAL_PROMPT": "0"}


class GitRepository:
    """A git directory, optionally bound to a work tree."""

    def __init__(
        self,
        git_dir: Path,
        work_tree: Path | None = None,
        cancel_event: threading.Event | None = None,
        git_binary: str = "git",
    ) -> None:
        self.git_dir = git_dir
        self.work_tree = work_tree
        self.cancel_event = cancel_event or threading.Event()
        self.git_binary = git_binary

    def with_work_tree(self, work_tree: Path) -> GitRepository:
        """Return a handle on the same git directory bound to ``work_tree``."""
        return GitRepository(
            self.git_dir,
            work_tree=work_tree,
            cancel_event=self.cancel_event,
            git_binary=self.git_binary,
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def init_bare(self) -> None:
        self._execute(
            [self.git_binary, "init", "--bare", "--quiet", str(self.git_dir)]
        )

    def fetch_single_ref_with_tags(
        self,
        url: str,
        ref: str,
        fetch_tags: bool,
        partial_fetch: bool,
        depth: int | None = None,
    ) -> GitRevision:
        """Fetch ``ref`` from ``url``, optionally together with every tag.

        Raises:
            RepoError: If git rejects the fetch (unknown ref, unadvertised sha,
                server refusing tag negotiation, network failure).
        """
        args = ["fetch", "--force", "--tags" if fetch_tags else "--no-tags"]
        if partial_fetch:
            args.append("--filter=blob:none")
        if depth is not None:
            args.append(f"--depth={depth}")
        args.extend([url, ref])
        self._run(args)
        sha1 = self._run(["rev-parse", "FETCH_HEAD^{commit}"]).strip()
        log_with_context(
            logging.DEBUG, f"Fetched {ref} as {sha1}", origin_url=url, component="git"
        )
        return GitRevision(sha1=sha1, reference=ref, work_tree=self.work_tree)

    def fetch_single_ref(
        self, url: str, ref: str, partial_fetch: bool, depth: int | None = None
    ) -> GitRevision:
        """Fetch only ``ref`` from ``url``, without tags."""
        return self.fetch_single_ref_with_tags(
            url, ref, fetch_tags=False, partial_fetch=partial_fetch, depth=depth
        )

    def show_ref(self) -> dict[str, str]:
        """Return every local ref mapped to its sha1, in ``git show-ref`` order."""
        # show-ref exits with 1 when the repository has no refs at all
        output = self._run(["show-ref"], allowed_returncodes=(0, 1))
        return _parse_ref_listing(output)

    def ls_remote(
        self, url: str, *patterns: str, tags: bool = False
    ) -> dict[str, str]:
        """Return the refs advertised by ``url`` mapped to their sha1."""
        args = ["ls-remote"]
        if tags:
            args.append("--tags")
        args.append(url)
        args.extend(patterns)
        return _parse_ref_listing(self._run(args))

    def force_checkout(self, ref: str) -> None:
        """Check ``ref`` out into the bound work tree, discarding local changes."""
        if self.work_tree is None:
            raise RepoError(
                f"Cannot check out {ref}: no work tree bound to {self.git_dir}"
            )
        self._run(["checkout", "--quiet", "--force", ref])

    # ------------------------------------------------------------------
    # Process handling
    # ------------------------------------------------------------------

    def _run(
        self, args: list[str], allowed_returncodes: tuple[int, ...] = (0,)
    ) -> str:
        cmd = [self.git_binary, f"--git-dir={self.git_dir}"]
        if self.work_tree is not None:
            cmd.append(f"--work-tree={self.work_tree}")
        cmd.extend(args)
        return self._execute(cmd, allowed_returncodes)

    def _execute(
        self, cmd: list[str], allowed_returncodes: tuple[int, ...] = (0,)
    ) -> str:
        """Run ``cmd`` and return its stdout.

        Polls the cancellation event while the process runs and kills the
        process as soon as it is set.

        Raises:
            RepoError: On an exit code outside ``allowed_returncodes``.
            OperationInterruptedError: If cancellation was requested.
            OSError: If the git binary cannot be started.
        """
        log_with_context(logging.DEBUG, f"Running: {' '.join(cmd)}", component="git")
        if self.cancel_event.is_set():
            raise OperationInterruptedError(f"Cancelled before running {cmd[0]}")

        env = {**os.environ, **_GIT_ENV_OVERRIDES}
        process = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=env,
            # Ref names and paths are arbitrary bytes, not necessarily UTF-8
            encoding="utf-8",
            errors="surrogateescape",
        )
        try:
            while True:
                try:
                    stdout, stderr = process.communicate(
                        timeout=SUBPROCESS_POLL_INTERVAL
                    )
                    break
                except subprocess.TimeoutExpired:
                    if self.cancel_event.is_set():
                        raise OperationInterruptedError(
                            f"Cancelled while running: {' '.join(cmd)}"
                        )
        except BaseException:
            process.kill()
            process.communicate()
            raise

        if process.returncode not in allowed_returncodes:
            raise RepoError(
                f"git command failed with exit code {process.returncode}: "
                f"{' '.join(cmd)}\n{stderr.strip()}",
                command=cmd,
                returncode=process.returncode,
                stderr=stderr,
            )
        return stdout


def _parse_ref_listing(output: str) -> dict[str, str]:
    refs: dict[str, str] = {}
    for line in output.splitlines():
        parts = line.split(None, 1)
        if len(parts) != 2:
            continue
        sha1, ref = parts
        refs[ref.strip()] = sha1
    return refs
