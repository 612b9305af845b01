"""Runtime options shared by the heuristics pipeline and its collaborators.

``GeneralOptions`` owns the temporary directory factory, the cancellation
event and the console. ``GitOptions`` knows where local repository mirrors
live. ``GeneratorOptions`` carries the content normalization flags used when
comparing origin and destination files.
"""

from __future__ import annotations

import hashlib
import logging
import shutil
import tempfile
import threading
from dataclasses import dataclass, field
from pathlib import Path

from onboard_heuristics.constants import REPO_DIR_HASH_LENGTH
from onboard_heuristics.core.config import HeuristicsConfig
from onboard_heuristics.exceptions import OperationInterruptedError, RepoError
from onboard_heuristics.services.git_repository import GitRepository
from onboard_heuristics.utils.console import Console
from onboard_heuristics.utils.logging import log_with_context


class DirFactory:
    """Creates temporary directories and removes them on ``cleanup()``."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = root
        self._created: list[Path] = []

    def new_temp_dir(self, name: str) -> Path:
        if self.root is not None:
            self.root.mkdir(parents=True, exist_ok=True)
        path = Path(tempfile.mkdtemp(prefix=f"{name}-", dir=self.root))
        self._created.append(path)
        log_with_context(logging.DEBUG, f"Created temporary directory {path}")
        return path

    def cleanup(self) -> None:
        for path in reversed(self._created):
            shutil.rmtree(path, ignore_errors=True)
        self._created.clear()


@dataclass
class GeneralOptions:
    """Options every long running step needs."""

    dir_factory: DirFactory = field(default_factory=DirFactory)
    console: Console = field(default_factory=Console)
    cancel_event: threading.Event = field(default_factory=threading.Event)

    def check_interrupted(self) -> None:
        """Raise OperationInterruptedError if cancellation was requested."""
        if self.cancel_event.is_set():
            raise OperationInterruptedError("Operation cancelled")

    @classmethod
    def from_config(
        cls, config: HeuristicsConfig, console: Console | None = None
    ) -> GeneralOptions:
        root = Path(config.temp_dir).expanduser() if config.temp_dir else None
        return cls(dir_factory=DirFactory(root), console=console or Console())


@dataclass
class GitOptions:
    """Where bare mirrors of upstream repositories are cached."""

    repo_storage: Path
    general_options: GeneralOptions = field(default_factory=GeneralOptions)

    def cached_bare_repo_for_url(self, url: str) -> GitRepository:
        """Return the bare mirror for ``url``, initializing it on first use.

        Raises:
            RepoError: If ``git init`` fails.
        """
        digest = hashlib.sha256(url.encode("utf-8")).hexdigest()
        git_dir = self.repo_storage.expanduser() / digest[:REPO_DIR_HASH_LENGTH]
        repo = GitRepository(
            git_dir, cancel_event=self.general_options.cancel_event
        )
        if not (git_dir / "HEAD").exists():
            log_with_context(
                logging.DEBUG,
                f"Initializing bare mirror at {git_dir}",
                origin_url=url,
            )
            git_dir.mkdir(parents=True, exist_ok=True)
            try:
                repo.init_bare()
            except RepoError:
                shutil.rmtree(git_dir, ignore_errors=True)
                raise
        return repo

    @classmethod
    def from_config(
        cls, config: HeuristicsConfig, general_options: GeneralOptions
    ) -> GitOptions:
        return cls(
            repo_storage=Path(config.repo_storage), general_options=general_options
        )


@dataclass(frozen=True)
class GeneratorOptions:
    """Content normalization flags used when computing globs."""

    compute_glob_ignore_carriage_return: bool = True
    compute_glob_ignore_whitespace: bool = True

    @classmethod
    def from_config(cls, config: HeuristicsConfig) -> GeneratorOptions:
        return cls(
            compute_glob_ignore_carriage_return=config.ignore_carriage_return,
            compute_glob_ignore_whitespace=config.ignore_whitespace,
        )
