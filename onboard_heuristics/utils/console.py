"""User-facing progress and status reporting."""

from __future__ import annotations

import logging

from onboard_heuristics.utils.logging import log_with_context


class Console:
    """Reports progress of long running steps through the tool's logger.

    Messages are tagged with ``component="console"`` so log files can tell
    them apart from internal diagnostics. ``quiet`` demotes progress lines to
    DEBUG.
    """

    def __init__(self, quiet: bool = False) -> None:
        self.quiet = quiet

    def progress(self, message: str) -> None:
        level = logging.DEBUG if self.quiet else logging.INFO
        log_with_context(level, message, component="console", progress=True)

    def progress_fmt(self, fmt: str, *args: object) -> None:
        self.progress(fmt % args)

    def info(self, message: str) -> None:
        log_with_context(logging.INFO, message, component="console")

    def warn(self, message: str) -> None:
        log_with_context(logging.WARNING, message, component="console")

    def warn_fmt(self, fmt: str, *args: object) -> None:
        self.warn(fmt % args)
