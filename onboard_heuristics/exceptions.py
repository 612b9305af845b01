"""Custom exception hierarchy for the onboarding heuristics tool."""

from __future__ import annotations


class OnboardError(Exception):
    """Base exception for all onboarding-related errors."""


class ConfigError(OnboardError):
    """Raised when configuration is invalid or missing."""


class ValidationError(OnboardError):
    """Raised when user-supplied values cannot be used (bad version, bad threshold)."""


class RepoError(OnboardError):
    """Raised when a git command fails.

    Carries the failing command line, its exit code and captured stderr so that
    callers can log something more useful than "git failed".
    """

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr


class CannotProvideError(OnboardError):
    """Raised when an input cannot be resolved by any provider."""


class OperationInterruptedError(OnboardError):
    """Raised when a long running operation is cancelled from outside."""
