"""Shared utilities for logging and console reporting."""

__all__ = [
    "console",
    "logging",
]
