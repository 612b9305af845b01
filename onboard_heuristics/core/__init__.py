"""Core heuristics logic including configuration, inputs and orchestration."""

__all__ = [
    "config",
    "heuristics_provider",
    "inputs",
    "options",
]
