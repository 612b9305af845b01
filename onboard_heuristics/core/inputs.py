"""
Typed inputs and the machinery that resolves them from several providers.

An ``Input`` is a typed, identity-compared key ("the origin URL", "the
origin_files glob"). Providers advertise which inputs they can answer and at
what priority; ``InputProviderResolver`` asks the providers of an input in
priority order and returns the first answer. Providers may in turn ask the
resolver for the inputs they depend on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Generic, Iterable, Protocol, TypeVar, runtime_checkable

from onboard_heuristics.constants import DEFAULT_PRIORITY
from onboard_heuristics.exceptions import CannotProvideError
from onboard_heuristics.types import (
    DestinationExcludePaths,
    GeneratorTransformations,
    Glob,
)
from onboard_heuristics.utils.logging import log_with_context

T = TypeVar("T")


@dataclass(frozen=True, eq=False)
class Input(Generic[T]):
    """A typed configuration value that providers can be asked for.

    Inputs compare by identity: two inputs with the same name are still
    different keys.
    """

    name: str
    description: str
    value_type: type

    def as_value(self, obj: Any) -> T:
        """Return ``obj`` typed as this input's value.

        Raises:
            TypeError: If ``obj`` is not an instance of ``value_type``.
        """
        if not isinstance(obj, self.value_type):
            raise TypeError(
                f"Input '{self.name}' expects {self.value_type.__name__}, "
                f"got {type(obj).__name__}"
            )
        return obj

    def __repr__(self) -> str:
        return f"Input({self.name})"


class Inputs:
    """Every input known to the onboarding tool."""

    GIT_ORIGIN_URL: Input[str] = Input(
        "git_origin_url", "URL of the upstream git repository", str
    )
    CURRENT_VERSION: Input[str] = Input(
        "current_version", "Upstream version the destination was synced from", str
    )
    GENERATOR_FOLDER: Input[Path] = Input(
        "generator_folder", "Local destination tree to compare against", Path
    )
    ORIGIN_GLOB: Input[Glob] = Input(
        "origin_glob", "Which origin files should be migrated", Glob
    )
    TRANSFORMATIONS: Input[GeneratorTransformations] = Input(
        "transformations",
        "Suggested transformations between origin and destination",
        GeneratorTransformations,
    )
    DESTINATION_EXCLUDE_PATHS: Input[DestinationExcludePaths] = Input(
        "destination_exclude_paths",
        "Destination paths that must never be overwritten",
        DestinationExcludePaths,
    )

    @classmethod
    def all(cls) -> list[Input[Any]]:
        return [v for v in vars(cls).values() if isinstance(v, Input)]

    @classmethod
    def by_name(cls, name: str) -> Input[Any]:
        for candidate in cls.all():
            if candidate.name == name:
                return candidate
        raise KeyError(name)


@runtime_checkable
class InputResolver(Protocol):
    """Something that can resolve inputs on behalf of a provider."""

    def resolve(self, input: Input[T]) -> T:
        """Return the value for ``input`` or raise CannotProvideError."""
        ...


@runtime_checkable
class InputProvider(Protocol):
    """A source of values for some inputs."""

    def resolve(self, input: Input[T], resolver: InputResolver) -> T | None:
        """Return a value for ``input``, or None if this provider has nothing.

        Raises:
            CannotProvideError: If a prerequisite input cannot be resolved.
        """
        ...

    def provides(self) -> dict[Input[Any], int]:
        """Map every input this provider can answer to its priority."""
        ...


def default_priority(inputs: Iterable[Input[Any]]) -> dict[Input[Any], int]:
    """Advertise ``inputs`` at the same, default priority."""
    return {i: DEFAULT_PRIORITY for i in inputs}


class ConstantProvider:
    """Provides fixed values, typically taken from command line flags."""

    def __init__(
        self, values: dict[Input[Any], Any], priority: int = DEFAULT_PRIORITY
    ) -> None:
        self._values = {i: i.as_value(v) for i, v in values.items()}
        self._priority = priority

    def resolve(self, input: Input[T], resolver: InputResolver) -> T | None:
        return self._values.get(input)

    def provides(self) -> dict[Input[Any], int]:
        return {i: self._priority for i in self._values}


class InputProviderResolver:
    """Resolves inputs by asking registered providers in priority order.

    Resolved values are memoized. Providers asking, directly or indirectly,
    for the input they are being asked for are reported as a cycle.
    """

    def __init__(self, providers: Iterable[InputProvider]) -> None:
        self._providers = list(providers)
        self._resolved: dict[Input[Any], Any] = {}
        self._in_progress: list[Input[Any]] = []

    def providers_for(self, input: Input[Any]) -> list[InputProvider]:
        """Providers advertising ``input``, highest priority first."""
        ranked = [
            (provider.provides()[input], index, provider)
            for index, provider in enumerate(self._providers)
            if input in provider.provides()
        ]
        # Stable: equal priorities keep registration order
        ranked.sort(key=lambda item: (-item[0], item[1]))
        return [provider for _, _, provider in ranked]

    def resolve(self, input: Input[T]) -> T:
        """Return the first non-None value any provider gives for ``input``.

        Raises:
            CannotProvideError: If no provider answers, or resolution cycles.
        """
        if input in self._resolved:
            return self._resolved[input]
        if input in self._in_progress:
            chain = " -> ".join(i.name for i in [*self._in_progress, input])
            raise CannotProvideError(f"Cyclic input resolution: {chain}")

        self._in_progress.append(input)
        try:
            for provider in self.providers_for(input):
                value = provider.resolve(input, self)
                if value is not None:
                    log_with_context(
                        logging.DEBUG,
                        f"Resolved {input.name} from {type(provider).__name__}",
                    )
                    self._resolved[input] = value
                    return value
        finally:
            self._in_progress.pop()

        raise CannotProvideError(f"No provider can resolve input '{input.name}'")

    def resolve_optional(self, input: Input[T]) -> T | None:
        """Like ``resolve`` but returns None when no provider answers."""
        try:
            return self.resolve(input)
        except CannotProvideError:
            return None
