"""Fallback resolvers consulted when an identifier is missing from a table."""

from __future__ import annotations

import importlib
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from .errors import UnresolvedModuleError
from .types import Resolve

LOGGER = logging.getLogger(__name__)


@dataclass
class HostEnvironment:
    """Resolution capability shared by every runtime built in one host.

    ``require`` is whatever resolver the host currently exposes. Runtimes read
    it on each failed lookup and also capture its value once at construction.
    """

    require: Resolve | None = None


@runtime_checkable
class Fallback(Protocol):
    """A single step of a delegation chain."""

    name: str
    guarded: bool

    def bind(self) -> Resolve | None:
        """Return the resolver available right now, or ``None``."""


class HostFallback:
    """Late-bound fallback re-read from the host environment on every call.

    Skipped once a request has already been delegated, which keeps a host
    resolver that points back at this runtime from recursing forever.
    """

    name = "host"
    guarded = True

    def __init__(self, environment: HostEnvironment) -> None:
        self._environment = environment

    def bind(self) -> Resolve | None:
        return self._environment.require


class CapturedFallback:
    """Early-bound fallback fixed when the runtime was constructed."""

    name = "captured"
    guarded = False

    def __init__(self, resolve: Resolve | None) -> None:
        self._resolve = resolve

    def bind(self) -> Resolve | None:
        return self._resolve


class ImportFallback:
    """Resolve identifiers through the Python import system."""

    name = "import"
    guarded = False

    def bind(self) -> Resolve | None:
        return self.resolve

    def resolve(self, identifier: str, already_delegated: bool = True) -> Any:
        if not identifier or identifier.startswith("."):
            raise UnresolvedModuleError(identifier)
        try:
            return importlib.import_module(identifier)
        except ModuleNotFoundError as exc:
            # Only translate misses for the identifier itself, not its imports.
            if exc.name and identifier != exc.name and not identifier.startswith(f"{exc.name}."):
                raise
            raise UnresolvedModuleError(identifier) from exc


class DelegationChain:
    """Ordered fallbacks; the first one available handles the request."""

    def __init__(self, fallbacks: Iterable[Fallback] = ()) -> None:
        self._fallbacks: tuple[Fallback, ...] = tuple(fallbacks)

    @classmethod
    def standard(
        cls,
        environment: HostEnvironment | None,
        captured: Resolve | None = None,
        extra: Iterable[Fallback] = (),
    ) -> DelegationChain:
        """Build the host, captured, then extra chain used by runtimes."""
        fallbacks: list[Fallback] = []
        if environment is not None:
            fallbacks.append(HostFallback(environment))
            if captured is None:
                captured = environment.require
        if captured is not None:
            fallbacks.append(CapturedFallback(captured))
        fallbacks.extend(extra)
        return cls(fallbacks)

    def select(self, already_delegated: bool) -> tuple[str, Resolve] | None:
        for fallback in self._fallbacks:
            if already_delegated and fallback.guarded:
                continue
            resolve = fallback.bind()
            if resolve is None:
                continue
            return fallback.name, resolve
        return None

    def delegate(self, identifier: str, already_delegated: bool) -> Any:
        """Hand ``identifier`` to the first available fallback exactly once."""
        selected = self.select(already_delegated)
        if selected is None:
            LOGGER.debug("No fallback available for module '%s'", identifier)
            raise UnresolvedModuleError(identifier)
        name, resolve = selected
        LOGGER.debug("Delegating module '%s' to %s resolver", identifier, name)
        return resolve(identifier, True)

    @property
    def names(self) -> list[str]:
        return [fallback.name for fallback in self._fallbacks]

    def __len__(self) -> int:
        return len(self._fallbacks)


__all__ = [
    "CapturedFallback",
    "DelegationChain",
    "Fallback",
    "HostEnvironment",
    "HostFallback",
    "ImportFallback",
]
