"""Memoisation layer holding instantiated modules."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from types import ModuleType
from typing import Any

from .types import ModuleState


@dataclass(eq=False)
class CacheEntry:
    """Instantiated module record handed to factories as ``module``.

    Factories may populate ``exports`` in place or replace it outright; the
    loader always returns whatever ``exports`` holds at the time of the request.
    """

    identifier: str
    exports: Any = None
    state: ModuleState = ModuleState.INSTANTIATING
    error: BaseException | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.exports is None:
            self.exports = ModuleType(self.identifier)

    def mark_ready(self) -> None:
        self.state = ModuleState.READY

    def mark_failed(self, error: BaseException) -> None:
        self.state = ModuleState.FAILED
        self.error = error


class ModuleCache:
    """Identifier to :class:`CacheEntry` mapping owned by a single runtime."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}

    def get(self, identifier: str) -> CacheEntry | None:
        return self._entries.get(identifier)

    def create(self, identifier: str) -> CacheEntry:
        if identifier in self._entries:
            raise ValueError(f"Module '{identifier}' is already cached.")
        entry = CacheEntry(identifier)
        self._entries[identifier] = entry
        return entry

    def state(self, identifier: str) -> ModuleState:
        entry = self._entries.get(identifier)
        if entry is None:
            return ModuleState.UNRESOLVED
        return entry.state

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def identifiers(self) -> list[str]:
        """Return identifiers in the order instantiation began."""
        return list(self._entries)


__all__ = ["CacheEntry", "ModuleCache"]
