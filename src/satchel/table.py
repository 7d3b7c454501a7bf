"""Immutable module table packed into a bundle."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .types import AMBIENT_HANDLES, Factory


class TableError(ValueError):
    """Raised when a module table cannot be built."""


def ambient(*names: str) -> Callable[[Factory], Factory]:
    """Declare which runtime handles a factory expects as keyword arguments."""

    def decorator(func: Factory) -> Factory:
        setattr(func, "_ambient", list(names))
        return func

    return decorator


@dataclass(frozen=True)
class ModuleRecord:
    """A factory together with its local alias map."""

    identifier: str
    factory: Factory
    aliases: Mapping[str, str | None] = field(default_factory=dict)
    ambient: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not callable(self.factory):
            raise TableError(f"Factory for module '{self.identifier}' is not callable.")
        object.__setattr__(self, "aliases", MappingProxyType(dict(self.aliases)))
        declared = tuple(self.ambient) or tuple(getattr(self.factory, "_ambient", ()))
        unknown = sorted(set(declared) - AMBIENT_HANDLES)
        if unknown:
            raise TableError(
                f"Module '{self.identifier}' declares unknown ambient handles: {unknown}. "
                f"Available: {sorted(AMBIENT_HANDLES)}"
            )
        object.__setattr__(self, "ambient", declared)

    def canonical(self, name: str) -> str:
        """Map a locally used name to the identifier it refers to."""
        target = self.aliases.get(name)
        # Stubbed dependencies are packed as None and fall back to the local name.
        return target if target is not None else name


class ModuleTable(Mapping[str, ModuleRecord]):
    """Read-only mapping from identifier to :class:`ModuleRecord`."""

    def __init__(self, records: Mapping[str, Any] | None = None) -> None:
        self._records: dict[str, ModuleRecord] = {}
        for identifier, value in (records or {}).items():
            self._records[identifier] = _coerce_record(identifier, value)

    @classmethod
    def of(cls, records: ModuleTable | Mapping[str, Any]) -> ModuleTable:
        if isinstance(records, ModuleTable):
            return records
        return cls(records)

    def __getitem__(self, identifier: str) -> ModuleRecord:
        return self._records[identifier]

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"ModuleTable({sorted(self._records)!r})"


def _coerce_record(identifier: str, value: Any) -> ModuleRecord:
    if not isinstance(identifier, str):
        raise TableError(f"Module identifiers must be strings, got {identifier!r}.")
    if isinstance(value, ModuleRecord):
        if value.identifier != identifier:
            raise TableError(
                f"Record for '{value.identifier}' registered under '{identifier}'."
            )
        return value
    if isinstance(value, tuple | list) and len(value) == 2:
        factory, aliases = value
        if aliases is None:
            aliases = {}
        if not isinstance(aliases, Mapping):
            raise TableError(f"Alias map for module '{identifier}' must be a mapping.")
        return ModuleRecord(identifier=identifier, factory=factory, aliases=aliases)
    if callable(value):
        return ModuleRecord(identifier=identifier, factory=value)
    raise TableError(
        f"Module '{identifier}' must be a ModuleRecord, a (factory, aliases) pair "
        "or a bare factory."
    )


__all__ = ["ModuleRecord", "ModuleTable", "TableError", "ambient"]
