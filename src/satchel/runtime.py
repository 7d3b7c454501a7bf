"""Loader that instantiates, memoises and delegates bundled modules."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .cache import ModuleCache
from .delegation import DelegationChain, Fallback, HostEnvironment
from .sequencer import run_entries
from .table import ModuleRecord, ModuleTable
from .types import ModuleState, Resolve

LOGGER = logging.getLogger(__name__)


class BoundRequire:
    """Require function handed to a single factory.

    Locally used names go through the module's alias map before reaching the
    runtime; the runtime itself never consults alias maps.
    """

    def __init__(self, runtime: Runtime, record: ModuleRecord) -> None:
        self._runtime = runtime
        self._record = record

    @property
    def identifier(self) -> str:
        return self._record.identifier

    def __call__(self, name: str) -> Any:
        return self._runtime.resolve(self._record.canonical(name))

    def __repr__(self) -> str:
        return f"<require for '{self._record.identifier}'>"


class Runtime:
    """One bundle's table, cache and fallbacks.

    Construction runs the entry modules before returning. Runtimes share no
    state unless they are wired together through a :class:`HostEnvironment`
    or an explicit captured resolver.
    """

    def __init__(
        self,
        table: ModuleTable | Mapping[str, Any],
        entries: Iterable[str] = (),
        *,
        environment: HostEnvironment | None = None,
        fallbacks: Iterable[Fallback] = (),
        cache: ModuleCache | None = None,
        captured: Resolve | None = None,
        name: str = "bundle",
    ) -> None:
        self.name = name
        self._table = ModuleTable.of(table)
        self._cache = cache if cache is not None else ModuleCache()
        self._entries = tuple(entries)
        self._environment = environment
        self._delegation = DelegationChain.standard(environment, captured, fallbacks)
        LOGGER.debug(
            "Runtime '%s' created with %s module(s), fallbacks %s",
            name,
            len(self._table),
            self._delegation.names,
        )
        run_entries(self.resolve, self._entries)

    def __call__(self, identifier: str, already_delegated: bool = False) -> Any:
        return self.resolve(identifier, already_delegated)

    def __repr__(self) -> str:
        return f"Runtime(name={self.name!r}, modules={len(self._table)}, loaded={len(self._cache)})"

    def resolve(self, identifier: str, already_delegated: bool = False) -> Any:
        """Return the exports of ``identifier``, instantiating it on first use."""
        entry = self._cache.get(identifier)
        if entry is not None:
            if entry.state is ModuleState.INSTANTIATING:
                LOGGER.debug("Circular request for '%s' sees partial exports", identifier)
            return entry.exports

        record = self._table.get(identifier)
        if record is None:
            return self._delegation.delegate(identifier, already_delegated)

        return self._instantiate(record)

    def state(self, identifier: str) -> ModuleState:
        return self._cache.state(identifier)

    def require_for(self, identifier: str) -> BoundRequire:
        """Return the require function a factory for ``identifier`` receives."""
        return BoundRequire(self, self._table[identifier])

    def nested(self, table: ModuleTable | Mapping[str, Any], entries: Iterable[str] = ()) -> Runtime:
        """Build a runtime for another table that falls back to this one."""
        return Runtime(
            table,
            entries,
            environment=self._environment,
            captured=self.resolve,
            name=f"{self.name}/nested",
        )

    def install(self) -> None:
        """Expose this runtime as the host's current resolver."""
        if self._environment is None:
            raise RuntimeError(f"Runtime '{self.name}' has no host environment to install into.")
        self._environment.require = self.resolve
        LOGGER.debug("Installed runtime '%s' as host resolver", self.name)

    @property
    def table(self) -> ModuleTable:
        return self._table

    @property
    def cache(self) -> ModuleCache:
        return self._cache

    @property
    def entries(self) -> tuple[str, ...]:
        return self._entries

    @property
    def delegation(self) -> DelegationChain:
        return self._delegation

    @property
    def loaded(self) -> list[str]:
        """Return identifiers in the order their instantiation began."""
        return self._cache.identifiers

    def _instantiate(self, record: ModuleRecord) -> Any:
        # The entry must exist before the factory runs so cycles terminate.
        entry = self._cache.create(record.identifier)
        LOGGER.debug("Instantiating module '%s'", record.identifier)
        try:
            record.factory(
                BoundRequire(self, record),
                entry,
                entry.exports,
                **self._handles(record),
            )
        except BaseException as exc:
            entry.mark_failed(exc)
            LOGGER.exception("Module '%s' factory failed", record.identifier)
            raise
        entry.mark_ready()
        return entry.exports

    def _handles(self, record: ModuleRecord) -> dict[str, Any]:
        available = {
            "runtime": self,
            "nested": self.nested,
            "table": self._table,
            "cache": self._cache,
            "entries": self._entries,
        }
        return {name: available[name] for name in record.ambient}


def create_runtime(
    table: ModuleTable | Mapping[str, Any],
    cache: ModuleCache | None = None,
    entries: Iterable[str] = (),
    **kwargs: Any,
) -> Runtime:
    """Construct a runtime and return it as its own require function."""
    return Runtime(table, entries, cache=cache, **kwargs)


__all__ = ["BoundRequire", "Runtime", "create_runtime"]
