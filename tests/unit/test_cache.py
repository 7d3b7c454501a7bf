from __future__ import annotations

from types import ModuleType

import pytest

from satchel.cache import CacheEntry, ModuleCache
from satchel.types import ModuleState


def test_new_entries_start_instantiating_with_empty_exports() -> None:
    cache = ModuleCache()

    entry = cache.create("alpha")

    assert entry.state is ModuleState.INSTANTIATING
    assert isinstance(entry.exports, ModuleType)
    assert entry.exports.__name__ == "alpha"
    assert [name for name in vars(entry.exports) if not name.startswith("__")] == []
    assert cache.get("alpha") is entry
    assert "alpha" in cache


def test_entries_are_created_at_most_once() -> None:
    cache = ModuleCache()
    cache.create("alpha")

    with pytest.raises(ValueError, match="already cached"):
        cache.create("alpha")


def test_state_reports_unresolved_for_unknown_identifiers() -> None:
    cache = ModuleCache()
    ready = cache.create("ready")
    ready.mark_ready()
    failed = cache.create("failed")
    error = RuntimeError("boom")
    failed.mark_failed(error)

    assert cache.state("ready") is ModuleState.READY
    assert cache.state("failed") is ModuleState.FAILED
    assert failed.error is error
    assert cache.state("other") is ModuleState.UNRESOLVED
    assert cache.identifiers == ["ready", "failed"]
    assert len(cache) == 2


def test_entry_exports_can_be_supplied() -> None:
    entry = CacheEntry("custom", exports={"preset": True})

    assert entry.exports == {"preset": True}
