"""Core data structures shared by the runtime components."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any

Resolve = Callable[[str, bool], Any]
"""Fallback resolver signature: ``resolve(identifier, already_delegated)``."""

Factory = Callable[..., Any]
"""Module body: ``factory(require, module, exports, **handles)``."""


class ModuleState(str, Enum):
    """Instantiation state of a single identifier within one runtime."""

    UNRESOLVED = "unresolved"
    INSTANTIATING = "instantiating"
    READY = "ready"
    FAILED = "failed"


AMBIENT_HANDLES = frozenset({"runtime", "nested", "table", "cache", "entries"})


__all__ = ["AMBIENT_HANDLES", "Factory", "ModuleState", "Resolve"]
