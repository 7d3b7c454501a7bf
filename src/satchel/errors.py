"""Errors raised by the bundle runtime."""

from __future__ import annotations

MODULE_NOT_FOUND = "MODULE_NOT_FOUND"


class UnresolvedModuleError(ModuleNotFoundError):
    """Raised when an identifier is in no table and no fallback can take it."""

    code = MODULE_NOT_FOUND

    def __init__(self, identifier: str) -> None:
        super().__init__(f"Cannot find module '{identifier}'", name=identifier)
        self.identifier = identifier


__all__ = ["MODULE_NOT_FOUND", "UnresolvedModuleError"]
