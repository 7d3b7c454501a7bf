"""Satchel package initialisation."""

from importlib import metadata

from .errors import MODULE_NOT_FOUND, UnresolvedModuleError
from .runtime import Runtime, create_runtime
from .table import ModuleRecord, ModuleTable, ambient


def _discover_version() -> str:
    """Return the installed package version, falling back to dev marker."""
    try:
        return metadata.version("satchel")
    except metadata.PackageNotFoundError:  # pragma: no cover - occurs in editable installs
        return "0.0.0"


__all__ = [
    "MODULE_NOT_FOUND",
    "ModuleRecord",
    "ModuleTable",
    "Runtime",
    "UnresolvedModuleError",
    "__version__",
    "ambient",
    "create_runtime",
]
__version__ = _discover_version()
