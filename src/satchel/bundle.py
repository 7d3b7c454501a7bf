"""Loading prebuilt bundle files."""

from __future__ import annotations

import importlib.util
import logging
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType

from .table import ModuleTable, TableError

LOGGER = logging.getLogger(__name__)
_BUNDLE_PREFIX = "satchel.bundles"
TABLE_ATTRIBUTE = "MODULES"
ENTRIES_ATTRIBUTE = "ENTRIES"


class BundleError(ValueError):
    """Raised when a bundle file cannot be loaded."""


@dataclass(frozen=True)
class Bundle:
    """A module table and its entry list, as produced by a bundler."""

    name: str
    path: Path | None
    table: ModuleTable
    entries: tuple[str, ...] = ()

    def describe(self) -> list[tuple[str, dict[str, str | None], bool]]:
        """Return ``(identifier, aliases, is_entry)`` rows in table order."""
        entries = set(self.entries)
        return [
            (identifier, dict(record.aliases), identifier in entries)
            for identifier, record in self.table.items()
        ]


def load_bundle(path: Path | str) -> Bundle:
    """Import a bundle file exposing ``MODULES`` and optionally ``ENTRIES``."""

    location = Path(path).expanduser()
    if not location.is_file():
        raise BundleError(f"Bundle file not found: {location}")

    module = _import_bundle(location.stem, location)
    table = getattr(module, TABLE_ATTRIBUTE, None)
    if not isinstance(table, Mapping):
        raise BundleError(f"Bundle {location} must define a {TABLE_ATTRIBUTE} mapping.")
    raw_entries = getattr(module, ENTRIES_ATTRIBUTE, ())
    if isinstance(raw_entries, str) or not isinstance(raw_entries, list | tuple):
        raise BundleError(f"{ENTRIES_ATTRIBUTE} in {location} must be a list of identifiers.")

    try:
        module_table = ModuleTable.of(table)
    except TableError as exc:
        raise BundleError(f"Invalid module table in {location}: {exc}") from exc

    bundle = Bundle(
        name=location.stem,
        path=location,
        table=module_table,
        entries=tuple(str(entry) for entry in raw_entries),
    )
    LOGGER.debug(
        "Loaded bundle '%s' from %s (%s module(s), %s entr(y/ies))",
        bundle.name,
        location,
        len(module_table),
        len(bundle.entries),
    )
    return bundle


def _import_bundle(name: str, path: Path) -> ModuleType:
    spec = importlib.util.spec_from_file_location(f"{_BUNDLE_PREFIX}.{name}", path)
    if spec is None or spec.loader is None:
        raise BundleError(f"Cannot load bundle '{name}' from {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(spec.name, None)
        LOGGER.exception("Failed to load bundle '%s' from %s", name, path)
        raise
    return module


__all__ = ["Bundle", "BundleError", "load_bundle"]
