"""Eager instantiation of a bundle's entry modules."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

LOGGER = logging.getLogger(__name__)


def run_entries(resolve: Callable[[str], Any], entries: Iterable[str]) -> None:
    """Resolve each entry identifier in order, for its side effects."""
    for identifier in entries:
        LOGGER.debug("Running entry module '%s'", identifier)
        resolve(identifier)


__all__ = ["run_entries"]
