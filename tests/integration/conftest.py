from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from textwrap import dedent

import pytest


@pytest.fixture()
def write_bundle(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a helper that writes a bundle file and returns its path."""

    bundle_dir = tmp_path / "bundles"
    bundle_dir.mkdir()

    def _write(name: str, body: str) -> Path:
        path = bundle_dir / f"{name}.py"
        path.write_text(dedent(body), encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def events() -> list[str]:
    return []
