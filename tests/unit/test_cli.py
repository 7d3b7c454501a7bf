from __future__ import annotations

import logging
from pathlib import Path
from textwrap import dedent

import pytest
from typer.testing import CliRunner

from satchel.cli import app
from satchel.config import CONFIG_ENV_VAR

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


def _write_bundle(tmp_path: Path) -> Path:
    path = tmp_path / "app.py"
    path.write_text(
        dedent(
            """
            def _greeting(require, module, exports):
                exports.text = "hello"

            def _main(require, module, exports):
                exports.greeting = require("./greeting").text
                print("main ran")

            MODULES = {
                "greeting": (_greeting, {}),
                "main": (_main, {"./greeting": "greeting"}),
            }
            ENTRIES = ["main"]
            """
        ),
        encoding="utf-8",
    )
    return path


def _write_config(tmp_path: Path, bundle: Path) -> Path:
    config = tmp_path / "config.yaml"
    config.write_text(
        "\n".join(
            [
                f"root_dir: {tmp_path / 'state'}",
                "bundles:",
                f"  - {bundle}",
                "logging:",
                "  level: warning",
                "",
            ]
        ),
        encoding="utf-8",
    )
    return config


def test_run_executes_entries_and_prints_requested_exports(tmp_path):
    bundle = _write_bundle(tmp_path)

    result = runner.invoke(app, ["run", str(bundle), "-r", "main"])

    assert result.exit_code == 0
    assert "main ran" in result.stdout
    assert "main:" in result.stdout
    assert "greeting = 'hello'" in result.stdout
    assert "app: instantiated 2 module(s)." in result.stdout


def test_run_uses_configured_bundles(tmp_path):
    bundle = _write_bundle(tmp_path)
    config = _write_config(tmp_path, bundle)

    result = runner.invoke(app, ["-c", str(config), "run"])

    assert result.exit_code == 0
    assert "main ran" in result.stdout


def test_run_entry_override(tmp_path):
    bundle = _write_bundle(tmp_path)

    result = runner.invoke(app, ["run", str(bundle), "-e", "greeting"])

    assert result.exit_code == 0
    assert "main ran" not in result.stdout
    assert "app: instantiated 1 module(s)." in result.stdout


def test_run_reports_unresolved_modules(tmp_path):
    bundle = _write_bundle(tmp_path)

    result = runner.invoke(app, ["run", str(bundle), "-r", "ghost"])

    assert result.exit_code == 1
    assert "Cannot find module 'ghost' (MODULE_NOT_FOUND)" in result.output


def test_run_import_fallback(tmp_path):
    bundle = _write_bundle(tmp_path)

    result = runner.invoke(app, ["run", str(bundle), "--import-fallback", "-r", "json"])

    assert result.exit_code == 0
    assert "json:" in result.stdout
    assert "dumps = <function dumps" in result.stdout


def test_run_without_bundles_fails(tmp_path):
    result = runner.invoke(app, ["run"])

    assert result.exit_code == 1
    assert "No bundles given" in result.output


def test_run_with_missing_config_fails(tmp_path):
    result = runner.invoke(app, ["-c", str(tmp_path / "absent.yaml"), "run"])

    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_inspect_lists_modules(tmp_path):
    bundle = _write_bundle(tmp_path)

    result = runner.invoke(app, ["inspect", str(bundle)])

    assert result.exit_code == 0
    assert "Bundle: app" in result.stdout
    assert "Entries: main" in result.stdout
    assert "* main" in result.stdout
    assert "- greeting" in result.stdout
    assert "./greeting -> greeting" in result.stdout


def test_version_command(tmp_path):
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "Version:" in result.stdout
