"""Satchel command-line interface."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Annotated, Any, NoReturn

import typer

from . import __version__
from .bundle import Bundle, BundleError, load_bundle
from .config import Config, ConfigError, load_config, resolved_config_path
from .delegation import Fallback, HostEnvironment, ImportFallback
from .errors import UnresolvedModuleError
from .logging import configure_logging
from .runtime import Runtime

app = typer.Typer(help="Run prebuilt module bundles.")
LOGGER = logging.getLogger(__name__)


@dataclass
class CLIState:
    """Stores shared CLI options."""

    config_path: Path | None


@app.callback()
def _satchel(
    ctx: typer.Context,
    config: Annotated[
        Path | None,
        typer.Option(
            "-c",
            "--config",
            help="Path to Satchel config (env SATCHEL_CONFIG or ~/.config/satchel/config.yaml).",
        ),
    ] = None,
) -> None:
    """Capture global CLI options."""

    resolved = config.expanduser() if config else None
    ctx.obj = CLIState(config_path=resolved)


@app.command()
def run(
    ctx: typer.Context,
    bundles: Annotated[
        list[Path] | None,
        typer.Argument(help="Bundle files, loaded in order (defaults to configured bundles)."),
    ] = None,
    require: Annotated[
        list[str] | None,
        typer.Option(
            "-r",
            "--require",
            help="Identifier to resolve after the entries have run (repeatable).",
        ),
    ] = None,
    entry: Annotated[
        list[str] | None,
        typer.Option(
            "-e",
            "--entry",
            help="Override the entry list of the last bundle (repeatable).",
        ),
    ] = None,
    import_fallback: Annotated[
        bool,
        typer.Option(
            "--import-fallback",
            help="Resolve identifiers missing from every bundle via Python imports.",
        ),
    ] = False,
) -> None:
    """Instantiate bundles, chaining each one to the bundles before it."""

    config = _load_config(_state(ctx).config_path)
    paths = list(bundles) if bundles else list(config.bundles)
    if not paths:
        _fail("No bundles given and none configured.")

    loaded = [_load_bundle(path) for path in paths]
    entries = entry if entry else config.entries
    fallbacks: list[Fallback] = []
    if import_fallback or config.import_fallback:
        fallbacks.append(ImportFallback())

    environment = HostEnvironment()
    runtimes: list[Runtime] = []
    for index, bundle in enumerate(loaded):
        override = entries if index == len(loaded) - 1 else None
        runtimes.append(_start_runtime(bundle, environment, fallbacks, override))

    last = runtimes[-1]
    for identifier in require or []:
        exports = _guarded(lambda: last.resolve(identifier))
        typer.echo(f"{identifier}:")
        for line in _describe_exports(exports):
            typer.echo(f"  {line}")

    for runtime in runtimes:
        typer.echo(f"{runtime.name}: instantiated {len(runtime.loaded)} module(s).")


@app.command()
def inspect(
    bundle_path: Annotated[Path, typer.Argument(..., help="Bundle file to describe.")],
) -> None:
    """List the modules, alias maps and entries packed into a bundle."""

    bundle = _load_bundle(bundle_path)
    typer.echo(f"Bundle: {bundle.name}")
    typer.echo(f"Path: {bundle.path}")
    typer.echo(f"Entries: {', '.join(bundle.entries) or '(none)'}")
    typer.echo("Modules:")
    for identifier, aliases, is_entry in bundle.describe():
        marker = "*" if is_entry else "-"
        typer.echo(f"  {marker} {identifier}")
        for local, target in sorted(aliases.items()):
            typer.echo(f"      {local} -> {target if target is not None else '(stub)'}")


@app.command()
def version(ctx: typer.Context) -> None:
    """Print the Satchel version and config location."""

    typer.echo(f"Version: {__version__}")
    typer.echo(f"Config path: {resolved_config_path(_state(ctx).config_path)}")


def _state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if isinstance(state, CLIState):
        return state
    return CLIState(config_path=None)


def _load_config(path: Path | None) -> Config:
    try:
        config = load_config(path)
    except ConfigError as exc:
        _config_failure(exc)
    try:
        configure_logging(config.logging, config.root_dir)
    except ConfigError as exc:
        _config_failure(exc)
    return config


def _load_bundle(path: Path) -> Bundle:
    try:
        return load_bundle(path)
    except BundleError as exc:
        _fail(str(exc), exc)


def _start_runtime(
    bundle: Bundle,
    environment: HostEnvironment,
    fallbacks: Sequence[Fallback],
    entries: Sequence[str] | None,
) -> Runtime:
    selected = bundle.entries if entries is None else tuple(entries)
    runtime = _guarded(
        lambda: Runtime(
            bundle.table,
            selected,
            environment=environment,
            fallbacks=fallbacks,
            name=bundle.name,
        )
    )
    runtime.install()
    LOGGER.info(
        "Bundle '%s' ready: %s of %s module(s) instantiated",
        bundle.name,
        len(runtime.loaded),
        len(bundle.table),
    )
    return runtime


def _guarded(action: Any) -> Any:
    try:
        return action()
    except UnresolvedModuleError as exc:
        _fail(f"{exc} ({exc.code})", exc)
    except Exception as exc:
        _fail(f"Module execution failed: {exc}", exc)


def _describe_exports(exports: Any) -> list[str]:
    if isinstance(exports, ModuleType):
        names = sorted(name for name in vars(exports) if not name.startswith("_"))
        if not names:
            return ["(empty)"]
        return [f"{name} = {getattr(exports, name)!r}" for name in names]
    return [repr(exports)]


def _config_failure(exc: ConfigError) -> NoReturn:
    _fail(f"Configuration error: {exc}", exc)


def _fail(message: str, exc: BaseException | None = None) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(1) from exc


def main() -> None:  # pragma: no cover - delegated to Typer
    app()


__all__ = ["app", "main"]
