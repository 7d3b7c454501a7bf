"""Configuration loading and validation."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

LOGGER = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SATCHEL_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/satchel/config.yaml")
DEFAULT_ROOT_DIR = Path("~/.local/lib/satchel")
DEFAULT_LOG_LEVEL = "info"


class ConfigError(ValueError):
    """Raised when configuration is invalid or missing."""


@dataclass(frozen=True)
class LoggingConfig:
    """Logging-related configuration."""

    level: str = DEFAULT_LOG_LEVEL
    file: bool = False
    debug_file: bool = False


@dataclass(frozen=True)
class Config:
    """Fully parsed configuration."""

    root_dir: Path = DEFAULT_ROOT_DIR.expanduser()
    bundles: list[Path] = field(default_factory=list)
    entries: list[str] | None = None
    import_fallback: bool = False
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: Path | str | None = None) -> Config:
    """Load and validate configuration from YAML.

    A missing file is only an error when it was asked for explicitly or via
    ``$SATCHEL_CONFIG``; otherwise defaults apply.
    """

    config_path, explicit = _resolve_config_path(path)
    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {config_path}")
        LOGGER.debug("No config at %s, using defaults", config_path)
        return Config()

    with config_path.open("r", encoding="utf-8") as handle:
        try:
            raw = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError("Configuration root must be a mapping.")

    return _parse_config(raw, base_dir=config_path.parent)


def resolved_config_path(path: Path | str | None = None) -> Path:
    return _resolve_config_path(path)[0]


def _resolve_config_path(explicit: Path | str | None) -> tuple[Path, bool]:
    if explicit:
        return Path(explicit).expanduser(), True
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser(), True
    return DEFAULT_CONFIG_PATH.expanduser(), False


def _parse_config(raw: dict[str, Any], base_dir: Path) -> Config:
    root_dir = Path(raw.get("rootdir") or raw.get("root_dir") or DEFAULT_ROOT_DIR).expanduser()
    return Config(
        root_dir=root_dir,
        bundles=_parse_bundles(raw.get("bundles"), base_dir),
        entries=_parse_entries(raw.get("entries")),
        import_fallback=_parse_bool(raw.get("import_fallback", False), "import_fallback"),
        logging=_parse_logging(raw.get("logging")),
    )


def _parse_bundles(value: Any, base_dir: Path) -> list[Path]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError("bundles must be a list.")

    paths: list[Path] = []
    for idx, entry in enumerate(value, start=1):
        if isinstance(entry, Path):
            path = entry
        elif isinstance(entry, str) and entry.strip():
            path = Path(entry)
        else:
            raise ConfigError(f"bundles[{idx}] must be a string path.")
        path = path.expanduser()
        # Relative bundle paths are taken relative to the config file.
        paths.append(path if path.is_absolute() else base_dir / path)
    return paths


def _parse_entries(value: Any) -> list[str] | None:
    if value is None:
        return None
    if not isinstance(value, list):
        raise ConfigError("entries must be a list of module identifiers.")
    entries: list[str] = []
    for idx, entry in enumerate(value, start=1):
        if not isinstance(entry, str | int) or isinstance(entry, bool):
            raise ConfigError(f"entries[{idx}] must be a module identifier.")
        entries.append(str(entry))
    return entries


def _parse_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{field_name} must be true or false.")
    return value


def _parse_logging(value: Any) -> LoggingConfig:
    if value is None:
        return LoggingConfig()
    if not isinstance(value, dict):
        raise ConfigError("logging must be a mapping.")
    level = str(value.get("level", DEFAULT_LOG_LEVEL)).lower()
    to_file = bool(value.get("file", False))
    debug_file = bool(value.get("debug_file", False))
    return LoggingConfig(level=level, file=to_file, debug_file=debug_file)


__all__ = [
    "CONFIG_ENV_VAR",
    "Config",
    "ConfigError",
    "LoggingConfig",
    "load_config",
    "resolved_config_path",
]
