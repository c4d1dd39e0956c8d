"""Configuration loading for storyscan (.storyscan.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .constants import DEFAULT_PACKAGE_NAME

CONFIG_FILENAME = ".storyscan.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class IndexerConfig:
    """Options of the indexer pass."""

    include_raw_source: bool = False


@dataclass
class ParserConfig:
    """External command that prints the Svelte syntax tree of a file as JSON."""

    command: List[str] = field(default_factory=list)


@dataclass
class StoryScanConfig:
    """Represents the settings defined in .storyscan.yml."""

    root: Path
    package_name: str = DEFAULT_PACKAGE_NAME
    legacy_template: bool = False
    indexer: IndexerConfig = field(default_factory=IndexerConfig)
    parser: ParserConfig = field(default_factory=ParserConfig)


def load_config(config_path: Path) -> StoryScanConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return StoryScanConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = StoryScanConfig(root=root)

    package_name = _as_str(data.get("package_name"))
    if package_name:
        config.package_name = package_name

    legacy = _as_bool(data.get("legacy_template"))
    if legacy is not None:
        config.legacy_template = legacy

    indexer_data = _as_dict(data.get("indexer"))
    if indexer_data:
        config.indexer.include_raw_source = _as_bool(indexer_data.get("include_raw_source")) or False

    parser_data = _as_dict(data.get("parser"))
    if parser_data:
        config.parser.command = _as_command(parser_data.get("command"))

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_command(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    raise ConfigError("parser.command must be a string or a list of strings")


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "IndexerConfig",
    "ParserConfig",
    "StoryScanConfig",
    "load_config",
]
