"""Configuration loading for buildgate (.buildgate.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .models import DependencyMeta, Package

CONFIG_FILENAME = ".buildgate.yml"
ENABLE_SCRIPTS_ENV = "BUILDGATE_ENABLE_SCRIPTS"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class Configuration:
    """Settings that decide whether lifecycle scripts may run."""

    enable_scripts: bool = True
    dependencies_meta: Dict[str, DependencyMeta] = field(default_factory=dict)

    def get(self, key: str) -> Any:
        if key == "enableScripts":
            return self.enable_scripts
        if key == "dependenciesMeta":
            return dict(self.dependencies_meta)
        raise KeyError(f"Unknown configuration setting: {key}")

    def dependency_meta_for(self, package: Package) -> DependencyMeta:
        """Return overrides for ``package``; ``name@reference`` beats ``name``."""
        exact = self.dependencies_meta.get(package.locator)
        if exact is not None:
            return exact
        return self.dependencies_meta.get(package.ident, DependencyMeta())


def load_config(
    config_path: Path, *, environ: Optional[Mapping[str, str]] = None
) -> Configuration:
    """Load configuration from disk, then apply environment overrides."""
    env = os.environ if environ is None else environ
    config_file = _resolve_config_path(config_path)

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)

    enable_scripts = _as_bool(data.get("enableScripts"), "enableScripts")
    config = Configuration(
        enable_scripts=True if enable_scripts is None else enable_scripts,
        dependencies_meta=_parse_dependencies_meta(data.get("dependenciesMeta")),
    )

    override = env.get(ENABLE_SCRIPTS_ENV)
    if override is not None:
        config.enable_scripts = bool(_as_bool(override, ENABLE_SCRIPTS_ENV))

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ConfigError(f"{path.name} is not valid UTF-8: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _parse_dependencies_meta(value: Any) -> Dict[str, DependencyMeta]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError("dependenciesMeta must be a mapping")
    result: Dict[str, DependencyMeta] = {}
    for descriptor, raw in value.items():
        if not isinstance(raw, dict):
            raise ConfigError(f"dependenciesMeta entry for {descriptor} must be a mapping")
        name = str(descriptor)
        result[name] = DependencyMeta(
            built=_as_bool(raw.get("built"), f"{name}.built"),
            optional=_as_bool(raw.get("optional"), f"{name}.optional"),
            unplugged=_as_bool(raw.get("unplugged"), f"{name}.unplugged"),
        )
    return result


def _as_bool(value: Any, setting: str) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    raise ConfigError(f"{setting} must be a boolean, got {value!r}")


__all__ = ["CONFIG_FILENAME", "ConfigError", "Configuration", "ENABLE_SCRIPTS_ENV", "load_config"]
