"""Build a :class:`Manifest` from package.json data."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

from .models import Manifest


class ManifestError(RuntimeError):
    """Raised when package.json cannot be read as a manifest."""


def load_package_json(package_dir: Path) -> Dict[str, Any]:
    """Return the parsed package.json contents, or an empty dict when absent."""
    package_json = package_dir / "package.json"
    if not package_json.exists():
        return {}
    try:
        data = json.loads(package_json.read_text(encoding="utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ManifestError(f"Failed to parse {package_json}: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestError(f"{package_json} must contain a JSON object")
    return data


def load_manifest(package_dir: Path) -> Manifest:
    return manifest_from_mapping(load_package_json(package_dir))


def manifest_from_mapping(data: Mapping[str, Any]) -> Manifest:
    return Manifest(
        os=_as_field(data.get("os")),
        cpu=_as_field(data.get("cpu")),
        scripts=_as_scripts(data.get("scripts")),
    )


def _as_field(value: Any) -> Tuple[str, ...]:
    # package.json allows a bare string as shorthand for a one-entry list.
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(item for item in value if isinstance(item, str))
    return ()


def _as_scripts(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {
        name: command
        for name, command in value.items()
        if isinstance(name, str) and isinstance(command, str)
    }


__all__ = ["ManifestError", "load_manifest", "load_package_json", "manifest_from_mapping"]
