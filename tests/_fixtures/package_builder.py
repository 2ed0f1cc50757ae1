"""Helper utilities for constructing fetched package trees in tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from buildgate.fs import LocalPackageFs
from buildgate.manifest import load_manifest
from buildgate.models import FetchResult, LinkType, Manifest, Package


class PackageBuilder:
    """Writes a throwaway package directory and exposes it as a fetch result."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "pkg"
        self.root.mkdir()

    def package_json(self, data: Mapping[str, Any]) -> None:
        (self.root / "package.json").write_text(json.dumps(dict(data)), encoding="utf-8")

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the package tree."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")

    def fetch_result(self) -> FetchResult:
        return FetchResult(prefix_path=self.root, package_fs=LocalPackageFs(self.root))

    def manifest(self) -> Manifest:
        return load_manifest(self.root)

    @staticmethod
    def package(
        name: str = "left-pad",
        reference: str = "1.0.0",
        *,
        link_type: LinkType = LinkType.HARD,
        scope: Optional[str] = None,
    ) -> Package:
        return Package(name=name, reference=reference, scope=scope, link_type=link_type)


def scripts(*names: str) -> Dict[str, str]:
    """Return a scripts mapping with a placeholder command per name."""
    return {name: f"node {name}.js" for name in names}


__all__ = ["PackageBuilder", "scripts"]
