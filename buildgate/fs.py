"""Read-only filesystem handles over fetched package trees."""

from __future__ import annotations

import errno
import os
from pathlib import Path
from typing import Protocol, Union

PathLike = Union[str, Path]

# Errors that mean "nothing there" rather than a broken environment.
_ABSENT_ERRNOS = {errno.ENOENT, errno.ENOTDIR}


class PackageFs(Protocol):
    """Minimal contract the resolver needs from a package filesystem."""

    def exists_sync(self, path: PathLike) -> bool:
        """Return True when ``path`` exists inside the package tree."""


class LocalPackageFs:
    """Package filesystem backed by a directory on local disk."""

    def __init__(self, root: PathLike) -> None:
        self.root = Path(os.path.abspath(root))

    def exists_sync(self, path: PathLike) -> bool:
        """Check existence without swallowing environment faults.

        Missing files (or a missing parent directory) return False. Any other
        ``OSError`` such as permission denied propagates to the caller.
        """
        target = self._contain(path)
        try:
            os.stat(target)
        except OSError as exc:
            if exc.errno in _ABSENT_ERRNOS:
                return False
            raise
        return True

    def _contain(self, path: PathLike) -> Path:
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.root / candidate
        resolved = Path(os.path.abspath(candidate))
        if resolved != self.root and self.root not in resolved.parents:
            raise ValueError(f"{path} is outside the package root {self.root}")
        return resolved

    def __repr__(self) -> str:
        return f"LocalPackageFs({str(self.root)!r})"


__all__ = ["LocalPackageFs", "PackageFs", "PathLike"]
