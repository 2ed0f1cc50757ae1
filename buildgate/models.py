"""Core data models shared across buildgate components."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Mapping, Optional, Tuple, Union

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from .fs import PackageFs

LIFECYCLE_SCRIPTS: Tuple[str, ...] = ("preinstall", "install", "postinstall")


class LinkType(str, Enum):
    """How a resolved package is materialized in the install tree."""

    HARD = "HARD"
    SOFT = "SOFT"


class BuildType(str, Enum):
    """Tag shared by the build directive variants."""

    SCRIPT = "script"
    SHELLCODE = "shellcode"


class ReportLevel(str, Enum):
    """Severity a diagnostic is reported at."""

    WARNING = "warning"
    INFO = "info"


class MessageName(str, Enum):
    """Diagnostic kinds emitted while deciding whether a package builds."""

    INCOMPATIBLE_OS = "INCOMPATIBLE_OS"
    INCOMPATIBLE_CPU = "INCOMPATIBLE_CPU"
    DISABLED_BUILD_SCRIPTS = "DISABLED_BUILD_SCRIPTS"
    SOFT_LINK_BUILD = "SOFT_LINK_BUILD"
    BUILD_DISABLED = "BUILD_DISABLED"


@dataclass(frozen=True)
class Package:
    """A resolved package identity."""

    name: str
    reference: str
    scope: Optional[str] = None
    link_type: LinkType = LinkType.HARD

    @property
    def ident(self) -> str:
        return f"@{self.scope}/{self.name}" if self.scope else self.name

    @property
    def locator(self) -> str:
        """Stable key used to deduplicate diagnostics for this package."""
        return f"{self.ident}@{self.reference}"

    def pretty(self) -> str:
        return self.locator


@dataclass(frozen=True)
class Manifest:
    """Subset of package metadata consulted when planning a build."""

    os: Tuple[str, ...] = ()
    cpu: Tuple[str, ...] = ()
    scripts: Mapping[str, str] = field(default_factory=dict)

    def has_script(self, name: str) -> bool:
        return name in self.scripts


@dataclass(frozen=True)
class FetchResult:
    """Location of a fetched package tree plus a read-only handle onto it."""

    prefix_path: Path
    package_fs: "PackageFs"

    def __post_init__(self) -> None:
        # Always absolute, so package_fs never re-roots it.
        object.__setattr__(self, "prefix_path", Path(os.path.abspath(self.prefix_path)))


@dataclass(frozen=True)
class DependencyMeta:
    """Per-dependency overrides supplied by project configuration.

    ``built`` is tri-state: ``None`` when unset, ``True`` to opt back into
    builds while scripts are globally disabled, ``False`` to never build.
    """

    built: Optional[bool] = None
    optional: Optional[bool] = None
    unplugged: Optional[bool] = None


@dataclass(frozen=True)
class ScriptDirective:
    """Run the manifest's lifecycle script called ``name``."""

    name: str

    @property
    def build_type(self) -> BuildType:
        return BuildType.SCRIPT

    @property
    def payload(self) -> str:
        return self.name


@dataclass(frozen=True)
class ShellcodeDirective:
    """Run a literal shell command that is not drawn from the manifest."""

    command: str

    @property
    def build_type(self) -> BuildType:
        return BuildType.SHELLCODE

    @property
    def payload(self) -> str:
        return self.command


BuildDirective = Union[ScriptDirective, ShellcodeDirective]


__all__ = [
    "BuildDirective",
    "BuildType",
    "DependencyMeta",
    "FetchResult",
    "LIFECYCLE_SCRIPTS",
    "LinkType",
    "Manifest",
    "MessageName",
    "Package",
    "ReportLevel",
    "ScriptDirective",
    "ShellcodeDirective",
]
