"""Platform and CPU compatibility checks for package manifests."""

from __future__ import annotations

import platform
import sys
from typing import Optional, Sequence

from .logging import get_logger
from .models import Manifest, MessageName, Package
from .report import Report

_PLATFORM_PREFIXES = (
    ("linux", "linux"),
    ("darwin", "darwin"),
    ("win32", "win32"),
    ("cygwin", "win32"),
    ("freebsd", "freebsd"),
    ("openbsd", "openbsd"),
    ("aix", "aix"),
    ("sunos", "sunos"),
)

_ARCH_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "i386": "ia32",
    "i486": "ia32",
    "i586": "ia32",
    "i686": "ia32",
    "x86": "ia32",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv6l": "arm",
    "armv7l": "arm",
    "armv8l": "arm",
    "ppc64le": "ppc64",
    "ppc64": "ppc64",
    "s390x": "s390x",
    "riscv64": "riscv64",
    "loongarch64": "loong64",
    "mips": "mips",
    "mipsel": "mipsel",
}


def current_platform(sys_platform: Optional[str] = None) -> str:
    """Map the interpreter's platform onto package manifest identifiers."""
    value = (sys_platform or sys.platform).lower()
    for prefix, identifier in _PLATFORM_PREFIXES:
        if value.startswith(prefix):
            return identifier
    return value


def current_arch(machine: Optional[str] = None) -> str:
    """Map the interpreter's machine type onto package manifest CPU identifiers."""
    value = (machine if machine is not None else platform.machine()).lower()
    return _ARCH_ALIASES.get(value, value)


def is_field_compatible(rules: Sequence[str], actual: str) -> bool:
    """Return True when ``actual`` is accepted by an ``os``/``cpu`` field.

    Entries starting with ``!`` block a value. A field holding only blocked
    entries accepts everything else; any plain entry turns the field into an
    allowlist. An empty field accepts everything.
    """
    if not rules:
        return True

    has_allowlist = False
    has_blocklist = False
    for rule in rules:
        if rule.startswith("!"):
            has_blocklist = True
            if rule[1:] == actual:
                return False
        else:
            has_allowlist = True
            if rule == actual:
                return True

    return has_blocklist and not has_allowlist


class CompatibilityChecker:
    """Decides whether a package's manifest accepts the running platform."""

    def __init__(self, report: Report) -> None:
        self.report = report
        self.logger = get_logger("compatibility")

    def is_compatible(
        self,
        package: Package,
        manifest: Manifest,
        runtime_platform: str,
        runtime_arch: str,
    ) -> bool:
        if not is_field_compatible(manifest.os, runtime_platform):
            self.report.report_warning_once(
                MessageName.INCOMPATIBLE_OS,
                f"{package.pretty()} The platform {runtime_platform} is incompatible "
                "with this module, build skipped.",
                key=package.locator,
            )
            return False

        if not is_field_compatible(manifest.cpu, runtime_arch):
            self.report.report_warning_once(
                MessageName.INCOMPATIBLE_CPU,
                f"{package.pretty()} The CPU architecture {runtime_arch} is incompatible "
                "with this module, build skipped.",
                key=package.locator,
            )
            return False

        self.logger.debug(
            "%s accepts %s/%s", package.pretty(), runtime_platform, runtime_arch
        )
        return True


__all__ = [
    "CompatibilityChecker",
    "current_arch",
    "current_platform",
    "is_field_compatible",
]
