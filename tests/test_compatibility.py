"""Tests for manifest os/cpu compatibility checks."""

from __future__ import annotations

import pytest

from buildgate.compatibility import (
    CompatibilityChecker,
    current_arch,
    current_platform,
    is_field_compatible,
)
from buildgate.models import Manifest, MessageName
from buildgate.report import Report
from tests._fixtures.package_builder import PackageBuilder


def test_empty_fields_are_always_compatible(report: Report) -> None:
    checker = CompatibilityChecker(report)
    package = PackageBuilder.package()

    for platform_name, arch in [("linux", "x64"), ("darwin", "arm64"), ("win32", "ia32")]:
        assert checker.is_compatible(package, Manifest(), platform_name, arch) is True

    assert report.entries == []


def test_os_mismatch_reports_only_os_warning(report: Report) -> None:
    checker = CompatibilityChecker(report)
    package = PackageBuilder.package("fsevents", "2.3.3")
    manifest = Manifest(os=("darwin",), cpu=("arm64",))

    assert checker.is_compatible(package, manifest, "linux", "x64") is False

    kinds = [entry.kind for entry in report.entries]
    assert kinds == [MessageName.INCOMPATIBLE_OS]
    message = report.entries[0].message
    assert "fsevents@2.3.3" in message
    assert "linux" in message


def test_cpu_mismatch_reports_cpu_warning(report: Report) -> None:
    checker = CompatibilityChecker(report)
    manifest = Manifest(os=("linux",), cpu=("arm64",))

    assert checker.is_compatible(PackageBuilder.package(), manifest, "linux", "x64") is False

    assert [entry.kind for entry in report.entries] == [MessageName.INCOMPATIBLE_CPU]
    assert "x64" in report.entries[0].message


def test_matching_fields_do_not_report(report: Report) -> None:
    checker = CompatibilityChecker(report)
    manifest = Manifest(os=("linux", "darwin"), cpu=("x64",))

    assert checker.is_compatible(PackageBuilder.package(), manifest, "darwin", "x64") is True
    assert report.entries == []


def test_incompatibility_is_reported_once_per_package(report: Report) -> None:
    checker = CompatibilityChecker(report)
    package = PackageBuilder.package()
    manifest = Manifest(os=("win32",))

    assert checker.is_compatible(package, manifest, "linux", "x64") is False
    assert checker.is_compatible(package, manifest, "linux", "x64") is False
    assert len(report.entries) == 1

    other = PackageBuilder.package("other")
    assert checker.is_compatible(other, manifest, "linux", "x64") is False
    assert len(report.entries) == 2


@pytest.mark.parametrize(
    ("rules", "actual", "expected"),
    [
        ((), "linux", True),
        (("linux",), "linux", True),
        (("linux",), "darwin", False),
        (("!win32",), "linux", True),
        (("!win32",), "win32", False),
        (("!win32", "!darwin"), "darwin", False),
        (("!win32", "linux"), "darwin", False),
        (("!win32", "linux"), "linux", True),
        (("Linux",), "linux", False),
    ],
)
def test_field_rules(rules: tuple[str, ...], actual: str, expected: bool) -> None:
    assert is_field_compatible(rules, actual) is expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("linux", "linux"), ("darwin", "darwin"), ("win32", "win32"), ("cygwin", "win32"), ("freebsd14", "freebsd")],
)
def test_current_platform_maps_interpreter_names(raw: str, expected: str) -> None:
    assert current_platform(raw) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("x86_64", "x64"), ("AMD64", "x64"), ("aarch64", "arm64"), ("i686", "ia32"), ("armv7l", "arm"), ("sparc", "sparc")],
)
def test_current_arch_maps_machine_names(raw: str, expected: str) -> None:
    assert current_arch(raw) == expected
