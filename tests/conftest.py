from __future__ import annotations

from pathlib import Path

import pytest

from buildgate.report import Report
from tests._fixtures.package_builder import PackageBuilder


@pytest.fixture
def package_builder(tmp_path: Path) -> PackageBuilder:
    """Provide a package tree rooted at the pytest tmp_path."""
    return PackageBuilder(tmp_path)


@pytest.fixture
def report() -> Report:
    return Report()
