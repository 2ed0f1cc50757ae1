"""Resolve the ordered build directives for a fetched package."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from .compatibility import CompatibilityChecker, current_arch, current_platform
from .config import Configuration
from .logging import get_logger
from .models import (
    LIFECYCLE_SCRIPTS,
    BuildDirective,
    DependencyMeta,
    FetchResult,
    LinkType,
    Manifest,
    MessageName,
    Package,
    ReportLevel,
    ScriptDirective,
    ShellcodeDirective,
)
from .report import Report

NATIVE_BINDING_FILE = "binding.gyp"
NATIVE_REBUILD_COMMAND = "node-gyp rebuild"


@dataclass(frozen=True)
class ResolutionContext:
    """Inputs for one resolution call, bundled so gates can be evaluated alone."""

    package: Package
    fetch_result: FetchResult
    manifest: Manifest
    dependency_meta: DependencyMeta
    configuration: Configuration
    runtime_platform: str
    runtime_arch: str


@dataclass(frozen=True)
class BuildGate:
    """One step of the suppression chain.

    ``blocks`` returns True when the build must be skipped. When ``kind`` is
    None the predicate reports its own diagnostic.
    """

    name: str
    blocks: Callable[[ResolutionContext], bool]
    kind: Optional[MessageName] = None
    level: ReportLevel = ReportLevel.WARNING
    describe: Optional[Callable[[ResolutionContext], str]] = None


@dataclass
class BuildDecision:
    """Outcome of a resolution, with the gate that blocked it if any."""

    package: Package
    candidates: List[BuildDirective] = field(default_factory=list)
    directives: List[BuildDirective] = field(default_factory=list)
    skipped_by: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.skipped_by is not None


def _scripts_disabled(ctx: ResolutionContext) -> bool:
    return not ctx.configuration.get("enableScripts") and ctx.dependency_meta.built is not True


def _soft_linked(ctx: ResolutionContext) -> bool:
    return ctx.package.link_type is not LinkType.HARD


def _explicitly_disabled(ctx: ResolutionContext) -> bool:
    return ctx.dependency_meta.built is False


class BuildDirectiveResolver:
    """Turns a package's manifest and file tree into build directives."""

    def __init__(
        self,
        report: Report,
        *,
        checker: Optional[CompatibilityChecker] = None,
        runtime_platform: Optional[str] = None,
        runtime_arch: Optional[str] = None,
    ) -> None:
        self.report = report
        self.checker = checker or CompatibilityChecker(report)
        self.runtime_platform = runtime_platform or current_platform()
        self.runtime_arch = runtime_arch or current_arch()
        self.logger = get_logger("resolver")
        self.gates: Tuple[BuildGate, ...] = (
            BuildGate(
                name="scripts-disabled",
                blocks=_scripts_disabled,
                kind=MessageName.DISABLED_BUILD_SCRIPTS,
                describe=lambda ctx: (
                    f"{ctx.package.pretty()} lists build scripts, but all build scripts "
                    "have been disabled."
                ),
            ),
            BuildGate(
                name="soft-link",
                blocks=_soft_linked,
                kind=MessageName.SOFT_LINK_BUILD,
                describe=lambda ctx: (
                    f"{ctx.package.pretty()} lists build scripts, but is referenced through "
                    "a soft link. Soft links don't support build scripts, so they'll be ignored."
                ),
            ),
            BuildGate(
                name="build-disabled",
                blocks=_explicitly_disabled,
                kind=MessageName.BUILD_DISABLED,
                level=ReportLevel.INFO,
                describe=lambda ctx: (
                    f"{ctx.package.pretty()} lists build scripts, but its build has been "
                    "explicitly disabled through configuration."
                ),
            ),
            BuildGate(name="incompatible-manifest", blocks=self._incompatible),
        )

    def candidates(
        self, package: Package, fetch_result: FetchResult, manifest: Manifest
    ) -> List[BuildDirective]:
        """Collect every directive the package asks for, before any gating."""
        directives: List[BuildDirective] = [
            ScriptDirective(name) for name in LIFECYCLE_SCRIPTS if manifest.has_script(name)
        ]

        # Native addons without an install script are rebuilt in place.
        if not manifest.has_script("install"):
            binding_path = fetch_result.prefix_path / NATIVE_BINDING_FILE
            if fetch_result.package_fs.exists_sync(binding_path):
                directives.append(ShellcodeDirective(NATIVE_REBUILD_COMMAND))

        self.logger.debug(
            "%s candidate directives: %s",
            package.pretty(),
            ", ".join(directive.payload for directive in directives) or "(none)",
        )
        return directives

    def resolve(
        self,
        package: Package,
        fetch_result: FetchResult,
        manifest: Manifest,
        dependency_meta: Optional[DependencyMeta],
        configuration: Configuration,
    ) -> List[BuildDirective]:
        return self.explain(
            package, fetch_result, manifest, dependency_meta, configuration
        ).directives

    def explain(
        self,
        package: Package,
        fetch_result: FetchResult,
        manifest: Manifest,
        dependency_meta: Optional[DependencyMeta],
        configuration: Configuration,
    ) -> BuildDecision:
        """Resolve directives and record which gate, if any, suppressed them."""
        candidates = self.candidates(package, fetch_result, manifest)
        decision = BuildDecision(package=package, candidates=list(candidates))
        if not candidates:
            return decision

        ctx = ResolutionContext(
            package=package,
            fetch_result=fetch_result,
            manifest=manifest,
            dependency_meta=dependency_meta or DependencyMeta(),
            configuration=configuration,
            runtime_platform=self.runtime_platform,
            runtime_arch=self.runtime_arch,
        )
        gate = self.first_blocking_gate(ctx)
        if gate is not None:
            decision.skipped_by = gate.name
            self.logger.debug("%s build skipped by %s", package.pretty(), gate.name)
            return decision

        decision.directives = list(candidates)
        return decision

    def first_blocking_gate(
        self, ctx: ResolutionContext, gates: Optional[Sequence[BuildGate]] = None
    ) -> Optional[BuildGate]:
        """Evaluate gates in order and report the first one that blocks."""
        for gate in gates if gates is not None else self.gates:
            if not gate.blocks(ctx):
                continue
            if gate.kind is not None and gate.describe is not None:
                self.report.report_once(
                    gate.level, gate.kind, gate.describe(ctx), key=ctx.package.locator
                )
            return gate
        return None

    def _incompatible(self, ctx: ResolutionContext) -> bool:
        return not self.checker.is_compatible(
            ctx.package, ctx.manifest, ctx.runtime_platform, ctx.runtime_arch
        )


__all__ = [
    "BuildDecision",
    "BuildDirectiveResolver",
    "BuildGate",
    "NATIVE_BINDING_FILE",
    "NATIVE_REBUILD_COMMAND",
    "ResolutionContext",
]
