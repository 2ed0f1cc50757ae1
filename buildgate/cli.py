"""CLI entrypoint for inspecting build decisions."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from .config import CONFIG_FILENAME, ConfigError, load_config
from .fs import LocalPackageFs
from .logging import configure_logging, get_logger
from .manifest import ManifestError, load_package_json, manifest_from_mapping
from .models import FetchResult, LinkType, Package
from .report import Report
from .resolver import BuildDecision, BuildDirectiveResolver


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument("-v", "--verbose", **kwargs)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="buildgate",
        description="Decide which build steps a fetched package would run.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    plan_parser = subparsers.add_parser(
        "plan",
        help="Print the build directives for a package directory.",
    )
    _add_verbose_option(plan_parser, suppress_default=True)
    plan_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the fetched package (defaults to current directory).",
    )
    plan_parser.add_argument("--name", help="Package name (defaults to package.json name).")
    plan_parser.add_argument(
        "--reference", help="Resolved version or reference (defaults to package.json version)."
    )
    plan_parser.add_argument(
        "--soft-link",
        action="store_true",
        help="Treat the package as referenced through a soft link.",
    )
    plan_parser.add_argument("--platform", help="Override the runtime platform identifier.")
    plan_parser.add_argument("--arch", help="Override the runtime CPU identifier.")
    plan_parser.add_argument(
        "--config",
        help=f"Path to {CONFIG_FILENAME} (defaults to the current directory).",
    )
    plan_parser.add_argument(
        "--json",
        action="store_true",
        help="Emit the decision as JSON.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for buildgate commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=bool(getattr(args, "json", False)))

    if args.command == "plan":
        try:
            decision, report = _plan(args)
        except (ConfigError, ManifestError) as exc:
            parser.exit(1, f"{exc}\n")
        except OSError as exc:
            parser.exit(1, f"buildgate plan failed: {exc}\nRun with --verbose for more details.\n")
        if args.json:
            print(json.dumps(_decision_payload(decision, report), indent=2))
        else:
            _print_decision(decision, report)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _plan(args: argparse.Namespace) -> tuple[BuildDecision, Report]:
    logger = get_logger("cli")
    package_dir = Path(args.path).expanduser().resolve()
    if not package_dir.is_dir():
        raise ManifestError(f"{package_dir} is not a directory")

    data = load_package_json(package_dir)
    manifest = manifest_from_mapping(data)
    package = _package_from(args, data, package_dir)

    config_path = Path(args.config) if args.config else Path.cwd()
    configuration = load_config(config_path)

    report = Report()
    resolver = BuildDirectiveResolver(
        report,
        runtime_platform=args.platform,
        runtime_arch=args.arch,
    )
    logger.debug(
        "Planning %s for %s/%s", package.pretty(), resolver.runtime_platform, resolver.runtime_arch
    )
    fetch_result = FetchResult(prefix_path=package_dir, package_fs=LocalPackageFs(package_dir))
    decision = resolver.explain(
        package,
        fetch_result,
        manifest,
        configuration.dependency_meta_for(package),
        configuration,
    )
    return decision, report


def _package_from(args: argparse.Namespace, data: Dict[str, Any], package_dir: Path) -> Package:
    raw_name = args.name or _as_str(data.get("name")) or package_dir.name
    scope: Optional[str] = None
    name = raw_name
    if raw_name.startswith("@") and "/" in raw_name:
        scope, name = raw_name[1:].split("/", 1)
    reference = args.reference or _as_str(data.get("version")) or "0.0.0"
    link_type = LinkType.SOFT if args.soft_link else LinkType.HARD
    return Package(name=name, reference=reference, scope=scope, link_type=link_type)


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _decision_payload(decision: BuildDecision, report: Report) -> Dict[str, Any]:
    return {
        "package": decision.package.locator,
        "directives": [
            {"type": directive.build_type.value, "value": directive.payload}
            for directive in decision.directives
        ],
        "skipped_by": decision.skipped_by,
        "diagnostics": [entry.to_dict() for entry in report.entries],
    }


def _print_decision(decision: BuildDecision, report: Report) -> None:
    print(decision.package.pretty())
    if decision.skipped:
        print(f"  build skipped ({decision.skipped_by})")
    elif not decision.directives:
        print("  nothing to build")
    for directive in decision.directives:
        print(f"  {directive.build_type.value} {directive.payload}")
    for entry in report.entries:
        print(f"  {entry.level.value}: {entry.kind.value} {entry.message}")


if __name__ == "__main__":
    main(sys.argv[1:])
