"""Command-line entry points for the scanner."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

from .checks import CHECK_CLASSES, CHECKS_BY_ID
from .config import load_config
from .reporters import render_csv, render_human, render_json, render_sarif
from .risk import RiskLevel
from .scanner import scan_project

FORMATTERS = {
    "json": render_json,
    "sarif": render_sarif,
    "human": render_human,
    "csv": render_csv,
}
SEVERITIES = [level.value for level in RiskLevel]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sinkscan",
        description="Heuristic sink and taint scanner for JavaScript/TypeScript",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )
    subparsers = parser.add_subparsers(dest="command")

    scan_parser = subparsers.add_parser("scan", help="Scan a project")
    scan_parser.add_argument(
        "--project",
        default=".",
        help="Project root to scan (defaults to cwd)",
    )
    scan_parser.add_argument(
        "--config",
        help="Path to configuration file (.sinkscanrc.json by default)",
    )
    scan_parser.add_argument(
        "--severity",
        choices=SEVERITIES,
        help="Override minimum risk to report",
    )
    scan_parser.add_argument(
        "--check",
        action="append",
        choices=sorted(CHECKS_BY_ID),
        help="Only run the given check (repeatable)",
    )
    scan_parser.add_argument(
        "--disable",
        action="append",
        choices=sorted(CHECKS_BY_ID),
        help="Disable the given check (repeatable)",
    )
    scan_parser.add_argument(
        "--format",
        choices=sorted(FORMATTERS),
        action="append",
        help="Report format(s) to emit (default: json)",
    )
    scan_parser.add_argument(
        "--output",
        action="append",
        nargs=2,
        metavar=("FORMAT", "PATH"),
        help="Write report to file (e.g., --output sarif report.sarif)",
    )
    scan_parser.add_argument(
        "--bundle",
        help="Zip file path bundling JSON/SARIF/CSV reports",
    )
    scan_parser.add_argument(
        "--fail-on",
        choices=SEVERITIES,
        help="Exit with status 2 when a finding at or above this risk is reported",
    )

    subparsers.add_parser("checks", help="List available checks")
    return parser


def _config_overrides(ns: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if ns.severity:
        overrides["severity"] = ns.severity
    if ns.disable:
        overrides["disabled_checks"] = ns.disable
    return overrides


def _handle_scan(ns: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    project_root = Path(ns.project)
    if not project_root.is_dir():
        parser.error(f"Project root does not exist: {project_root}")
    try:
        config = load_config(
            project_root=project_root,
            config_path=Path(ns.config) if ns.config else None,
            overrides=_config_overrides(ns) or None,
        )
        result = scan_project(project_root, config=config, only=ns.check)
    except ValueError as exc:
        parser.error(str(exc))
    report = {**result.to_dict(), "config": config.to_dict()}
    formats = ns.format or ["json"]
    output_targets: List[Tuple[str, Path]] = []
    for fmt, path_str in ns.output or []:
        if fmt not in FORMATTERS:
            parser.error(f"Unknown output format: {fmt}")
        output_targets.append((fmt, Path(path_str)))
    _print_report(report, formats, output_targets, Path(ns.bundle) if ns.bundle else None)

    if ns.fail_on:
        threshold = RiskLevel.parse(ns.fail_on)
        if any(finding.risk.rank >= threshold.rank for finding in result.findings):
            return 2
    return 0


def _handle_checks() -> int:
    for check in CHECK_CLASSES:
        print(f"{check.CHECK_ID:<18} {check.DESCRIPTION}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if not args.command:
        parser.print_help()
        return 1
    if args.command == "scan":
        return _handle_scan(args, parser)
    if args.command == "checks":
        return _handle_checks()
    parser.error(f"Unknown command: {args.command}")
    return 1


def _print_report(
    data: Dict[str, object],
    formats: List[str],
    output_targets: List[Tuple[str, Path]],
    bundle_path: Path | None,
) -> None:
    outputs: Dict[str, str] = {}
    for fmt in formats:
        renderer = FORMATTERS.get(fmt)
        if not renderer:
            continue
        outputs[fmt] = renderer(data)
    for idx, (fmt, content) in enumerate(outputs.items(), start=1):
        if len(outputs) > 1:
            print(f"--- {fmt} report {idx}/{len(outputs)} ---")
        print(content)
    for fmt, path in output_targets:
        path.parent.mkdir(parents=True, exist_ok=True)
        content = outputs.get(fmt) or FORMATTERS[fmt](data)
        outputs.setdefault(fmt, content)
        path.write_text(content)

    if bundle_path:
        from zipfile import ZipFile

        bundle_path.parent.mkdir(parents=True, exist_ok=True)
        with ZipFile(bundle_path, "w") as archive:
            for fmt in ("json", "sarif", "csv"):
                content = outputs.get(fmt) or FORMATTERS[fmt](data)
                outputs.setdefault(fmt, content)
                archive.writestr(f"report.{fmt}", content)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
