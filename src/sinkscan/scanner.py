"""Project-level driver: parse files and run the enabled checks."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Sequence

from .ast_utils import MAX_FILES, iter_source_files, parser_for_extension
from .checks import CHECKS_BY_ID, build_checks
from .config import ScannerConfig, load_config
from .engine import SecurityCheck
from .findings import Finding
from .risk import RiskLevel

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ScanResult:
    """Findings for one project plus the bookkeeping reporters need."""

    project_root: Path
    findings: List[Finding] = field(default_factory=list)
    files_scanned: int = 0
    files_skipped: int = 0
    truncated: bool = False
    checks: List[str] = field(default_factory=list)
    severity: str = "low"

    def counts(self) -> Dict[str, int]:
        counts = {level.value: 0 for level in RiskLevel}
        for finding in self.findings:
            counts[finding.risk.value] += 1
        return counts

    def to_dict(self) -> Dict[str, object]:
        return {
            "projectRoot": str(self.project_root),
            "filesScanned": self.files_scanned,
            "filesSkipped": self.files_skipped,
            "truncated": self.truncated,
            "checks": list(self.checks),
            "severity": self.severity,
            "summary": self.counts(),
            "findings": [finding.to_dict() for finding in self.findings],
        }


def filter_by_severity(findings: Iterable[Finding], severity: str | RiskLevel) -> List[Finding]:
    threshold = severity if isinstance(severity, RiskLevel) else RiskLevel.parse(severity)
    return [finding for finding in findings if finding.risk.rank >= threshold.rank]


def scan_source(
    source: bytes | str,
    extension: str = ".js",
    path: Path | str = Path("<memory>"),
    checks: Sequence[SecurityCheck] | None = None,
) -> List[Finding]:
    """Run ``checks`` (all checks with defaults when omitted) over one source text."""

    if isinstance(source, str):
        source = source.encode("utf-8")
    parser = parser_for_extension(extension.lower())
    if parser is None:
        logger.debug("No parser for extension %s", extension)
        return []
    tree = parser.parse(source)
    if checks is None:
        checks = build_checks()
    findings: List[Finding] = []
    for check in checks:
        findings.extend(check.run(tree, source, Path(path)))
    return sorted(findings, key=Finding.sort_key)


def scan_file(path: Path, checks: Sequence[SecurityCheck] | None = None) -> List[Finding]:
    try:
        source_bytes = path.read_bytes()
    except OSError as exc:
        logger.debug("Skipping unreadable file %s: %s", path, exc)
        return []
    return scan_source(source_bytes, path.suffix, path, checks)


def _checks_for(config: ScannerConfig, only: Iterable[str] | None) -> List[SecurityCheck]:
    enabled = [check_id for check_id in CHECKS_BY_ID if config.is_enabled(check_id)]
    if only:
        wanted = list(only)
        unknown = [check_id for check_id in wanted if check_id not in CHECKS_BY_ID]
        if unknown:
            raise ValueError(f"Unknown check(s): {', '.join(unknown)}")
        enabled = [check_id for check_id in enabled if check_id in wanted]
    options = {check_id: config.options_for(check_id) for check_id in enabled}
    return build_checks(options, enabled)


def scan_project(
    project_root: Path,
    config: ScannerConfig | None = None,
    only: Iterable[str] | None = None,
    max_files: int = MAX_FILES,
) -> ScanResult:
    """Scan every supported file under ``project_root`` in sorted order."""

    if config is None:
        config = load_config(project_root)
    root = config.project_root
    checks = _checks_for(config, only)
    result = ScanResult(
        project_root=root,
        checks=[check.CHECK_ID for check in checks],
        severity=config.severity,
    )
    findings: List[Finding] = []
    for index, path in enumerate(iter_source_files(root, ignore=config.ignore)):
        if index >= max_files:
            logger.warning("Stopping after %d files; remaining files were not scanned", max_files)
            result.truncated = True
            break
        if parser_for_extension(path.suffix.lower()) is None:
            result.files_skipped += 1
            continue
        relative = path.relative_to(root)
        try:
            source_bytes = path.read_bytes()
        except OSError as exc:
            logger.debug("Skipping unreadable file %s: %s", path, exc)
            result.files_skipped += 1
            continue
        logger.debug("Scanning %s", relative)
        findings.extend(scan_source(source_bytes, path.suffix, relative, checks))
        result.files_scanned += 1
    result.findings = filter_by_severity(sorted(findings, key=Finding.sort_key), config.severity)
    return result
