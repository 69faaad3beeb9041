"""Output renderers for scan reports."""

from __future__ import annotations

import json
from typing import Dict, List

from .checks import CHECKS_BY_ID

SARIF_SCHEMA = "https://json.schemastore.org/sarif-2.1.0.json"
SARIF_VERSION = "2.1.0"
TOOL_NAME = "SinkScan"

SEVERITY_TO_SARIF_LEVEL = {
    "critical": "error",
    "high": "error",
    "medium": "warning",
    "low": "note",
}
CSV_COLUMNS = ("risk", "check", "vulnerability", "cwe", "path", "line", "column", "message", "snippet")


def render_json(report: Dict[str, object]) -> str:
    return json.dumps(report, indent=2)


def _sarif_location(finding: Dict[str, object]) -> Dict[str, object]:
    return {
        "physicalLocation": {
            "artifactLocation": {"uri": str(finding.get("path", "")).replace("\\", "/")},
            "region": {
                "startLine": finding.get("line", 1),
                "startColumn": finding.get("column", 1),
                "endLine": finding.get("endLine", finding.get("line", 1)),
                "endColumn": finding.get("endColumn", finding.get("column", 1)),
                "snippet": {"text": finding.get("snippet", "")},
            },
        }
    }


def _sarif_rules(report: Dict[str, object]) -> List[Dict[str, object]]:
    rules = []
    for check_id in report.get("checks", []):
        check = CHECKS_BY_ID.get(check_id)
        if check is None:
            continue
        rules.append(
            {
                "id": check_id,
                "name": check.__name__,
                "shortDescription": {"text": check.DESCRIPTION},
                "properties": {"vulnerability": check.VULNERABILITY},
            }
        )
    return rules


def _sarif_results(report: Dict[str, object]) -> List[Dict[str, object]]:
    results = []
    for finding in report.get("findings", []):
        risk = str(finding.get("risk", "medium"))
        results.append(
            {
                "ruleId": finding.get("check"),
                "level": SEVERITY_TO_SARIF_LEVEL.get(risk, "warning"),
                "message": {"text": finding.get("message", "")},
                "locations": [_sarif_location(finding)],
                "properties": {
                    "risk": risk,
                    "vulnerability": finding.get("vulnerability"),
                    "cwe": finding.get("cwe"),
                    "effort": finding.get("effort"),
                    "remediation": finding.get("remediation", []),
                    "alternatives": finding.get("alternatives", []),
                },
            }
        )
    return results


def render_sarif(report: Dict[str, object]) -> str:
    sarif = {
        "$schema": SARIF_SCHEMA,
        "version": SARIF_VERSION,
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": TOOL_NAME,
                        "rules": _sarif_rules(report),
                    }
                },
                "results": _sarif_results(report),
                "invocations": [
                    {
                        "executionSuccessful": True,
                        "properties": {
                            "filesScanned": report.get("filesScanned", 0),
                            "truncated": report.get("truncated", False),
                            "summary": report.get("summary", {}),
                        },
                    }
                ],
            }
        ],
    }
    return json.dumps(sarif, indent=2)


def render_human(report: Dict[str, object]) -> str:
    lines = []
    lines.append(f"Project: {report.get('projectRoot')}")
    lines.append(f"Files scanned: {report.get('filesScanned', 0)}")
    summary = report.get("summary", {})
    counts = ", ".join(f"{level}={summary.get(level, 0)}" for level in ("critical", "high", "medium", "low"))
    findings = report.get("findings", [])
    lines.append(f"Findings: {len(findings)} ({counts})")
    for finding in findings:
        lines.append(
            f"- [{str(finding.get('risk', '')).upper()}] {finding.get('path')}:{finding.get('line')}:"
            f"{finding.get('column')} {finding.get('check')}: {finding.get('message')}"
        )
        if finding.get("snippet"):
            lines.append(f"    code: {finding['snippet']}")
        alternatives = finding.get("alternatives") or []
        if alternatives:
            lines.append(f"    use instead: {', '.join(alternatives)}")
        steps = finding.get("remediation") or []
        if steps:
            lines.append(f"    fix: {' → '.join(steps[:3])}")
        if finding.get("effort"):
            lines.append(f"    effort: {finding['effort']}")
    return "\n".join(lines)


def render_csv(report: Dict[str, object]) -> str:
    rows = [",".join(CSV_COLUMNS)]
    for finding in report.get("findings", []):
        row = [str(finding.get(column, "")) for column in CSV_COLUMNS]
        rows.append(",".join(value.replace(",", ";").replace("\n", " ") for value in row))
    return "\n".join(rows)
