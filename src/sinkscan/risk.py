"""Risk classification and remediation checklists."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple

from .catalog import SinkPattern
from .taint import TaintVerdict


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _RANK[self]

    @classmethod
    def parse(cls, value: str) -> "RiskLevel":
        try:
            return cls(str(value).lower())
        except ValueError as exc:
            raise ValueError(f"Unknown risk level: {value!r}") from exc


_RANK = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.CRITICAL: 3,
}


def classify(pattern: SinkPattern, verdict: TaintVerdict, structural_risk: bool = False) -> RiskLevel:
    if verdict.is_tainted and (pattern.dangerous or structural_risk):
        return RiskLevel.CRITICAL
    if pattern.dangerous or verdict.is_tainted:
        return RiskLevel.HIGH
    return RiskLevel.MEDIUM


GENERIC_STEPS: Tuple[str, ...] = (
    "Identify the specific need behind this call",
    "Choose the safest API that covers that need",
    "Use argument arrays or parameterized APIs instead of string interpolation",
    "Add comprehensive input validation",
    "Test with malicious inputs",
)

REMEDIATION_BY_CLASS: Dict[str, Tuple[str, ...]] = {
    "command-injection": (
        "Replace exec() with execFile() or spawn()",
        "Split command and arguments into separate array elements",
        "Use {shell: false} option to prevent shell interpretation",
        "Validate and sanitize all user inputs",
        "Consider using execa library for better security",
    ),
    "argument-injection": (
        "Ensure first argument is a safe, validated command path",
        "Pass arguments as separate array elements",
        "Use {shell: false} to prevent shell injection",
        "Validate each argument against an allow-list",
        "Consider using execa or cross-spawn",
    ),
    "path-injection": (
        "Resolve executable and module paths from an allow-list",
        "Reject paths containing traversal sequences",
        "Pass arguments as separate array elements",
    ),
    "code-injection": (
        "Remove eval() or Function() and call the intended code directly",
        "Parse data with JSON.parse() instead of evaluating it",
        "Use a lookup table for dynamic dispatch",
        "Validate any value that must stay dynamic",
    ),
    "redos": (
        "Use pre-defined regex patterns instead of building them from input",
        "Escape user input before using it in a pattern",
        "Validate pattern length and character set",
        "Use a safe regex engine such as re2 for untrusted patterns",
    ),
    "xss": (
        "Use textContent instead of innerHTML for plain text",
        "Sanitize HTML with DOMPurify before inserting it",
        "Prefer framework rendering over raw HTML injection",
        "Apply a Content-Security-Policy as defense in depth",
    ),
    "open-redirect": (
        "Validate redirect targets against an allow-list of domains",
        "Prefer relative paths for in-app redirects",
        "Parse the URL and compare its hostname before redirecting",
    ),
    "missing-header": (
        "Set the missing security headers on every response",
        "Use helmet() to apply a secure default header set",
    ),
    "insecure-cookie": (
        "Set httpOnly: true so scripts cannot read the cookie",
        "Set secure: true so the cookie is only sent over HTTPS",
        'Set sameSite: "strict" or "lax" to limit cross-site sending',
        "Avoid storing sensitive data in script-readable cookies",
    ),
}


def remediation_steps(pattern: SinkPattern) -> Tuple[str, ...]:
    """Pattern steps followed by the class checklist, without duplicates."""

    base = REMEDIATION_BY_CLASS.get(pattern.vulnerability, GENERIC_STEPS)
    merged = []
    for step in (*pattern.remediation, *base):
        if step not in merged:
            merged.append(step)
    return tuple(merged)
