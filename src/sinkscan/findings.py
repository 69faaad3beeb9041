"""Finding records and the per-check emitter."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Sequence, Set, Tuple

from .ast_utils import node_text
from .catalog import SinkPattern
from .risk import RiskLevel, remediation_steps
from .scope import ScopeBoundary, scope_key

MAX_SNIPPET = 200


@dataclass(frozen=True, slots=True)
class SuggestedFix:
    """Advisory replacement text; never applied to the source."""

    label: str
    template: str

    def to_dict(self) -> Dict[str, str]:
        return {"label": self.label, "template": self.template}


@dataclass(frozen=True, slots=True)
class Finding:
    path: Path
    line: int
    column: int
    end_line: int
    end_column: int
    check: str
    vulnerability: str
    risk: RiskLevel
    message: str
    snippet: str
    remediation: Tuple[str, ...] = ()
    alternatives: Tuple[str, ...] = ()
    suggestions: Tuple[SuggestedFix, ...] = ()
    effort: str = ""
    cwe: str = ""

    def sort_key(self) -> tuple:
        return (str(self.path), self.line, self.column, self.check)

    def to_dict(self) -> Dict[str, object]:
        return {
            "path": str(self.path),
            "line": self.line,
            "column": self.column,
            "endLine": self.end_line,
            "endColumn": self.end_column,
            "check": self.check,
            "vulnerability": self.vulnerability,
            "risk": self.risk.value,
            "message": self.message,
            "snippet": self.snippet,
            "remediation": list(self.remediation),
            "alternatives": list(self.alternatives),
            "suggestions": [fix.to_dict() for fix in self.suggestions],
            "effort": self.effort,
            "cwe": self.cwe,
        }


def _snippet(node, source: bytes) -> str:
    text = " ".join(node_text(node, source).split())
    if len(text) > MAX_SNIPPET:
        return text[: MAX_SNIPPET - 3] + "..."
    return text


@dataclass
class FindingEmitter:
    """Builds findings for one check and remembers which scopes it has claimed."""

    check: str
    path: Path = Path("<memory>")
    findings: List[Finding] = field(default_factory=list)
    _claimed: Set[tuple] = field(default_factory=set)

    def reset(self, path: Path) -> None:
        self.path = path
        self.findings = []
        self._claimed = set()

    def claim_scope(self, scope: ScopeBoundary) -> bool:
        key = scope_key(scope)
        if key in self._claimed:
            return False
        self._claimed.add(key)
        return True

    def emit(
        self,
        node,
        source: bytes,
        pattern: SinkPattern,
        risk: RiskLevel,
        message: str,
        suggestions: Sequence[SuggestedFix] = (),
        remediation: Sequence[str] | None = None,
        alternatives: Sequence[str] | None = None,
        effort: str | None = None,
    ) -> Finding:
        start_line, start_col = node.start_point
        end_line, end_col = node.end_point
        finding = Finding(
            path=self.path,
            line=start_line + 1,
            column=start_col + 1,
            end_line=end_line + 1,
            end_column=end_col + 1,
            check=self.check,
            vulnerability=pattern.vulnerability,
            risk=risk,
            message=message,
            snippet=_snippet(node, source),
            remediation=tuple(remediation) if remediation is not None else remediation_steps(pattern),
            alternatives=tuple(alternatives) if alternatives is not None else pattern.safe_alternatives,
            suggestions=tuple(suggestions),
            effort=effort or pattern.effort,
            cwe=pattern.cwe,
        )
        self.findings.append(finding)
        return finding
