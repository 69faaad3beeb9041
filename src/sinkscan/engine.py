"""Generic sink check: one traversal parameterized by a catalog and a few hooks."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar, Dict, List, Optional, Sequence

from .ast_utils import is_test_file, walk
from .catalog import PatternCatalog, SinkPattern
from .classifier import is_sink_call
from .config import CheckOptions
from .findings import Finding, FindingEmitter, SuggestedFix
from .risk import RiskLevel, classify
from .taint import STATIC, TaintVerdict, resolve

logger = logging.getLogger(__name__)


class SecurityCheck:
    """Base class for all checks.

    Subclasses set ``CHECK_ID``, ``VULNERABILITY`` and ``CATALOG`` and override
    the ``_handle_*`` hooks for the node types they care about. The shared
    :meth:`evaluate` pipeline resolves taint for the sink arguments, drops
    sanitized values, classifies the risk and emits at most one finding.
    """

    CHECK_ID: ClassVar[str] = ""
    DESCRIPTION: ClassVar[str] = ""
    VULNERABILITY: ClassVar[str] = ""
    CATALOG: ClassVar[PatternCatalog] = PatternCatalog()
    HANDLERS: ClassVar[Dict[str, str]] = {
        "call_expression": "_handle_call",
        "new_expression": "_handle_call",
        "assignment_expression": "_handle_assignment",
        "augmented_assignment_expression": "_handle_assignment",
        "member_expression": "_handle_member",
        "jsx_attribute": "_handle_jsx_attribute",
        "regex": "_handle_regex",
    }

    def __init__(self, options: CheckOptions | None = None) -> None:
        self.options = options or CheckOptions.from_dict(self.CHECK_ID)
        self.catalog = self.build_catalog()
        self.emitter = FindingEmitter(self.CHECK_ID)

    def build_catalog(self) -> PatternCatalog:
        return self.CATALOG

    # traversal

    def run(self, tree, source: bytes, path: Path | str = Path("<memory>")) -> List[Finding]:
        path = Path(path)
        self.emitter.reset(path)
        if self.options.ignore_in_tests and is_test_file(path):
            logger.debug("%s: skipping test file %s", self.CHECK_ID, path)
            return []
        self.prepare(tree, source)
        for node in walk(tree.root_node):
            name = self.HANDLERS.get(node.type)
            if name is not None:
                getattr(self, name)(node, source)
        return list(self.emitter.findings)

    def prepare(self, tree, source: bytes) -> None:
        """Per-file setup hook, e.g. import bindings."""

    def _handle_call(self, node, source: bytes) -> None:
        pass

    def _handle_assignment(self, node, source: bytes) -> None:
        pass

    def _handle_member(self, node, source: bytes) -> None:
        pass

    def _handle_jsx_attribute(self, node, source: bytes) -> None:
        pass

    def _handle_regex(self, node, source: bytes) -> None:
        pass

    # shared pipeline

    def match_call(self, node, source: bytes) -> SinkPattern | None:
        """First catalog pattern matching a call/new expression."""

        for pattern in self.catalog:
            if is_sink_call(node, pattern, source):
                return pattern
        return None

    def is_ignored(self, *texts: str | None) -> bool:
        return bool(self.options.ignore) and self.options.ignore.matches(*texts)

    def resolve_arguments(self, sink, arguments: Sequence, source: bytes) -> List[TaintVerdict]:
        return [
            resolve(
                sink,
                argument,
                source,
                trusted_names=self.options.trusted_libraries,
                lookback=self.options.lookback,
            )
            for argument in arguments
        ]

    def evaluate(
        self,
        node,
        source: bytes,
        pattern: SinkPattern,
        arguments: Sequence,
        *,
        structural_risk: bool = False,
        report_static: bool = False,
        message: str | None = None,
        remediation: Sequence[str] | None = None,
        alternatives: Sequence[str] | None = None,
        effort: str | None = None,
    ) -> Optional[Finding]:
        verdicts = self.resolve_arguments(node, arguments, source)
        dynamic = [verdict for verdict in verdicts if verdict.is_dynamic]
        if dynamic and all(verdict.is_sanitized for verdict in dynamic):
            return None
        if not dynamic and not (report_static or structural_risk):
            return None
        verdict = next((v for v in dynamic if v.is_tainted), STATIC)
        risk = classify(pattern, verdict, structural_risk)
        return self.emitter.emit(
            node,
            source,
            pattern,
            risk,
            message or self.describe(pattern, verdict, risk),
            suggestions=self.suggest(pattern, verdict, node, source),
            remediation=remediation,
            alternatives=alternatives,
            effort=effort,
        )

    def describe(self, pattern: SinkPattern, verdict: TaintVerdict, risk: RiskLevel) -> str:
        origin = "user-influenced value" if verdict.is_tainted else "value"
        return f"{pattern.name}: {origin} reaches a {pattern.vulnerability} sink"

    def suggest(self, pattern: SinkPattern, verdict: TaintVerdict, node, source: bytes) -> List[SuggestedFix]:
        return []
