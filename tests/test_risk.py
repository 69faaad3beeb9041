from __future__ import annotations

from pathlib import Path
import unittest

from sinkscan.ast_utils import JS_PARSER, walk
from sinkscan.catalog import (
    COMMAND_PATTERNS,
    EVAL_CATEGORIES,
    REGEX_LITERAL_PATTERN,
    generic_pattern,
)
from sinkscan.findings import FindingEmitter
from sinkscan.risk import GENERIC_STEPS, RiskLevel, classify, remediation_steps
from sinkscan.scope import enclosing_scope
from sinkscan.taint import STATIC, TaintVerdict

TAINTED = TaintVerdict(True, False, None)
SANITIZED = TaintVerdict(True, True, "DOMPurify.sanitize(html)")


class RiskClassifierTests(unittest.TestCase):
    def test_classification_table(self) -> None:
        exec_pattern = COMMAND_PATTERNS.lookup("exec")
        spawn_pattern = COMMAND_PATTERNS.lookup("spawn")
        self.assertEqual(classify(exec_pattern, TAINTED), RiskLevel.CRITICAL)
        self.assertEqual(classify(exec_pattern, STATIC), RiskLevel.HIGH)
        self.assertEqual(classify(spawn_pattern, TAINTED), RiskLevel.HIGH)
        self.assertEqual(classify(spawn_pattern, STATIC), RiskLevel.MEDIUM)
        self.assertEqual(classify(spawn_pattern, SANITIZED), RiskLevel.MEDIUM)
        self.assertEqual(classify(spawn_pattern, TAINTED, structural_risk=True), RiskLevel.CRITICAL)
        self.assertEqual(classify(REGEX_LITERAL_PATTERN, STATIC, structural_risk=True), RiskLevel.MEDIUM)

    def test_generic_pattern_fallback(self) -> None:
        pattern = generic_pattern("command-injection", "forkSync")
        self.assertFalse(pattern.dangerous)
        self.assertEqual(classify(pattern, STATIC), RiskLevel.MEDIUM)
        self.assertEqual(classify(pattern, TAINTED), RiskLevel.HIGH)
        self.assertEqual(remediation_steps(generic_pattern("unknown")), GENERIC_STEPS)

    def test_remediation_merges_without_duplicates(self) -> None:
        steps = remediation_steps(COMMAND_PATTERNS.lookup("exec"))
        self.assertEqual(len(steps), len(set(steps)))
        self.assertEqual(steps[0], "Replace exec() with execFile() or spawn()")
        self.assertIn("Consider using execa library for better security", steps)

    def test_catalog_first_match_wins(self) -> None:
        self.assertEqual(EVAL_CATEGORIES.lookup("JSON.parse(raw)").name, "json")
        self.assertEqual(EVAL_CATEGORIES.lookup("Math.max(a, b)").name, "math")
        self.assertEqual(EVAL_CATEGORIES.lookup("obj.prop").name, "object")
        self.assertIsNone(EVAL_CATEGORIES.lookup("userCode"))
        self.assertIsNone(COMMAND_PATTERNS.lookup("execa"))

    def test_risk_level_parse(self) -> None:
        self.assertIs(RiskLevel.parse("HIGH"), RiskLevel.HIGH)
        self.assertGreater(RiskLevel.CRITICAL.rank, RiskLevel.LOW.rank)
        with self.assertRaises(ValueError):
            RiskLevel.parse("severe")


class FindingEmitterTests(unittest.TestCase):
    def test_claim_scope_once_per_traversal(self) -> None:
        source = b"function a() { x(); y(); }\nfunction b() { z(); }"
        tree = JS_PARSER.parse(source)
        calls = [node for node in walk(tree.root_node) if node.type == "call_expression"]
        emitter = FindingEmitter("security-headers")
        self.assertTrue(emitter.claim_scope(enclosing_scope(calls[0])))
        self.assertFalse(emitter.claim_scope(enclosing_scope(calls[1])))
        self.assertTrue(emitter.claim_scope(enclosing_scope(calls[2])))
        emitter.reset(Path("other.js"))
        self.assertTrue(emitter.claim_scope(enclosing_scope(calls[0])))

    def test_emit_builds_finding(self) -> None:
        source = b"cp.exec(cmd);"
        tree = JS_PARSER.parse(source)
        call = next(node for node in walk(tree.root_node) if node.type == "call_expression")
        emitter = FindingEmitter("command-injection", Path("app.js"))
        pattern = COMMAND_PATTERNS.lookup("exec")
        finding = emitter.emit(call, source, pattern, RiskLevel.CRITICAL, "message")
        self.assertEqual((finding.line, finding.column), (1, 1))
        self.assertEqual(finding.snippet, "cp.exec(cmd)")
        self.assertEqual(finding.cwe, "CWE-78")
        self.assertEqual(finding.alternatives, ("execFile", "spawn"))
        payload = finding.to_dict()
        self.assertEqual(payload["risk"], "critical")
        self.assertEqual(payload["path"], "app.js")
        self.assertEqual(emitter.findings, [finding])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
