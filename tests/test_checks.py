from __future__ import annotations

from pathlib import Path
import textwrap
import unittest

from sinkscan.ast_utils import JS_PARSER
from sinkscan.checks import (
    CodeInjectionCheck,
    CommandInjectionCheck,
    InsecureCookieCheck,
    OpenRedirectCheck,
    RedosCheck,
    SecurityHeadersCheck,
    XssCheck,
    build_checks,
)
from sinkscan.config import CheckOptions
from sinkscan.risk import RiskLevel
from sinkscan.scanner import scan_source


def _scan(check_cls, code: str, extension: str = ".js", path: str = "app.js", **options):
    check = check_cls(CheckOptions.from_dict(check_cls.CHECK_ID, options))
    return scan_source(textwrap.dedent(code), extension, Path(path), [check])


class CommandInjectionTests(unittest.TestCase):
    def test_template_command_is_critical(self) -> None:
        findings = _scan(
            CommandInjectionCheck,
            """
            const child_process = require('child_process');
            function clone(repoUrl) {
              child_process.exec(`git clone ${repoUrl}`);
            }
            """,
        )
        self.assertEqual(len(findings), 1)
        finding = findings[0]
        self.assertEqual(finding.vulnerability, "command-injection")
        self.assertEqual(finding.risk, RiskLevel.CRITICAL)
        self.assertEqual(finding.line, 4)
        templates = [fix.template for fix in finding.suggestions]
        self.assertIn("execFile('git', ['clone', repoUrl], { shell: false })", templates)
        self.assertEqual(finding.effort, "15-25 minutes")

    def test_literal_calls_and_allow_options(self) -> None:
        code = """
            const cp = require('child_process');
            cp.exec('ls -la');
            cp.spawn('ls', ['-la']);
            """
        risks = [finding.risk for finding in _scan(CommandInjectionCheck, code)]
        self.assertEqual(risks, [RiskLevel.HIGH, RiskLevel.MEDIUM])
        self.assertEqual(
            len(_scan(CommandInjectionCheck, code, allow_literal_arguments=True)),
            1,
        )
        self.assertEqual(
            _scan(
                CommandInjectionCheck,
                code,
                allow_literal_arguments=True,
                allow_literal_array_arguments=True,
            ),
            [],
        )

    def test_aliased_bindings(self) -> None:
        findings = _scan(
            CommandInjectionCheck,
            """
            import { execSync } from 'child_process';
            const { exec } = require('node:child_process');
            execSync(command);
            exec(cmd);
            """,
        )
        self.assertEqual([f.risk for f in findings], [RiskLevel.CRITICAL, RiskLevel.CRITICAL])

    def test_renamed_bindings(self) -> None:
        findings = _scan(
            CommandInjectionCheck,
            """
            const { exec: run } = require('child_process');
            import { execSync as runSync } from 'child_process';
            const { format: fmt } = require('util');
            run(cmd);
            runSync(command);
            fmt(cmd);
            """,
        )
        self.assertEqual([f.risk for f in findings], [RiskLevel.CRITICAL, RiskLevel.CRITICAL])
        self.assertEqual([f.line for f in findings], [5, 6])
        self.assertTrue(findings[0].message.startswith("exec()"))

    def test_sanitized_command_does_not_hide_tainted_arguments(self) -> None:
        findings = _scan(
            CommandInjectionCheck,
            """
            const child_process = require('child_process');
            child_process.execFile(escapeShell(bin), userArgs);
            child_process.execFile(escapeShell(bin), ['--version']);
            """,
        )
        self.assertEqual([f.line for f in findings], [3])
        self.assertEqual(findings[0].risk, RiskLevel.HIGH)

    def test_unrelated_exec_and_sanitized_input(self) -> None:
        findings = _scan(
            CommandInjectionCheck,
            """
            const cp = require('child_process');
            const match = pattern.exec(value);
            cp.exec(escapeShell(cmd));
            """,
        )
        self.assertEqual(findings, [])

    def test_shell_option_escalates_spawn(self) -> None:
        findings = _scan(
            CommandInjectionCheck,
            """
            const cp = require('child_process');
            cp.spawn(cmd, [], { shell: true });
            """,
        )
        self.assertEqual(findings[0].vulnerability, "argument-injection")
        self.assertEqual(findings[0].risk, RiskLevel.CRITICAL)

    def test_additional_methods_use_generic_pattern(self) -> None:
        findings = _scan(
            CommandInjectionCheck,
            """
            const cp = require('child_process');
            cp.runScript(task);
            """,
            additional_sink_methods=["runScript"],
        )
        self.assertEqual(len(findings), 1)
        self.assertEqual(findings[0].risk, RiskLevel.HIGH)
        self.assertEqual(findings[0].remediation[0], "Replace exec() with execFile() or spawn()")

    def test_repeated_run_is_idempotent(self) -> None:
        source = b"const cp = require('child_process');\ncp.exec(`rm ${dir}`);\n"
        tree = JS_PARSER.parse(source)
        check = CommandInjectionCheck()
        first = check.run(tree, source, Path("a.js"))
        second = check.run(tree, source, Path("a.js"))
        self.assertEqual(first, second)
        self.assertEqual(len(first), 1)


class CodeInjectionTests(unittest.TestCase):
    def test_literal_eval_is_exempt(self) -> None:
        self.assertEqual(_scan(CodeInjectionCheck, "eval('2 + 2');"), [])

    def test_dynamic_eval_is_critical(self) -> None:
        findings = _scan(CodeInjectionCheck, "eval(userCode);")
        self.assertEqual(findings[0].risk, RiskLevel.CRITICAL)
        self.assertEqual(findings[0].cwe, "CWE-95")
        self.assertIn("remove eval()", findings[0].message)

    def test_category_drives_remediation(self) -> None:
        findings = _scan(CodeInjectionCheck, "eval('Math.' + fn + '(2)');")
        finding = findings[0]
        self.assertEqual(finding.effort, "5 minutes")
        self.assertEqual(finding.alternatives, ("Math functions or parseInt/parseFloat",))
        self.assertEqual(finding.remediation[0], "Create whitelist of allowed Math functions")
        self.assertIn("refactor to", finding.message)

    def test_non_literal_static_argument_is_high(self) -> None:
        findings = _scan(CodeInjectionCheck, "eval(loadScript());\nconst f = new Function('a', 'return a');")
        self.assertEqual([f.risk for f in findings], [RiskLevel.HIGH, RiskLevel.HIGH])

    def test_strategy_and_additional_functions(self) -> None:
        findings = _scan(
            CodeInjectionCheck,
            "setTimeout(code, 10);",
            strategy="validate",
            additional_eval_functions=["setTimeout"],
        )
        self.assertEqual(findings[0].risk, RiskLevel.CRITICAL)
        self.assertIn("validate", findings[0].message)
        self.assertEqual(findings[0].suggestions[0].label, "Validate before evaluation")


class RedosTests(unittest.TestCase):
    def test_dynamic_pattern_is_high(self) -> None:
        findings = _scan(RedosCheck, "const re = RegExp(userPattern);")
        self.assertEqual(len(findings), 1)
        self.assertEqual(findings[0].vulnerability, "redos")
        self.assertEqual(findings[0].risk, RiskLevel.HIGH)

    def test_static_patterns(self) -> None:
        self.assertEqual(_scan(RedosCheck, "const re = new RegExp('^[a-z]+$');"), [])
        nested = _scan(RedosCheck, "const re = new RegExp('(a+)+$');")
        self.assertEqual([f.risk for f in nested], [RiskLevel.MEDIUM])
        literal = _scan(RedosCheck, "const re = /(a+)+$/;")
        self.assertEqual([f.risk for f in literal], [RiskLevel.MEDIUM])
        self.assertEqual(_scan(RedosCheck, "const re = /^[a-z]+$/;"), [])

    def test_structural_shapes(self) -> None:
        cases = {
            "/(a?)?b/": "Nested Quantifiers",
            "/(x+y)+z/": "Nested Repetition",
            "/(a|b)+c/": "Alternation with Quantifier",
            "/^.*.*=x$/": "Nested Wildcards",
            "/(ab){2,}-(cd){3,}/": "Multiple Repetition Groups",
            "/(a+){2}/": "Nested Quantifier Pattern",
        }
        for literal, label in cases.items():
            findings = _scan(RedosCheck, f"const re = {literal};")
            self.assertEqual([f.risk for f in findings], [RiskLevel.MEDIUM], literal)
            self.assertIn(label, findings[0].message, literal)

    def test_shape_guidance_reaches_the_finding(self) -> None:
        findings = _scan(RedosCheck, "const re = new RegExp('(a|aa)+$');")
        self.assertEqual(len(findings), 1)
        finding = findings[0]
        self.assertIn("Alternation with Quantifier", finding.message)
        self.assertEqual(finding.remediation[0], "Use character classes instead of alternation when possible")
        self.assertIn("Create a whitelist of allowed regex patterns", finding.remediation)
        self.assertEqual(finding.alternatives, ("Character class instead of alternation",))

    def test_dynamic_nested_pattern_is_critical(self) -> None:
        findings = _scan(RedosCheck, "const re = new RegExp(`^(${prefix}+)+$`);")
        self.assertEqual(findings[0].risk, RiskLevel.CRITICAL)

    def test_oversized_literal(self) -> None:
        long_pattern = "a" * 120
        findings = _scan(RedosCheck, f"const re = new RegExp('{long_pattern}');")
        self.assertEqual([f.risk for f in findings], [RiskLevel.MEDIUM])
        self.assertEqual(
            _scan(RedosCheck, f"const re = new RegExp('{long_pattern}');", max_pattern_length=200),
            [],
        )


class XssTests(unittest.TestCase):
    def test_trusted_sanitizer_intercepts(self) -> None:
        self.assertEqual(_scan(XssCheck, "el.innerHTML = DOMPurify.sanitize(html);"), [])

    def test_sanitize_anywhere_in_the_name(self) -> None:
        for call in ("customSanitize(html)", "htmlSanitizer(html)", "utils.cleanAndSanitize(html)", "purifyMarkup(html)"):
            self.assertEqual(_scan(XssCheck, f"el.innerHTML = {call};"), [], call)
        self.assertEqual(len(_scan(XssCheck, "el.innerHTML = htmlEscaper(html);")), 1)

    def test_sanitized_argument_does_not_hide_tainted_one(self) -> None:
        findings = _scan(XssCheck, "document.write(DOMPurify.sanitize(a), userHtml);")
        self.assertEqual([f.risk for f in findings], [RiskLevel.CRITICAL])
        self.assertEqual(_scan(XssCheck, "document.write(DOMPurify.sanitize(a), '<hr>');"), [])

    def test_dynamic_html_is_critical(self) -> None:
        findings = _scan(
            XssCheck,
            """
            el.innerHTML = html;
            document.write(content);
            el.insertAdjacentHTML('beforeend', markup);
            el.innerHTML = '<b>static</b>';
            """,
        )
        self.assertEqual([f.risk for f in findings], [RiskLevel.CRITICAL] * 3)
        self.assertEqual(findings[0].suggestions[0].template, "el.textContent = html")

    def test_jsx_dangerously_set_inner_html(self) -> None:
        findings = _scan(
            XssCheck,
            "const View = ({ html }) => <div dangerouslySetInnerHTML={{ __html: html }} />;",
            extension=".jsx",
            path="View.jsx",
        )
        self.assertEqual(len(findings), 1)
        self.assertEqual(findings[0].risk, RiskLevel.CRITICAL)

    def test_ignore_patterns_and_trusted_libraries(self) -> None:
        self.assertEqual(
            _scan(XssCheck, "preview.innerHTML = html;", ignore_patterns=["^preview$"]),
            [],
        )
        code = "el.innerHTML = myCleaner.clean(html);"
        self.assertEqual(len(_scan(XssCheck, code)), 1)
        self.assertEqual(_scan(XssCheck, code, trusted_libraries=["myCleaner"]), [])


class OpenRedirectTests(unittest.TestCase):
    def test_dynamic_redirects(self) -> None:
        findings = _scan(
            OpenRedirectCheck,
            """
            function go(req, res) {
              res.redirect(req.query.next);
            }
            window.location.href = target;
            location.replace(next);
            res.redirect('/home');
            """,
        )
        self.assertEqual([f.risk for f in findings], [RiskLevel.HIGH] * 3)
        self.assertEqual(findings[0].cwe, "CWE-601")

    def test_validation_window(self) -> None:
        validated = """
            function go(req, res) {
              const target = req.query.next;
              if (!ALLOWED.includes(target)) { return res.status(400).end(); }
              res.redirect(target);
            }
            """
        self.assertEqual(_scan(OpenRedirectCheck, validated), [])
        too_far = """
            function go(req, res) {
              const target = req.query.next;
              if (!ALLOWED.includes(target)) { return res.status(400).end(); }
              audit();
              log();
              touch();
              count();
              track();
              res.redirect(target);
            }
            """
        self.assertEqual(len(_scan(OpenRedirectCheck, too_far)), 1)

    def test_skips_test_files_by_default(self) -> None:
        code = "res.redirect(req.query.next);"
        self.assertEqual(_scan(OpenRedirectCheck, code, path="routes/app.test.js"), [])
        self.assertEqual(
            len(_scan(OpenRedirectCheck, code, path="routes/app.test.js", ignore_in_tests=False)),
            1,
        )


class InsecureCookieTests(unittest.TestCase):
    def test_document_cookie_writes(self) -> None:
        findings = _scan(
            InsecureCookieCheck,
            """
            document.cookie = 'theme=dark';
            document.cookie = `session=${token}`;
            const current = document.cookie;
            """,
        )
        self.assertEqual([f.risk for f in findings], [RiskLevel.MEDIUM, RiskLevel.HIGH])

    def test_cookie_reads_when_disallowed(self) -> None:
        findings = _scan(InsecureCookieCheck, "const current = document.cookie;", allow_reading=False)
        self.assertEqual([f.risk for f in findings], [RiskLevel.MEDIUM])

    def test_response_cookie_flags(self) -> None:
        findings = _scan(
            InsecureCookieCheck,
            """
            res.cookie('session', token);
            res.cookie('session', token, { httpOnly: true });
            res.cookie('session', token, { httpOnly: true, secure: true, sameSite: 'strict' });
            """,
        )
        self.assertEqual(len(findings), 2)
        self.assertEqual(findings[0].risk, RiskLevel.HIGH)
        self.assertEqual(findings[0].message, "Cookie set without httpOnly, secure, sameSite")
        self.assertEqual(findings[1].message, "Cookie set without secure, sameSite")
        self.assertEqual(
            findings[0].suggestions[0].label,
            'Set httpOnly: true, secure: true, sameSite: "strict"',
        )


class SecurityHeadersTests(unittest.TestCase):
    def test_single_header_lists_missing(self) -> None:
        findings = _scan(
            SecurityHeadersCheck,
            """
            function handler(req, res) {
              res.setHeader('X-Frame-Options', 'DENY');
              res.end('ok');
            }
            """,
        )
        self.assertEqual(len(findings), 1)
        message = findings[0].message
        self.assertIn("Content-Security-Policy", message)
        self.assertIn("X-Content-Type-Options", message)
        self.assertNotIn("X-Frame-Options", message)
        self.assertEqual(findings[0].risk, RiskLevel.HIGH)

    def test_one_finding_per_scope(self) -> None:
        findings = _scan(
            SecurityHeadersCheck,
            """
            function a(req, res) {
              res.setHeader('X-Frame-Options', 'DENY');
              res.header('Cache-Control', 'no-store');
              const inner = () => { res.set('content-security-policy', "default-src 'self'"); };
            }
            function b(req, res) {
              res.setHeader('Content-Security-Policy', "default-src 'self'");
              res.setHeader('x-frame-options', 'DENY');
              res.setHeader('X-Content-Type-Options', 'nosniff');
            }
            """,
        )
        # a() and the arrow function are separate scopes; b() is complete.
        self.assertEqual(len(findings), 2)
        self.assertIn("Content-Security-Policy", findings[0].message)
        self.assertNotIn("Content-Security-Policy", findings[1].message)

    def test_helmet_and_required_headers(self) -> None:
        code = """
            app.use(helmet());
            function handler(req, res) { res.setHeader('X-Frame-Options', 'DENY'); }
            """
        self.assertEqual(_scan(SecurityHeadersCheck, code), [])
        findings = _scan(
            SecurityHeadersCheck,
            "function h(req, res) { res.setHeader('X-Frame-Options', 'DENY'); }",
            required_headers=["X-Frame-Options", "Strict-Transport-Security"],
        )
        self.assertEqual(findings[0].message, "Missing security headers: Strict-Transport-Security")


class RegistryTests(unittest.TestCase):
    def test_build_checks(self) -> None:
        checks = build_checks()
        self.assertEqual(len(checks), 7)
        self.assertEqual([c.CHECK_ID for c in build_checks(enabled=["xss", "redos"])], ["redos", "xss"])
        with self.assertRaises(ValueError):
            build_checks(enabled=["nope"])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
