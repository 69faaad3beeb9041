"""Concrete checks: thin configurations of :class:`SecurityCheck`."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Type

from .ast_utils import (
    FUNCTION_TYPES,
    STRING_TYPES,
    call_arguments,
    call_target,
    callee_node,
    collect_imported_members,
    collect_module_bindings,
    identifier_name,
    node_key,
    node_text,
    string_literal_value,
    unwrap,
    walk,
)
from .catalog import (
    COMMAND_METHODS,
    COMMAND_PATTERNS,
    COOKIE_PATTERNS,
    EVAL_CATEGORIES,
    EVAL_PATTERNS,
    HEADER_PATTERNS,
    LITERAL_ARRAY_METHODS,
    LITERAL_STRING_METHODS,
    REDIRECT_PATTERNS,
    REDOS_SHAPES,
    REGEX_LITERAL_PATTERN,
    REGEXP_PATTERNS,
    XSS_PATTERNS,
    PatternCatalog,
    SinkPattern,
    extra_name_patterns,
    generic_pattern,
)
from .classifier import callee_name, has_only_literal_arguments, is_literal
from .config import CheckOptions
from .engine import SecurityCheck
from .findings import SuggestedFix
from .risk import RiskLevel, remediation_steps
from .scope import enclosing_scope
from .taint import TaintVerdict

CHILD_PROCESS_MODULES = {"child_process", "node:child_process"}
RESPONSE_ROOTS = {"res", "response", "reply", "ctx", "context"}
GLOBAL_OBJECTS = {"window", "globalThis", "global", "self"}
LOCATION_TARGETS = {
    "location",
    "location.href",
    "window.location",
    "window.location.href",
    "document.location",
    "document.location.href",
}

_TEMPLATE_SLOT = re.compile(r"\$\{\s*([^{}]+?)\s*\}")


def _root(name: str | None) -> str | None:
    if not name:
        return None
    return name.split(".", 1)[0]


class CommandInjectionCheck(SecurityCheck):
    CHECK_ID = "command-injection"
    DESCRIPTION = "child_process calls whose command or arguments are built from runtime values"
    VULNERABILITY = "command-injection"
    CATALOG = COMMAND_PATTERNS

    def __init__(self, options: CheckOptions | None = None) -> None:
        super().__init__(options)
        self.methods = set(COMMAND_METHODS) | set(self.options.additional_sink_methods)
        self._aliases: set[str] = set()
        self._bound_functions: Dict[str, str] = {}

    def prepare(self, tree, source: bytes) -> None:
        bindings = collect_module_bindings(tree, source)
        self._aliases = {alias for alias, module in bindings.items() if module in CHILD_PROCESS_MODULES}
        members = collect_imported_members(tree, source)
        bound = {alias: members.get(alias, alias) for alias in self._aliases}
        self._bound_functions = {alias: name for alias, name in bound.items() if name in self.methods}

    def _method_name(self, node, source: bytes) -> str | None:
        func = unwrap(callee_node(node))
        if func is not None and func.type == "identifier":
            # const { exec: run } = require('child_process'); run(cmd)
            bound = self._bound_functions.get(node_text(func, source))
            if bound:
                return bound
        return callee_name(node, source)

    def _is_child_process(self, node, source: bytes) -> bool:
        func = unwrap(callee_node(node))
        if func is None:
            return False
        if func.type == "identifier":
            return node_text(func, source) in self._bound_functions
        if func.type != "member_expression":
            return False
        obj = unwrap(func.child_by_field_name("object"))
        if obj is not None and obj.type == "call_expression":
            # require('child_process').exec(...)
            _, required = call_target(obj, source)
            args = call_arguments(obj)
            return required == "require" and bool(args) and string_literal_value(args[0], source) in CHILD_PROCESS_MODULES
        name = identifier_name(obj, source)
        return name == "child_process" or name in self._aliases

    def _handle_call(self, node, source: bytes) -> None:
        if node.type != "call_expression":
            return
        method = self._method_name(node, source)
        if method not in self.methods or not self._is_child_process(node, source):
            return
        if self.is_ignored(node_text(node, source)):
            return
        args = call_arguments(node)
        if not args:
            return
        if has_only_literal_arguments(args):
            if method in LITERAL_STRING_METHODS and self.options.allow_literal_arguments:
                return
            if method in LITERAL_ARRAY_METHODS and self.options.allow_literal_array_arguments:
                return
        pattern = self.catalog.lookup(method) or generic_pattern(self.VULNERABILITY, method)
        relevant = args[:1] if method in LITERAL_STRING_METHODS else args[:2]
        self.evaluate(
            node,
            source,
            pattern,
            relevant,
            structural_risk=_enables_shell(args, source),
            report_static=True,
        )

    def describe(self, pattern: SinkPattern, verdict: TaintVerdict, risk: RiskLevel) -> str:
        if verdict.is_tainted:
            return f"{pattern.matcher}() runs a command built from user-influenced input ({pattern.vulnerability})"
        return f"{pattern.matcher}() runs a shell command; prefer argument arrays and {{shell: false}}"

    def suggest(self, pattern: SinkPattern, verdict: TaintVerdict, node, source: bytes) -> List[SuggestedFix]:
        args = call_arguments(node)
        first = unwrap(args[0]) if args else None
        sync = pattern.matcher.endswith("Sync")
        exec_file = "execFileSync" if sync else "execFile"
        spawn = "spawnSync" if sync else "spawn"
        fixes = [
            SuggestedFix("Use execFile", _argv_template(exec_file, first, source)),
            SuggestedFix("Use spawn", _argv_template(spawn, first, source)),
            SuggestedFix(
                "Use a safer process library",
                "execa / zx / cross-spawn with arguments passed as an array",
            ),
            SuggestedFix(
                "Validate input",
                "if (!/^[\\w.\\/:-]+$/.test(value)) throw new Error('Invalid argument');",
            ),
            SuggestedFix("Disable the shell", "{ shell: false }"),
        ]
        return fixes


def _enables_shell(args, source: bytes) -> bool:
    for arg in args:
        arg = unwrap(arg)
        if arg is None or arg.type != "object":
            continue
        for pair in arg.named_children:
            if pair.type != "pair":
                continue
            key = node_text(pair.child_by_field_name("key"), source).strip("'\"")
            value = unwrap(pair.child_by_field_name("value"))
            if key == "shell" and value is not None and value.type in {"true", "string"}:
                return True
    return False


def _argv_template(function: str, command, source: bytes) -> str:
    fallback = f"{function}(command, [arg1, arg2], {{ shell: false }})"
    if command is None or command.type not in STRING_TYPES:
        return fallback
    tokens = node_text(command, source)[1:-1].split()
    if not tokens or "${" in tokens[0]:
        return fallback
    rendered = []
    for token in tokens[1:]:
        slot = _TEMPLATE_SLOT.fullmatch(token)
        if slot:
            rendered.append(slot.group(1))
        elif "${" in token:
            rendered.append(f"`{token}`")
        else:
            rendered.append(f"'{token}'")
    return f"{function}('{tokens[0]}', [{', '.join(rendered)}], {{ shell: false }})"


class CodeInjectionCheck(SecurityCheck):
    CHECK_ID = "code-injection"
    DESCRIPTION = "eval() and the Function constructor applied to non-literal code"
    VULNERABILITY = "code-injection"
    CATALOG = EVAL_PATTERNS

    def __init__(self, options: CheckOptions | None = None) -> None:
        super().__init__(options)
        self._category: SinkPattern | None = None

    def build_catalog(self) -> PatternCatalog:
        template = EVAL_PATTERNS.lookup("eval")
        return self.CATALOG.extend(extra_name_patterns(self.options.additional_eval_functions, template))

    def _sink_name(self, node, source: bytes) -> str | None:
        obj, method = call_target(node, source)
        if obj is not None and obj not in GLOBAL_OBJECTS:
            return None
        if node.type == "new_expression":
            return method if method == "Function" else None
        return method

    def _handle_call(self, node, source: bytes) -> None:
        name = self._sink_name(node, source)
        pattern = self.catalog.lookup(name)
        if pattern is None:
            return
        args = call_arguments(node)
        if not args:
            return
        if self.is_ignored(node_text(node, source)):
            return
        if name != "Function" and all(is_literal(arg) for arg in args):
            return
        category = None
        if name == "eval":
            category = EVAL_CATEGORIES.lookup(" ".join(node_text(arg, source) for arg in args))
        self._category = category
        self.evaluate(
            node,
            source,
            pattern,
            args,
            report_static=True,
            remediation=self._remediation(pattern, category),
            alternatives=category.safe_alternatives if category else None,
            effort=category.effort if category else None,
        )

    def _remediation(self, pattern: SinkPattern, category: SinkPattern | None):
        if category is None:
            return None
        steps = list(category.remediation)
        for step in pattern.remediation:
            if step not in steps:
                steps.append(step)
        return steps

    def _strategy(self) -> str:
        strategy = self.options.strategy
        if strategy == "auto":
            return "refactor" if self._category is not None else "remove"
        return strategy

    def describe(self, pattern: SinkPattern, verdict: TaintVerdict, risk: RiskLevel) -> str:
        source_text = "user-influenced code" if verdict.is_tainted else "non-literal code"
        strategy = self._strategy()
        if strategy == "remove":
            advice = f"remove {pattern.matcher}() and call the intended code directly"
        elif strategy == "validate":
            advice = "validate the input against an allow-list before evaluating it"
        else:
            category = self._category
            target = category.safe_alternatives[0] if category else pattern.safe_alternatives[0]
            advice = f"refactor to {target}"
        return f"{pattern.matcher}() evaluates {source_text}; {advice}"

    def suggest(self, pattern: SinkPattern, verdict: TaintVerdict, node, source: bytes) -> List[SuggestedFix]:
        strategy = self._strategy()
        category = self._category
        if strategy == "remove":
            return [SuggestedFix("Remove dynamic evaluation", "// call the intended function directly")]
        if strategy == "validate":
            return [
                SuggestedFix(
                    "Validate before evaluation",
                    "if (!ALLOWED_EXPRESSIONS.includes(code)) throw new Error('Rejected expression');",
                )
            ]
        good = category.example[1] if category else pattern.example[1]
        label = category.safe_alternatives[0] if category else pattern.safe_alternatives[0]
        return [SuggestedFix(f"Refactor to {label}", good)]


class RedosCheck(SecurityCheck):
    CHECK_ID = "redos"
    DESCRIPTION = "Regular expressions built from runtime values or prone to catastrophic backtracking"
    VULNERABILITY = "redos"
    CATALOG = REGEXP_PATTERNS

    def __init__(self, options: CheckOptions | None = None) -> None:
        super().__init__(options)
        self._shape: SinkPattern | None = None

    def _handle_call(self, node, source: bytes) -> None:
        obj, method = call_target(node, source)
        if method != "RegExp" or (obj is not None and obj not in GLOBAL_OBJECTS):
            return
        pattern = self.match_call(node, source) or generic_pattern(self.VULNERABILITY, "RegExp")
        args = call_arguments(node)
        if not args:
            return
        first = unwrap(args[0])
        if self.is_ignored(node_text(first, source)):
            return
        literal = string_literal_value(first, source)
        shape = REDOS_SHAPES.lookup(literal if literal is not None else node_text(first, source))
        too_long = literal is not None and len(literal) > self.options.max_pattern_length
        self._report(node, source, pattern, [first], shape, too_long)

    def _handle_regex(self, node, source: bytes) -> None:
        body = node_text(node.child_by_field_name("pattern"), source)
        if self.is_ignored(body):
            return
        shape = REDOS_SHAPES.lookup(body)
        too_long = len(body) > self.options.max_pattern_length
        if shape is None and not too_long:
            return
        self._report(node, source, REGEX_LITERAL_PATTERN, [], shape, too_long)

    def _report(self, node, source: bytes, pattern: SinkPattern, arguments, shape, too_long: bool) -> None:
        self._shape = shape
        self.evaluate(
            node,
            source,
            pattern,
            arguments,
            structural_risk=shape is not None,
            report_static=too_long,
            remediation=_shape_remediation(pattern, shape),
            alternatives=shape.safe_alternatives if shape else None,
            effort=shape.effort if shape else None,
        )

    def describe(self, pattern: SinkPattern, verdict: TaintVerdict, risk: RiskLevel) -> str:
        shape = self._shape
        if verdict.is_tainted and shape is not None:
            return f"{pattern.name} combines a user-influenced pattern with {shape.name}"
        if verdict.is_tainted:
            return f"{pattern.name} compiles a user-influenced pattern"
        if shape is not None:
            return f"{pattern.name} contains {shape.name} and may backtrack catastrophically"
        return f"{pattern.name} is longer than {self.options.max_pattern_length} characters"

    def suggest(self, pattern: SinkPattern, verdict: TaintVerdict, node, source: bytes) -> List[SuggestedFix]:
        return [
            SuggestedFix("Use a static regex", "const PATTERNS = { email: /^[^@\\s]+@[^@\\s]+$/ };"),
            SuggestedFix("Validate input", "if (value.length > 100 || !/^[\\w-]+$/.test(value)) throw new Error('Invalid pattern');"),
            SuggestedFix("Use a safe regex engine", "const RE2 = require('re2'); new RE2(pattern)  // or check with safe-regex"),
            SuggestedFix("Bound execution time", "run the match in a worker with a timeout"),
            SuggestedFix("Escape input", "value.replace(/[.*+?^${}()|[\\]\\\\]/g, '\\\\$&')"),
        ]


def _shape_remediation(pattern: SinkPattern, shape: SinkPattern | None):
    if shape is None:
        return None
    steps = list(shape.remediation)
    for step in remediation_steps(pattern):
        if step not in steps:
            steps.append(step)
    return steps


class XssCheck(SecurityCheck):
    CHECK_ID = "xss"
    DESCRIPTION = "Unsanitized HTML written into the DOM"
    VULNERABILITY = "xss"
    CATALOG = XSS_PATTERNS

    def _handle_assignment(self, node, source: bytes) -> None:
        left = unwrap(node.child_by_field_name("left"))
        if left is None or left.type != "member_expression":
            return
        prop = identifier_name(left.child_by_field_name("property"), source)
        if prop not in {"innerHTML", "outerHTML"}:
            return
        right = node.child_by_field_name("right")
        obj = identifier_name(left.child_by_field_name("object"), source)
        if self.is_ignored(obj, node_text(left, source), node_text(right, source)):
            return
        self.evaluate(node, source, self.catalog.lookup(prop), [right])

    def _handle_call(self, node, source: bytes) -> None:
        obj, method = call_target(node, source)
        args = call_arguments(node)
        if method == "insertAdjacentHTML" and obj is not None and len(args) >= 2:
            value = [args[1]]
        elif method in {"write", "writeln"} and obj in {"document", "window.document"} and args:
            value = args
        else:
            return
        if self.is_ignored(obj, node_text(node, source)):
            return
        self.evaluate(node, source, self.catalog.lookup(method), value)

    def _handle_jsx_attribute(self, node, source: bytes) -> None:
        named = node.named_children
        if not named or node_text(named[0], source) != "dangerouslySetInnerHTML":
            return
        expression = next((child for child in named[1:] if child.type == "jsx_expression"), None)
        if expression is None:
            return
        inner = next((child for child in expression.named_children if child.type != "comment"), None)
        value = unwrap(inner)
        if value is not None and value.type == "object":
            html = None
            for pair in value.named_children:
                if pair.type == "pair" and node_text(pair.child_by_field_name("key"), source).strip("'\"") == "__html":
                    html = pair.child_by_field_name("value")
                    break
            if html is None:
                return
            value = html
        if value is None or self.is_ignored(node_text(value, source)):
            return
        self.evaluate(node, source, self.catalog.lookup("dangerouslySetInnerHTML"), [value])

    def describe(self, pattern: SinkPattern, verdict: TaintVerdict, risk: RiskLevel) -> str:
        return f"{pattern.matcher} receives unsanitized dynamic HTML"

    def suggest(self, pattern: SinkPattern, verdict: TaintVerdict, node, source: bytes) -> List[SuggestedFix]:
        if node.type in {"assignment_expression", "augmented_assignment_expression"}:
            left = node.child_by_field_name("left")
            target = node_text(left.child_by_field_name("object"), source)
            value = node_text(node.child_by_field_name("right"), source)
            return [
                SuggestedFix("Use textContent", f"{target}.textContent = {value}"),
                SuggestedFix("Sanitize HTML", f"{node_text(left, source)} = DOMPurify.sanitize({value})"),
            ]
        return [
            SuggestedFix("Use textContent", "element.textContent = value"),
            SuggestedFix("Sanitize HTML", "DOMPurify.sanitize(value)"),
        ]


class OpenRedirectCheck(SecurityCheck):
    CHECK_ID = "open-redirect"
    DESCRIPTION = "Redirects and navigations to unvalidated dynamic URLs"
    VULNERABILITY = "open-redirect"
    CATALOG = REDIRECT_PATTERNS

    def _handle_call(self, node, source: bytes) -> None:
        if node.type != "call_expression":
            return
        obj, method = call_target(node, source)
        if obj is None:
            return
        args = call_arguments(node)
        if not args:
            return
        if method == "redirect":
            target = args[-1]
        elif method in {"replace", "assign"} and obj.endswith("location"):
            target = args[0]
        else:
            return
        if self.is_ignored(obj, node_text(target, source)):
            return
        self.evaluate(node, source, self.catalog.lookup(method), [target])

    def _handle_assignment(self, node, source: bytes) -> None:
        left = unwrap(node.child_by_field_name("left"))
        name = identifier_name(left, source)
        if name not in LOCATION_TARGETS:
            return
        right = node.child_by_field_name("right")
        if self.is_ignored(name, node_text(right, source)):
            return
        pattern = self.catalog.lookup("href" if name.endswith(".href") else "location")
        self.evaluate(node, source, pattern, [right])

    def describe(self, pattern: SinkPattern, verdict: TaintVerdict, risk: RiskLevel) -> str:
        return f"{pattern.matcher} navigates to an unvalidated dynamic URL"

    def suggest(self, pattern: SinkPattern, verdict: TaintVerdict, node, source: bytes) -> List[SuggestedFix]:
        return [
            SuggestedFix(
                "Allow-list domains",
                "const url = new URL(target, base); if (!ALLOWED_HOSTS.includes(url.hostname)) throw new Error('Blocked redirect');",
            ),
            SuggestedFix("Validate the redirect", "redirect(validateRedirectUrl(target))"),
            SuggestedFix("Use relative URLs", "redirect('/dashboard')"),
        ]


class InsecureCookieCheck(SecurityCheck):
    CHECK_ID = "insecure-cookie"
    DESCRIPTION = "Script-accessible cookies and cookies set without secure attributes"
    VULNERABILITY = "insecure-cookie"
    CATALOG = COOKIE_PATTERNS

    REQUIRED_FLAGS = (
        ("httpOnly", re.compile(r"\bhttpOnly\s*:\s*true\b")),
        ("secure", re.compile(r"\bsecure\s*:\s*true\b")),
        ("sameSite", re.compile(r"\bsameSite\s*:\s*['\"`](?:strict|lax|none)['\"`]", re.IGNORECASE)),
    )

    def _handle_assignment(self, node, source: bytes) -> None:
        left = unwrap(node.child_by_field_name("left"))
        if identifier_name(left, source) != "document.cookie":
            return
        right = node.child_by_field_name("right")
        if self.is_ignored(node_text(right, source)):
            return
        self.evaluate(node, source, self.catalog.lookup("document.cookie"), [right], report_static=True)

    def _handle_member(self, node, source: bytes) -> None:
        if self.options.allow_reading or identifier_name(node, source) != "document.cookie":
            return
        parent = node.parent
        if (
            parent is not None
            and parent.type in {"assignment_expression", "augmented_assignment_expression"}
            and node_key(parent.child_by_field_name("left")) == node_key(node)
        ):
            return
        if self.is_ignored(node_text(parent, source)):
            return
        pattern = self.catalog.lookup("document.cookie")
        self.emitter.emit(
            node,
            source,
            pattern,
            RiskLevel.MEDIUM,
            "document.cookie is read from script; keep sensitive cookies httpOnly",
        )

    def _handle_call(self, node, source: bytes) -> None:
        if node.type != "call_expression":
            return
        obj, method = call_target(node, source)
        if method != "cookie" or _root(obj) not in RESPONSE_ROOTS:
            return
        args = call_arguments(node)
        if len(args) < 2 or self.is_ignored(node_text(node, source)):
            return
        if len(args) < 3:
            missing = tuple(flag for flag, _ in self.REQUIRED_FLAGS)
        else:
            options = unwrap(args[2])
            if options is None or options.type != "object":
                return
            text = node_text(options, source)
            missing = tuple(flag for flag, regex in self.REQUIRED_FLAGS if not regex.search(text))
        if not missing:
            return
        self.evaluate(
            node,
            source,
            self.catalog.lookup("cookie"),
            [],
            report_static=True,
            message=f"Cookie set without {', '.join(missing)}",
        )

    def describe(self, pattern: SinkPattern, verdict: TaintVerdict, risk: RiskLevel) -> str:
        if verdict.is_tainted:
            return "document.cookie is written with a user-influenced value"
        return "document.cookie is written from script; prefer server-set httpOnly cookies"

    def suggest(self, pattern: SinkPattern, verdict: TaintVerdict, node, source: bytes) -> List[SuggestedFix]:
        if pattern.matcher == "cookie":
            args = call_arguments(node)
            name = node_text(args[0], source) if args else "'name'"
            value = node_text(args[1], source) if len(args) > 1 else "value"
            obj, _ = call_target(node, source)
            return [
                SuggestedFix(
                    'Set httpOnly: true, secure: true, sameSite: "strict"',
                    f"{obj}.cookie({name}, {value}, {{ httpOnly: true, secure: true, sameSite: 'strict' }})",
                )
            ]
        return [
            SuggestedFix(
                "Set the cookie on the server",
                "res.cookie(name, value, { httpOnly: true, secure: true, sameSite: 'strict' })",
            )
        ]


class SecurityHeadersCheck(SecurityCheck):
    CHECK_ID = "security-headers"
    DESCRIPTION = "Response handlers that set headers but omit required security headers"
    VULNERABILITY = "missing-header"
    CATALOG = HEADER_PATTERNS

    def __init__(self, options: CheckOptions | None = None) -> None:
        super().__init__(options)
        self._uses_helmet = False

    def prepare(self, tree, source: bytes) -> None:
        self._uses_helmet = any(
            node.type == "call_expression" and callee_name(node, source) == "helmet"
            for node in walk(tree.root_node)
        )

    def _header_names(self, node, source: bytes) -> List[str] | None:
        """Header names set by ``node``, or None when it is not a header call."""

        if node.type != "call_expression":
            return None
        obj, method = call_target(node, source)
        if method == "setHeader" and obj is not None:
            pass
        elif method in {"header", "set"} and _root(obj) in RESPONSE_ROOTS:
            pass
        else:
            return None
        args = call_arguments(node)
        if not args:
            return None
        first = unwrap(args[0])
        literal = string_literal_value(first, source)
        if literal is not None:
            return [literal]
        if first is not None and first.type == "object":
            names = []
            for pair in first.named_children:
                if pair.type == "pair":
                    key = pair.child_by_field_name("key")
                    names.append(string_literal_value(key, source) or node_text(key, source))
            return names
        return None

    def _headers_in_scope(self, scope_node, source: bytes) -> set[str]:
        present: set[str] = set()
        stack = [scope_node]
        while stack:
            current = stack.pop()
            if current is not scope_node and current.type in FUNCTION_TYPES:
                continue
            names = self._header_names(current, source)
            if names:
                present.update(name.lower() for name in names)
            stack.extend(current.children)
        return present

    def _handle_call(self, node, source: bytes) -> None:
        if self._uses_helmet or self._header_names(node, source) is None:
            return
        if self.is_ignored(node_text(node, source)):
            return
        scope = enclosing_scope(node)
        if not self.emitter.claim_scope(scope):
            return
        present = self._headers_in_scope(scope.node, source)
        missing = [name for name in self.options.required_headers if name.lower() not in present]
        if not missing:
            return
        _, method = call_target(node, source)
        self.evaluate(
            node,
            source,
            self.catalog.lookup(method),
            [],
            report_static=True,
            message=f"Missing security headers: {', '.join(missing)}",
        )

    def suggest(self, pattern: SinkPattern, verdict: TaintVerdict, node, source: bytes) -> List[SuggestedFix]:
        obj, _ = call_target(node, source)
        return [
            SuggestedFix(
                "Add the missing headers",
                f"{obj}.setHeader('Content-Security-Policy', \"default-src 'self'\")",
            ),
            SuggestedFix("Use helmet", "app.use(helmet())"),
            SuggestedFix("Set headers explicitly", f"{obj}.setHeader('X-Content-Type-Options', 'nosniff')"),
        ]


CHECK_CLASSES: tuple[Type[SecurityCheck], ...] = (
    CommandInjectionCheck,
    CodeInjectionCheck,
    RedosCheck,
    XssCheck,
    OpenRedirectCheck,
    InsecureCookieCheck,
    SecurityHeadersCheck,
)
CHECKS_BY_ID: Dict[str, Type[SecurityCheck]] = {cls.CHECK_ID: cls for cls in CHECK_CLASSES}


def build_checks(
    options: Dict[str, CheckOptions] | None = None,
    enabled: Iterable[str] | None = None,
) -> List[SecurityCheck]:
    """Instantiate the requested checks (all of them by default) in registry order."""

    options = options or {}
    wanted = set(enabled) if enabled is not None else set(CHECKS_BY_ID)
    unknown = wanted - set(CHECKS_BY_ID)
    if unknown:
        raise ValueError(f"Unknown check(s): {', '.join(sorted(unknown))}")
    return [cls(options.get(cls.CHECK_ID)) for cls in CHECK_CLASSES if cls.CHECK_ID in wanted]
