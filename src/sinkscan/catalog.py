"""Static sink pattern tables shared by every check."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Tuple

CWE_BY_CLASS = {
    "command-injection": "CWE-78",
    "argument-injection": "CWE-88",
    "path-injection": "CWE-22",
    "code-injection": "CWE-95",
    "redos": "CWE-1333",
    "xss": "CWE-79",
    "open-redirect": "CWE-601",
    "missing-header": "CWE-693",
    "insecure-cookie": "CWE-614",
}


@dataclass(frozen=True, slots=True)
class SinkPattern:
    """One dangerous API shape and the guidance that goes with it."""

    matcher: str
    vulnerability: str
    dangerous: bool
    safe_alternatives: Tuple[str, ...] = ()
    example: Tuple[str, str] = ("", "")
    effort: str = "15-30 minutes"
    risk_tier: str = "medium"
    match_kind: str = "name"
    remediation: Tuple[str, ...] = ()
    label: str = ""
    _compiled: Optional[re.Pattern] = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.match_kind == "regex":
            object.__setattr__(self, "_compiled", re.compile(self.matcher, re.IGNORECASE))

    @property
    def cwe(self) -> str:
        return CWE_BY_CLASS.get(self.vulnerability, "CWE-20")

    @property
    def name(self) -> str:
        return self.label or self.matcher

    def matches(self, value: str | None) -> bool:
        if value is None:
            return False
        if self._compiled is not None:
            return self._compiled.search(value) is not None
        return value == self.matcher


class PatternCatalog:
    """Ordered, append-only collection of sink patterns."""

    def __init__(self, patterns: Iterable[SinkPattern] = ()) -> None:
        self._patterns: list[SinkPattern] = list(patterns)

    def __iter__(self):
        return iter(self._patterns)

    def extend(self, patterns: Iterable[SinkPattern]) -> "PatternCatalog":
        return PatternCatalog([*self._patterns, *patterns])

    def lookup(self, value: str | None) -> SinkPattern | None:
        for pattern in self._patterns:
            if pattern.matches(value):
                return pattern
        return None


def generic_pattern(vulnerability: str, matcher: str = "dynamic") -> SinkPattern:
    """Synthesized descriptor used when no catalog entry matches a sink."""

    return SinkPattern(
        matcher=matcher,
        vulnerability=vulnerability,
        dangerous=False,
        safe_alternatives=("Validate and constrain the value before it reaches the sink",),
        example=("", ""),
        effort="15-30 minutes",
        risk_tier="medium",
    )


COMMAND_PATTERNS = PatternCatalog(
    [
        SinkPattern(
            matcher="exec",
            vulnerability="command-injection",
            dangerous=True,
            safe_alternatives=("execFile", "spawn"),
            example=(
                "exec(`git clone ${repoUrl}`)",
                "execFile('git', ['clone', repoUrl], {shell: false})",
            ),
            effort="15-25 minutes",
            risk_tier="critical",
            remediation=(
                "Replace exec() with execFile() or spawn()",
                "Split command and arguments into separate array elements",
                "Use {shell: false} option to prevent shell interpretation",
            ),
        ),
        SinkPattern(
            matcher="execSync",
            vulnerability="command-injection",
            dangerous=True,
            safe_alternatives=("execFileSync", "spawnSync"),
            example=(
                "execSync(`npm install ${packageName}`)",
                "execFileSync('npm', ['install', packageName], {shell: false})",
            ),
            effort="15-25 minutes",
            risk_tier="critical",
            remediation=(
                "Replace execSync() with execFileSync() or spawnSync()",
                "Split command and arguments into separate array elements",
                "Use {shell: false} option to prevent shell interpretation",
            ),
        ),
        SinkPattern(
            matcher="spawn",
            vulnerability="argument-injection",
            dangerous=False,
            safe_alternatives=("spawn with validation",),
            example=(
                "spawn('bash', ['-c', userCommand])",
                "spawn(validatedCommand, validatedArgs, {shell: false})",
            ),
            effort="20-30 minutes",
            risk_tier="high",
            remediation=(
                "Ensure first argument is a safe, validated command path",
                "Pass arguments as separate array elements",
                "Use {shell: false} to prevent shell injection",
            ),
        ),
        SinkPattern(
            matcher="spawnSync",
            vulnerability="argument-injection",
            dangerous=False,
            safe_alternatives=("spawnSync with validation",),
            example=(
                "spawnSync('sh', ['-c', userCommand])",
                "spawnSync(validatedCommand, validatedArgs, {shell: false})",
            ),
            effort="20-30 minutes",
            risk_tier="high",
        ),
        SinkPattern(
            matcher="execFile",
            vulnerability="path-injection",
            dangerous=False,
            safe_alternatives=("execFile with an allow-listed binary path",),
            example=("execFile(userBinary, args)", "execFile(ALLOWED_BINARIES[name], args)"),
            effort="10-20 minutes",
            risk_tier="medium",
        ),
        SinkPattern(
            matcher="execFileSync",
            vulnerability="path-injection",
            dangerous=False,
            safe_alternatives=("execFileSync with an allow-listed binary path",),
            example=("execFileSync(userBinary, args)", "execFileSync(ALLOWED_BINARIES[name], args)"),
            effort="10-20 minutes",
            risk_tier="medium",
        ),
        SinkPattern(
            matcher="fork",
            vulnerability="path-injection",
            dangerous=False,
            safe_alternatives=("fork with a static module path",),
            example=("fork(userModule)", "fork(path.join(__dirname, 'worker.js'))"),
            effort="10-20 minutes",
            risk_tier="medium",
        ),
    ]
)
COMMAND_METHODS = (
    "exec",
    "execSync",
    "execFile",
    "execFileSync",
    "spawn",
    "spawnSync",
    "fork",
    "forkSync",
)
LITERAL_STRING_METHODS = {"exec", "execSync"}
LITERAL_ARRAY_METHODS = {"spawn", "spawnSync", "execFile", "execFileSync", "fork", "forkSync"}

EVAL_PATTERNS = PatternCatalog(
    [
        SinkPattern(
            matcher="eval",
            vulnerability="code-injection",
            dangerous=True,
            safe_alternatives=("JSON.parse()", "Map lookups", "Template literals"),
            example=("eval(userCode)", "JSON.parse(userJson)"),
            effort="15-30 minutes",
            risk_tier="critical",
        ),
        SinkPattern(
            matcher="Function",
            vulnerability="code-injection",
            dangerous=True,
            safe_alternatives=("Arrow function or regular function",),
            example=("new Function('a', body)", "const fn = (a) => a * 2;"),
            effort="10 minutes",
            risk_tier="critical",
            remediation=(
                "Replace Function constructor with arrow function",
                "Use regular function declaration",
                "Validate any dynamic parts",
                "Consider module imports instead",
            ),
        ),
    ]
)

# Matched against the rendered argument text, in order.
EVAL_CATEGORIES = PatternCatalog(
    [
        SinkPattern(
            matcher=r"JSON\.parse|parse\(.*\)|^\s*['\"`]\s*[{\[]",
            match_kind="regex",
            label="json",
            vulnerability="code-injection",
            dangerous=True,
            safe_alternatives=("JSON.parse()",),
            example=("eval('{\"key\": \"' + value + '\"}')", "JSON.parse('{\"key\": \"' + value + '\"}')"),
            effort="2 minutes",
            remediation=(
                "Replace eval() with JSON.parse()",
                "Ensure input is valid JSON string",
                "Add try/catch for JSON parsing errors",
                "Consider using a JSON schema validator",
            ),
        ),
        SinkPattern(
            matcher=r"Math\.|parseInt|parseFloat",
            match_kind="regex",
            label="math",
            vulnerability="code-injection",
            dangerous=True,
            safe_alternatives=("Math functions or parseInt/parseFloat",),
            example=(
                "eval('Math.' + method + '(' + arg + ')')",
                "const mathMethods = {sin: Math.sin, cos: Math.cos}; mathMethods[method](arg)",
            ),
            effort="5 minutes",
            remediation=(
                "Create whitelist of allowed Math functions",
                "Use direct function calls: Math.sin(x)",
                "Validate inputs are numbers",
                "Consider using a math expression parser library",
            ),
        ),
        SinkPattern(
            matcher=r"\$\{|template|interpolat",
            match_kind="regex",
            label="template",
            vulnerability="code-injection",
            dangerous=True,
            safe_alternatives=("Template literals or template engine",),
            example=("eval('Hello ' + userName + '!')", "const template = `Hello ${userName}!`;"),
            effort="3 minutes",
            remediation=(
                "Use template literals: `Hello ${name}`",
                "Sanitize variables before interpolation",
                "Use a template engine like Handlebars if complex",
                "Validate template structure",
            ),
        ),
        SinkPattern(
            matcher=r"\[.*\]|object\[|obj\.|\.",
            match_kind="regex",
            label="object",
            vulnerability="code-injection",
            dangerous=True,
            safe_alternatives=("Direct property access or Map",),
            example=(
                "eval('obj.' + property)",
                "const allowedProps = {name: true, age: true}; if (allowedProps[property]) obj[property]",
            ),
            effort="8 minutes",
            remediation=(
                "Use Map or plain object for key-value access",
                "Whitelist allowed property names",
                "Use hasOwnProperty() check",
                "Consider Object.create(null) for clean objects",
            ),
        ),
    ]
)

# Matched against the rendered call text; ``new RegExp`` must precede ``RegExp``.
REGEXP_PATTERNS = PatternCatalog(
    [
        SinkPattern(
            matcher=r"^new\s+RegExp\s*\(",
            match_kind="regex",
            label="new RegExp",
            vulnerability="redos",
            dangerous=False,
            safe_alternatives=("Pre-defined RegExp constants",),
            example=("new RegExp(userInput)", "const PATTERNS = { email: /^[a-zA-Z0-9]+$/ }; PATTERNS[userChoice]"),
            effort="10-15 minutes",
            risk_tier="high",
            remediation=(
                "Create a whitelist of allowed regex patterns",
                "Use object lookup: PATTERNS[userChoice]",
                "If dynamic needed: escape input with regex escaping function",
            ),
        ),
        SinkPattern(
            matcher=r"^RegExp\s*\(",
            match_kind="regex",
            label="RegExp",
            vulnerability="redos",
            dangerous=False,
            safe_alternatives=("Static RegExp literals or validated patterns",),
            example=(
                "RegExp(userPattern)",
                "const safePattern = userPattern.replace(/[.*+?^${}()|[\\]\\\\]/g, '\\\\$&'); new RegExp(`^${safePattern}$`)",
            ),
            effort="15-20 minutes",
            risk_tier="high",
            remediation=(
                "Escape user input before RegExp construction",
                "Validate input against allowed character sets",
                "Add length limits to prevent oversized patterns",
            ),
        ),
    ]
)
REGEX_LITERAL_PATTERN = SinkPattern(
    matcher="regex-literal",
    label="regex literal",
    vulnerability="redos",
    dangerous=False,
    safe_alternatives=("Restructure regex to avoid nested quantifiers",),
    example=("/(a+)+b/", "/a+b/"),
    effort="20-30 minutes",
    risk_tier="high",
    remediation=(
        "Identify nested quantifiers (*+, ++, ?+)",
        "Restructure regex to avoid exponential backtracking",
        "Use atomic groups if supported: (?>...)",
        "Test regex performance with long inputs",
    ),
)

# Structural shapes prone to catastrophic backtracking, tested against the
# pattern body. Ordered: the first match names the finding.
REDOS_SHAPES = PatternCatalog(
    [
        SinkPattern(
            matcher=r"\([^)]*\+\)\+|\([^)]*\*\)\*|\([^)]*\?\)\?",
            match_kind="regex",
            label="Nested Quantifiers",
            vulnerability="redos",
            dangerous=False,
            safe_alternatives=("Atomic group (?>...) or a flattened quantifier",),
            example=("/(a+)+b/", "/(?>a+)b/ or /a+b/"),
            effort="20-30 minutes",
            risk_tier="critical",
            remediation=("Use atomic groups (?>...) or restructure to avoid nesting",),
        ),
        SinkPattern(
            matcher=r"\([^)]*\+[^)]*\)\+|\([^)]*\*[^)]*\)\*",
            match_kind="regex",
            label="Nested Repetition",
            vulnerability="redos",
            dangerous=False,
            safe_alternatives=("Single-level quantifier",),
            example=("/(x+)+y/", "/x+y/"),
            effort="15-20 minutes",
            risk_tier="critical",
            remediation=("Flatten nested quantifiers",),
        ),
        SinkPattern(
            matcher=r"\([^)]*\|[^)]*\)\+|\([^)]*\|[^)]*\)\*",
            match_kind="regex",
            label="Alternation with Quantifier",
            vulnerability="redos",
            dangerous=False,
            safe_alternatives=("Character class instead of alternation",),
            example=("/(a|b)+c/", "/[ab]+c/"),
            effort="10-15 minutes",
            risk_tier="high",
            remediation=("Use character classes instead of alternation when possible",),
        ),
        SinkPattern(
            matcher=r"\.\*\.\*|\.\+\+\.\+",
            match_kind="regex",
            label="Nested Wildcards",
            vulnerability="redos",
            dangerous=False,
            safe_alternatives=("A single, more specific wildcard",),
            example=("/.*.*/", "/.*/ or be more specific"),
            effort="10-15 minutes",
            risk_tier="critical",
            remediation=("Remove redundant wildcards or be more specific",),
        ),
        SinkPattern(
            matcher=r"\([^)]*\)\{[0-9]+,\}[^)]*\([^)]*\)\{[0-9]+,\}",
            match_kind="regex",
            label="Multiple Repetition Groups",
            vulnerability="redos",
            dangerous=False,
            safe_alternatives=("Bounded or merged repetition groups",),
            example=("/(ab){2,}-(cd){2,}/", "/(?:ab){2,10}-(?:cd){2,10}/"),
            effort="20-30 minutes",
            risk_tier="high",
            remediation=("Restructure regex to avoid nested repetitions",),
        ),
        SinkPattern(
            matcher=r"\([^()]*[+*][^()]*\)\s*[+*{]",
            match_kind="regex",
            label="Nested Quantifier Pattern",
            vulnerability="redos",
            dangerous=False,
            safe_alternatives=("Restructure to avoid nested quantifiers",),
            example=("/(a+b?)*c/", "/(?:ab?)*c/ with bounded input"),
            effort="20-30 minutes",
            risk_tier="critical",
            remediation=("Use atomic groups or restructure regex",),
        ),
    ]
)

XSS_PATTERNS = PatternCatalog(
    [
        SinkPattern(
            matcher="innerHTML",
            vulnerability="xss",
            dangerous=True,
            safe_alternatives=("textContent", "DOMPurify.sanitize()"),
            example=("element.innerHTML = userInput", "element.textContent = userInput"),
            effort="5-10 minutes",
            risk_tier="critical",
        ),
        SinkPattern(
            matcher="outerHTML",
            vulnerability="xss",
            dangerous=True,
            safe_alternatives=("replaceWith(document.createTextNode(...))", "DOMPurify.sanitize()"),
            example=("element.outerHTML = markup", "element.replaceWith(document.createTextNode(markup))"),
            effort="5-10 minutes",
            risk_tier="critical",
        ),
        SinkPattern(
            matcher="insertAdjacentHTML",
            vulnerability="xss",
            dangerous=True,
            safe_alternatives=("insertAdjacentText", "DOMPurify.sanitize()"),
            example=(
                "element.insertAdjacentHTML('beforeend', html)",
                "element.insertAdjacentText('beforeend', text)",
            ),
            effort="5-10 minutes",
            risk_tier="critical",
        ),
        SinkPattern(
            matcher="write",
            vulnerability="xss",
            dangerous=True,
            safe_alternatives=("DOM APIs such as createElement/textContent",),
            example=("document.write(html)", "container.append(document.createTextNode(text))"),
            effort="10-15 minutes",
            risk_tier="critical",
        ),
        SinkPattern(
            matcher="writeln",
            vulnerability="xss",
            dangerous=True,
            safe_alternatives=("DOM APIs such as createElement/textContent",),
            example=("document.writeln(html)", "container.append(document.createTextNode(text))"),
            effort="10-15 minutes",
            risk_tier="critical",
        ),
        SinkPattern(
            matcher="dangerouslySetInnerHTML",
            vulnerability="xss",
            dangerous=True,
            safe_alternatives=("Render as JSX children", "DOMPurify.sanitize()"),
            example=(
                "<div dangerouslySetInnerHTML={{ __html: html }} />",
                "<div dangerouslySetInnerHTML={{ __html: DOMPurify.sanitize(html) }} />",
            ),
            effort="5-10 minutes",
            risk_tier="critical",
        ),
    ]
)

REDIRECT_PATTERNS = PatternCatalog(
    [
        SinkPattern(
            matcher="redirect",
            vulnerability="open-redirect",
            dangerous=False,
            safe_alternatives=("Allow-listed domains", "Relative URLs"),
            example=(
                "res.redirect(req.query.next)",
                "if (allowedDomains.includes(url.hostname)) res.redirect(url)",
            ),
            effort="10-15 minutes",
            risk_tier="high",
        ),
        SinkPattern(
            matcher="replace",
            vulnerability="open-redirect",
            dangerous=False,
            safe_alternatives=("Allow-listed domains", "Relative URLs"),
            example=("window.location.replace(next)", "window.location.replace(SAFE_ROUTES[next])"),
            effort="10-15 minutes",
            risk_tier="high",
        ),
        SinkPattern(
            matcher="assign",
            vulnerability="open-redirect",
            dangerous=False,
            safe_alternatives=("Allow-listed domains", "Relative URLs"),
            example=("location.assign(target)", "location.assign(SAFE_ROUTES[target])"),
            effort="10-15 minutes",
            risk_tier="high",
        ),
        SinkPattern(
            matcher="href",
            vulnerability="open-redirect",
            dangerous=False,
            safe_alternatives=("Allow-listed domains", "Relative URLs"),
            example=("window.location.href = next", "window.location.href = validateRedirectUrl(next)"),
            effort="10-15 minutes",
            risk_tier="high",
        ),
        SinkPattern(
            matcher="location",
            vulnerability="open-redirect",
            dangerous=False,
            safe_alternatives=("Allow-listed domains", "Relative URLs"),
            example=("window.location = next", "window.location = validateRedirectUrl(next)"),
            effort="10-15 minutes",
            risk_tier="high",
        ),
    ]
)

COOKIE_PATTERNS = PatternCatalog(
    [
        SinkPattern(
            matcher="document.cookie",
            vulnerability="insecure-cookie",
            dangerous=False,
            safe_alternatives=("Cookie Store API", "HttpOnly cookies set by the server"),
            example=("document.cookie = `session=${token}`", "res.cookie('session', token, { httpOnly: true, secure: true, sameSite: 'strict' })"),
            effort="10-20 minutes",
            risk_tier="medium",
        ),
        SinkPattern(
            matcher="cookie",
            label="cookie options",
            vulnerability="insecure-cookie",
            dangerous=True,
            safe_alternatives=('{ httpOnly: true, secure: true, sameSite: "strict" }',),
            example=(
                "res.cookie('session', token)",
                "res.cookie('session', token, { httpOnly: true, secure: true, sameSite: 'strict' })",
            ),
            effort="5 minutes",
            risk_tier="high",
            remediation=(
                "Set httpOnly: true so scripts cannot read the cookie",
                "Set secure: true so the cookie is only sent over HTTPS",
                'Set sameSite: "strict" or "lax" to limit cross-site sending',
            ),
        ),
    ]
)

HEADER_PATTERNS = PatternCatalog(
    [
        SinkPattern(
            matcher="setHeader",
            vulnerability="missing-header",
            dangerous=True,
            safe_alternatives=("helmet()", "Explicit res.setHeader calls"),
            example=("res.setHeader('X-Custom', 'value')", "app.use(helmet())"),
            effort="10 minutes",
            risk_tier="high",
        ),
        SinkPattern(
            matcher="header",
            vulnerability="missing-header",
            dangerous=True,
            safe_alternatives=("helmet()", "Explicit res.header calls"),
            example=("res.header('X-Custom', 'value')", "app.use(helmet())"),
            effort="10 minutes",
            risk_tier="high",
        ),
        SinkPattern(
            matcher="set",
            vulnerability="missing-header",
            dangerous=True,
            safe_alternatives=("helmet()", "Explicit res.set calls"),
            example=("res.set('X-Custom', 'value')", "app.use(helmet())"),
            effort="10 minutes",
            risk_tier="high",
        ),
    ]
)
DEFAULT_REQUIRED_HEADERS = (
    "Content-Security-Policy",
    "X-Frame-Options",
    "X-Content-Type-Options",
)


def extra_name_patterns(names: Sequence[str], template: SinkPattern) -> list[SinkPattern]:
    """Clone ``template`` for user-configured sink names."""

    return [
        SinkPattern(
            matcher=name,
            vulnerability=template.vulnerability,
            dangerous=template.dangerous,
            safe_alternatives=template.safe_alternatives,
            example=template.example,
            effort=template.effort,
            risk_tier=template.risk_tier,
            remediation=template.remediation,
        )
        for name in names
        if name
    ]
