"""Heuristic taint resolution.

A bounded, intraprocedural, textual approximation. A value "looks like" user
input when its text resembles a request/location chain or its name suggests
user data; it counts as sanitized when a trusted sanitizer wraps it or when one
of the few statements right before the sink looks like a validation. This
never follows values across functions or files and never proves that a
validation applies to the value that reaches the sink.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .ast_utils import node_key, node_text, unwrap
from .classifier import is_dynamic_value, is_sanitizer_call
from .scope import DEFAULT_LOOKBACK, enclosing_scope, preceding_statements

logger = logging.getLogger(__name__)

USER_INPUT_PATTERNS = (
    re.compile(r"\b(?:req|request|ctx)\.(?:body|query|params|headers|cookies)\b"),
    re.compile(r"\bwindow\.location\b"),
    re.compile(r"\bdocument\.location\b"),
    re.compile(r"\blocation\.(?:search|hash|href)\b"),
)
USER_INPUT_NAMES = {"userinput", "userdata", "html", "content", "text"}
USER_INPUT_FRAGMENTS = ("input", "data", "param", "arg")

VALIDATION_SIGNATURES = (
    ("includes", re.compile(r"\.includes\s*\(")),
    ("has", re.compile(r"\.has\s*\(")),
    ("validate", re.compile(r"\bvalidate\w*\s*\(", re.IGNORECASE)),
    ("isValid", re.compile(r"\bisValid\w*\s*\(")),
    ("hostname", re.compile(r"\bhostname\s*(?:===|!==|==|!=)")),
    ("startsWith", re.compile(r"\.startsWith\s*\(")),
    ("endsWith", re.compile(r"\.endsWith\s*\(")),
    ("match", re.compile(r"\.match\s*\(")),
    ("test", re.compile(r"\.test\s*\(")),
)


@dataclass(frozen=True, slots=True)
class TaintVerdict:
    is_dynamic: bool
    is_sanitized: bool
    sanitizer: Optional[str] = None

    @property
    def is_tainted(self) -> bool:
        return self.is_dynamic and not self.is_sanitized

    @property
    def is_validated(self) -> bool:
        return bool(self.sanitizer and self.sanitizer.startswith("validation:"))


STATIC = TaintVerdict(False, True, None)


def looks_like_user_input(node, source: bytes) -> bool:
    node = unwrap(node)
    if node is None:
        return False
    text = node_text(node, source)
    if any(pattern.search(text) for pattern in USER_INPUT_PATTERNS):
        return True
    if node.type == "identifier":
        lowered = text.lower()
        if lowered in USER_INPUT_NAMES:
            return True
        return any(fragment in lowered for fragment in USER_INPUT_FRAGMENTS)
    return False


def find_sanitizer(
    sink_node,
    argument_node,
    source: bytes,
    trusted_names: Iterable[str] = (),
) -> Optional[str]:
    """Return the text of the sanitizer call wrapping ``argument_node``, if any.

    The argument itself is tried first, then its ancestors up to the sink.
    """

    stop = node_key(sink_node) if sink_node is not None else None
    trusted = tuple(trusted_names)
    current = argument_node
    while current is not None:
        if stop is not None and node_key(current) == stop:
            break
        if is_sanitizer_call(current, source, trusted):
            return node_text(current, source).strip()
        inner = unwrap(current)
        if inner is not None and inner is not current and is_sanitizer_call(inner, source, trusted):
            return node_text(inner, source).strip()
        current = current.parent
    return None


def find_validation(statements: Sequence, source: bytes) -> Optional[str]:
    for statement in statements:
        text = node_text(statement, source)
        for name, pattern in VALIDATION_SIGNATURES:
            if pattern.search(text):
                return name
    return None


def resolve(
    sink_node,
    argument_node,
    source: bytes,
    trusted_names: Iterable[str] = (),
    lookback: int = DEFAULT_LOOKBACK,
) -> TaintVerdict:
    if looks_like_user_input(argument_node, source):
        dynamic = True
    else:
        dynamic = is_dynamic_value(argument_node)
    if not dynamic:
        return STATIC

    sanitizer = find_sanitizer(sink_node, argument_node, source, trusted_names)
    if sanitizer is not None:
        return TaintVerdict(True, True, sanitizer)

    anchor = sink_node if sink_node is not None else argument_node
    window = preceding_statements(anchor, enclosing_scope(anchor), lookback)
    signature = find_validation(window, source)
    if signature is not None:
        logger.debug("validation %r found before line %d", signature, anchor.start_point[0] + 1)
        return TaintVerdict(True, True, f"validation:{signature}")
    return TaintVerdict(True, False, None)
