"""Syntax node classification: literal vs dynamic values, sink and sanitizer calls."""

from __future__ import annotations

import re
from typing import Iterable, Sequence

from .ast_utils import (
    LITERAL_TYPES,
    call_arguments,
    call_target,
    callee_node,
    identifier_name,
    node_text,
    unwrap,
)
from .catalog import SinkPattern

REFERENCE_TYPES = {"identifier", "member_expression", "subscript_expression"}
SANITIZER_PREFIXES = ("escape", "validate")
# Matched anywhere in the name: customSanitize, htmlSanitizer, purifyHtml.
SANITIZER_FRAGMENTS = ("sanitize", "purify")

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def _operator(node) -> str | None:
    op = node.child_by_field_name("operator")
    if op is not None:
        return op.type
    for child in node.children:
        if not child.is_named:
            return child.type
    return None


def is_dynamic_value(node) -> bool:
    """Whether ``node`` may carry a runtime-computed value.

    Unknown shapes answer False: the classifier cannot tell, so it does not flag.
    """

    node = unwrap(node)
    if node is None:
        return False
    kind = node.type
    if kind in LITERAL_TYPES:
        return False
    if kind == "template_string":
        return any(child.type == "template_substitution" for child in node.named_children)
    if kind == "binary_expression":
        return _operator(node) == "+"
    if kind in REFERENCE_TYPES:
        return True
    if kind == "spread_element":
        named = node.named_children
        return bool(named) and is_dynamic_value(named[0])
    if kind == "array":
        return any(is_dynamic_value(child) for child in node.named_children if child.type != "comment")
    if kind == "object":
        for child in node.named_children:
            if child.type == "shorthand_property_identifier":
                return True
            if child.type == "pair" and is_dynamic_value(child.child_by_field_name("value")):
                return True
            if child.type == "spread_element" and is_dynamic_value(child):
                return True
        return False
    if kind == "ternary_expression":
        return any(
            is_dynamic_value(node.child_by_field_name(name))
            for name in ("consequence", "alternative")
        )
    if kind in {"call_expression", "new_expression"}:
        return any(is_dynamic_value(arg) for arg in call_arguments(node))
    return False


def is_literal(node) -> bool:
    node = unwrap(node)
    if node is None:
        return False
    if node.type in LITERAL_TYPES:
        return True
    if node.type == "template_string":
        return not any(child.type == "template_substitution" for child in node.named_children)
    return False


def has_only_literal_arguments(nodes: Sequence) -> bool:
    for node in nodes:
        node = unwrap(node)
        if is_literal(node):
            continue
        if node is not None and node.type == "array":
            if all(is_literal(child) for child in node.named_children if child.type != "comment"):
                continue
        return False
    return True


def callee_name(node, source: bytes) -> str | None:
    """Property name of a member callee, bare identifier, or ``new`` constructor."""

    _, method = call_target(node, source)
    if method:
        return method
    func = unwrap(callee_node(node))
    if func is None:
        return None
    name = identifier_name(func, source)
    if name and "." in name:
        return name.rsplit(".", 1)[-1]
    return name


def is_sink_call(node, pattern: SinkPattern, source: bytes) -> bool:
    if node is None or node.type not in {"call_expression", "new_expression"}:
        return False
    if pattern.match_kind == "regex":
        return pattern.matches(node_text(node, source).strip())
    return pattern.matches(callee_name(node, source))


def _normalize(value: str) -> str:
    return _NON_ALNUM.sub("", value.lower())


def is_sanitizer_name(name: str | None) -> bool:
    if not name:
        return False
    lowered = name.lower()
    if any(fragment in lowered for fragment in SANITIZER_FRAGMENTS):
        return True
    return lowered.startswith(SANITIZER_PREFIXES)


def is_sanitizer_call(node, source: bytes, trusted_names: Iterable[str] = ()) -> bool:
    """Name heuristic: trusted library fragments or a generic sanitizer verb."""

    node = unwrap(node)
    if node is None or node.type != "call_expression":
        return False
    obj, method = call_target(node, source)
    if not method:
        return False
    fragments = [_normalize(name) for name in trusted_names if name]
    candidates = [_normalize(method)]
    if obj:
        candidates.append(_normalize(obj))
    for fragment in fragments:
        if fragment and any(fragment in candidate for candidate in candidates):
            return True
    return is_sanitizer_name(method)
