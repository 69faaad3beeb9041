"""Lexical scope lookup and bounded statement windows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .ast_utils import FUNCTION_TYPES, node_key

DEFAULT_LOOKBACK = 5


@dataclass(frozen=True, slots=True)
class ScopeBoundary:
    """Nearest function-like node (or the program) and its body statements."""

    node: object
    statements: Tuple[object, ...]

    @property
    def key(self) -> tuple[int, int, str]:
        return node_key(self.node)


def _body_statements(scope_node) -> Tuple[object, ...]:
    if scope_node.type == "program":
        container = scope_node
    else:
        container = scope_node.child_by_field_name("body")
        if container is None or container.type not in {"statement_block", "class_body"}:
            return ()
    return tuple(
        child for child in container.named_children if child.type not in {"comment", "hash_bang_line"}
    )


def enclosing_scope(node) -> ScopeBoundary:
    current = node.parent if node is not None else None
    last = node
    while current is not None:
        if current.type in FUNCTION_TYPES or current.type == "program":
            return ScopeBoundary(current, _body_statements(current))
        last = current
        current = current.parent
    # Detached subtree: treat the topmost reachable node as the root.
    return ScopeBoundary(last, _body_statements(last) if last is not None and last.type == "program" else ())


def _contains(outer, inner) -> bool:
    return outer.start_byte <= inner.start_byte and inner.end_byte <= outer.end_byte


def preceding_statements(node, scope: ScopeBoundary | None = None, limit: int = DEFAULT_LOOKBACK) -> list:
    """Up to ``limit`` statements before the one holding ``node``, nearest first."""

    if scope is None:
        scope = enclosing_scope(node)
    if limit <= 0 or not scope.statements:
        return []
    for index, statement in enumerate(scope.statements):
        if _contains(statement, node):
            start = max(0, index - limit)
            return list(reversed(scope.statements[start:index]))
    return []


def scope_key(scope: ScopeBoundary) -> tuple[int, int, str]:
    return scope.key
