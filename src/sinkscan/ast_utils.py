"""Shared helper functions for AST-based checks."""

from __future__ import annotations

import fnmatch
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from tree_sitter import Language, Parser
from tree_sitter_javascript import language as javascript_language
from tree_sitter_typescript import language_tsx, language_typescript


SUPPORTED_EXTENSIONS = {".js", ".mjs", ".cjs", ".jsx", ".ts", ".mts", ".cts", ".tsx"}
MAX_FILES = 400

FUNCTION_TYPES = {
    "function_declaration",
    "function_expression",
    "function",
    "arrow_function",
    "method_definition",
    "generator_function",
    "generator_function_declaration",
}
STRING_TYPES = {"string", "template_string"}
LITERAL_TYPES = {"string", "number", "true", "false", "null", "undefined", "regex"}
WRAPPER_TYPES = {
    "parenthesized_expression",
    "await_expression",
    "as_expression",
    "satisfies_expression",
    "non_null_expression",
    "type_assertion",
}
TEST_FILE_SUFFIXES = (".test", ".spec")

_JS_LANGUAGE = Language(javascript_language())
_TS_LANGUAGE = Language(language_typescript())
_TSX_LANGUAGE = Language(language_tsx())

JS_PARSER = Parser()
JS_PARSER.language = _JS_LANGUAGE
TS_PARSER = Parser()
TS_PARSER.language = _TS_LANGUAGE
TSX_PARSER = Parser()
TSX_PARSER.language = _TSX_LANGUAGE


def node_text(node, source: bytes) -> str:
    if node is None:
        return ""
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


def node_key(node) -> tuple[int, int, str]:
    """Stable per-pass identity of a node: its byte span plus its kind."""

    return (node.start_byte, node.end_byte, node.type)


def identifier_name(node, source: bytes) -> str | None:
    if node is None:
        return None
    if node.type in {
        "identifier",
        "property_identifier",
        "shorthand_property_identifier",
        "shorthand_property_identifier_pattern",
        "private_property_identifier",
        "type_identifier",
    }:
        return node_text(node, source)
    if node.type == "this":
        return "this"
    if node.type == "member_expression":
        obj = identifier_name(node.child_by_field_name("object"), source)
        prop = identifier_name(node.child_by_field_name("property"), source)
        if obj and prop:
            return f"{obj}.{prop}"
        return obj or prop
    if node.type == "subscript_expression":
        obj = identifier_name(node.child_by_field_name("object"), source)
        index_node = node.child_by_field_name("index")
        prop = None
        if index_node is not None and index_node.type == "string":
            prop = string_literal_value(index_node, source)
        if obj and prop:
            return f"{obj}.{prop}"
        return obj
    return None


def unwrap(node):
    """Strip parentheses, ``await`` and TypeScript casts around an expression."""

    current = node
    while current is not None and current.type in WRAPPER_TYPES:
        inner = current.child_by_field_name("expression")
        if inner is None:
            named = current.named_children
            inner = named[0] if named else None
        if inner is None:
            break
        current = inner
    return current


def call_arguments(node) -> List:
    """Return the argument nodes of a call/new expression, ignoring punctuation."""

    if node is None:
        return []
    args = node.child_by_field_name("arguments")
    if args is None or args.type != "arguments":
        return []
    return [child for child in args.named_children if child.type != "comment"]


def callee_node(node):
    if node is None:
        return None
    if node.type == "call_expression":
        return node.child_by_field_name("function")
    if node.type == "new_expression":
        return node.child_by_field_name("constructor")
    return None


def call_target(node, source: bytes) -> tuple[str | None, str | None]:
    """Return ``(object, method)`` for a call; ``object`` is None for bare calls."""

    func = unwrap(callee_node(node))
    if func is None:
        return None, None
    if func.type == "identifier":
        return None, identifier_name(func, source)
    if func.type == "member_expression":
        obj = identifier_name(func.child_by_field_name("object"), source)
        prop = identifier_name(func.child_by_field_name("property"), source)
        return obj, prop
    return None, None


def string_literal_value(node, source: bytes) -> str | None:
    if node is None:
        return None
    if node.type == "string":
        text = node_text(node, source).strip()
        if len(text) >= 2 and text[0] == text[-1] and text[0] in {"'", '"'}:
            return text[1:-1]
        return text
    if node.type == "template_string":
        if any(child.type == "template_substitution" for child in node.named_children):
            return None
        return node_text(node, source).strip()[1:-1]
    if node.type == "string_fragment":
        return node_text(node, source)
    return None


def walk(node) -> Iterator:
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def parser_for_extension(ext: str) -> Parser | None:
    if ext in {".ts", ".mts", ".cts"}:
        return TS_PARSER
    if ext == ".tsx":
        return TSX_PARSER
    if ext in {".js", ".mjs", ".cjs", ".jsx"}:
        return JS_PARSER
    return None


def is_test_file(path: Path) -> bool:
    stem = Path(path.stem).suffix.lower()
    return stem in TEST_FILE_SUFFIXES


def _is_ignored(relative: Path, ignore: Iterable[str]) -> bool:
    text = relative.as_posix()
    for pattern in ignore:
        if not pattern:
            continue
        if pattern in relative.parts or fnmatch.fnmatch(text, pattern):
            return True
    return False


def iter_source_files(
    root: Path,
    extensions: Iterable[str] | None = None,
    ignore: Iterable[str] = (),
) -> List[Path]:
    extensions = set(extensions or SUPPORTED_EXTENSIONS)
    ignore = list(ignore)
    candidates: List[Path] = []
    for path in root.rglob("*"):
        if not path.is_file() or path.suffix.lower() not in extensions:
            continue
        if ignore and _is_ignored(path.relative_to(root), ignore):
            continue
        candidates.append(path)
    return sorted(candidates)


def _binding_names(node, source: bytes) -> List[Tuple[str, Optional[str]]]:
    """Local names bound by a declarator, each with the property it reads (or None)."""

    if node is None:
        return []
    if node.type == "identifier":
        return [(node_text(node, source), None)]
    names: List[Tuple[str, Optional[str]]] = []
    if node.type == "object_pattern":
        for child in node.named_children:
            if child.type == "shorthand_property_identifier_pattern":
                name = node_text(child, source)
                names.append((name, name))
            elif child.type == "pair_pattern":
                # const { exec: run } = require('child_process')
                key = node_text(child.child_by_field_name("key"), source).strip("'\"")
                alias = identifier_name(child.child_by_field_name("value"), source)
                if alias:
                    names.append((alias, key or None))
            elif child.type == "object_assignment_pattern":
                alias = identifier_name(child.child_by_field_name("left"), source)
                if alias:
                    names.append((alias, alias))
    return names


def _iter_bindings(tree, source: bytes) -> Iterator[Tuple[str, str, Optional[str]]]:
    for node in walk(tree.root_node):
        if node.type == "variable_declarator":
            value = unwrap(node.child_by_field_name("value"))
            if value is None or value.type != "call_expression":
                continue
            func = value.child_by_field_name("function")
            if func is None or identifier_name(func, source) != "require":
                continue
            args = call_arguments(value)
            if not args:
                continue
            literal = string_literal_value(args[0], source)
            if not literal:
                continue
            for alias, member in _binding_names(node.child_by_field_name("name"), source):
                yield alias, literal, member
        elif node.type == "import_statement":
            source_node = node.child_by_field_name("source")
            literal = string_literal_value(source_node, source)
            if not literal:
                continue
            clause = next((child for child in node.children if child.type == "import_clause"), None)
            if clause is None:
                continue
            for child in clause.named_children:
                if child.type == "identifier":
                    yield node_text(child, source), literal, None
                elif child.type == "namespace_import":
                    identifier_node = next(
                        (c for c in child.children if c.type == "identifier"),
                        None,
                    )
                    alias = identifier_name(identifier_node, source)
                    if alias:
                        yield alias, literal, None
                elif child.type == "named_imports":
                    for spec in child.named_children:
                        if spec.type != "import_specifier":
                            continue
                        imported = identifier_name(spec.child_by_field_name("name"), source)
                        alias = identifier_name(spec.child_by_field_name("alias"), source) or imported
                        if alias:
                            yield alias, literal, imported


def collect_module_bindings(tree, source: bytes) -> Dict[str, str]:
    """Map local names to the module they were imported or required from."""

    return {alias: module for alias, module, _ in _iter_bindings(tree, source)}


def collect_imported_members(tree, source: bytes) -> Dict[str, str]:
    """Map destructured/named-import locals to the exported name they stand for."""

    return {alias: member for alias, _, member in _iter_bindings(tree, source) if member}
