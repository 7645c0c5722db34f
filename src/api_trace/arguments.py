"""
Recovers a readable value for a call argument.

Purely syntactic and local to the enclosing method: a literal is returned as
its value, an identifier is looked up among the method's local declarations
(one hop, no reassignment tracking), and any other expression is returned as
its source text.
"""
import re
from typing import Optional

from tree_sitter import Node

from api_trace.tree_sitter_helpers import iter_descendants, node_text

LITERAL_TYPES = frozenset({
    "string_literal",
    "verbatim_string_literal",
    "raw_string_literal",
    "character_literal",
    "integer_literal",
    "real_literal",
    "boolean_literal",
    "null_literal",
})

UNRESOLVED_VARIABLE = "Unresolved variable: {name}"

_SIMPLE_ESCAPES = {
    "'": "'", '"': '"', "\\": "\\", "0": "\0", "a": "\a", "b": "\b",
    "e": "\x1b", "f": "\f", "n": "\n", "r": "\r", "t": "\t", "v": "\v",
}
_ESCAPE_RE = re.compile(r"\\(u[0-9a-fA-F]{4}|U[0-9a-fA-F]{8}|x[0-9a-fA-F]{1,4}|.)", re.DOTALL)


def _unescape(body: str) -> str:
    def replace(match: re.Match) -> str:
        esc = match.group(1)
        if esc[0] in "uUx" and len(esc) > 1:
            code = int(esc[1:], 16)
            return chr(code) if code <= 0x10FFFF else match.group(0)
        return _SIMPLE_ESCAPES.get(esc, esc)

    text = _ESCAPE_RE.sub(replace, body)
    # \uD83D\uDE00 decodes to two surrogate halves; pair them up, and turn
    # any left unpaired into U+FFFD so the value stays encodable
    return text.encode("utf-16", "surrogatepass").decode("utf-16", "replace")


def _unwrap_literal(node: Node) -> Node:
    # some grammar versions wrap concrete literals in a `literal` node
    if node.type == "literal" and node.named_child_count == 1:
        return node.named_children[0]
    return node


def is_literal(node: Node) -> bool:
    return _unwrap_literal(node).type in LITERAL_TYPES


def literal_value(source_bytes: bytes, node: Node) -> str:
    """
    Value text of a literal: strings lose their quotes and have escapes
    decoded, other literals are returned as written.
    """
    node = _unwrap_literal(node)
    text = node_text(source_bytes, node)
    if node.type == "string_literal":
        if text.endswith("u8"):
            text = text[:-2]
        return _unescape(text[1:-1])
    if node.type == "verbatim_string_literal":
        return text.lstrip("@")[1:-1].replace('""', '"')
    if node.type == "raw_string_literal":
        # indentation trimming of multi-line raw strings is not reproduced
        return text.strip('"').strip("\r\n")
    if node.type == "character_literal":
        return _unescape(text[1:-1])
    return text


def _declarator_name(declarator: Node) -> Optional[Node]:
    name = declarator.child_by_field_name("name")
    if name is not None:
        return name
    for child in declarator.children:
        if child.type == "identifier":
            return child
    return None


def _declarator_initializer(declarator: Node) -> Optional[Node]:
    """
    The initializer expression of `x = <expr>`. Older grammars wrap it in an
    `equals_value_clause`, newer ones put `=` and the expression inline.
    """
    seen_equals = False
    for child in declarator.children:
        if child.type == "equals_value_clause":
            named = child.named_children
            return named[-1] if named else None
        if child.type == "=":
            seen_equals = True
        elif seen_equals and child.is_named:
            return child
    return None


def find_local_initializer(source_bytes: bytes, method_node: Node, name: str) -> Optional[Node]:
    """First declarator named `name` in the method that has an initializer."""
    for node in iter_descendants(method_node):
        if node.type != "variable_declarator":
            continue
        name_node = _declarator_name(node)
        if name_node is None or node_text(source_bytes, name_node) != name:
            continue
        initializer = _declarator_initializer(node)
        if initializer is not None:
            return initializer
    return None


def argument_expression(argument: Node) -> Optional[Node]:
    """
    The expression of an `argument` node, skipping a `name:` prefix and
    ref/out/in modifiers.
    """
    if argument.type != "argument":
        return argument
    named = [c for c in argument.named_children if c.type != "name_colon"]
    if not named:
        return None
    return named[-1]


def resolve_argument_value(source_bytes: bytes, expression: Node, method_node: Node) -> str:
    if is_literal(expression):
        return literal_value(source_bytes, expression)

    if expression.type == "identifier":
        name = node_text(source_bytes, expression)
        initializer = find_local_initializer(source_bytes, method_node, name)
        if initializer is None:
            return UNRESOLVED_VARIABLE.format(name=name)
        if is_literal(initializer):
            return literal_value(source_bytes, initializer)
        return node_text(source_bytes, initializer)

    # binary_expression (concatenation) and everything else: source text as written
    return node_text(source_bytes, expression)
