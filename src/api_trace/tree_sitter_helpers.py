# --- Tree-sitter plumbing ----------------------------------------------------
from typing import Iterator, Optional

from tree_sitter import Node


def node_text(source_bytes: bytes, node) -> str:
    """
    Converts a node's [start_byte:end_byte] into the corresponding string.
    Tree-sitter nodes only store byte offsets, so we slice the original source.
    """
    return source_bytes[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def node_point(node) -> tuple[int, int]:
    """
    Returns the (line, column) of a node's start in 0-based coordinates.
    Handy for displaying where a method/call was found.
    """
    return (node.start_point[0], node.start_point[1])


def iter_descendants(node: Node) -> Iterator[Node]:
    """
    Pre-order walk over a subtree (the node itself included).

    Uses an explicit stack: C# string concatenations nest left-deep, so a
    recursive walk can run out of Python stack on generated code.
    """
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def enclosing_ancestor(node: Node, types: tuple[str, ...]) -> Optional[Node]:
    """Nearest strict ancestor whose type is one of `types`."""
    parent = node.parent
    while parent is not None:
        if parent.type in types:
            return parent
        parent = parent.parent
    return None


def simple_name(source_bytes: bytes, node) -> str:
    """
    Text of a simple name. For `generic_name` (Foo<T>) only the identifier
    part is returned.
    """
    if node.type == "generic_name":
        for child in node.children:
            if child.type == "identifier":
                return node_text(source_bytes, child)
    return node_text(source_bytes, node)
