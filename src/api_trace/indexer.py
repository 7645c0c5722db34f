import logging
import threading
from typing import Iterable, Optional

from tree_sitter import Language, Node, Parser, Tree

from api_trace.arguments import argument_expression, resolve_argument_value
from api_trace.caller_graph import CallerGraph
from api_trace.config import DEFAULT_API_METHODS, NO_PARAMETER
from api_trace.models.ast_models import ApiInvocationRecord, MethodIdentity
from api_trace.tree_sitter_helpers import (
    enclosing_ancestor,
    iter_descendants,
    node_point,
    node_text,
    simple_name,
)

logger = logging.getLogger(__name__)

METHOD_DECLARATION_TYPES = ("method_declaration",)


# --- Tree-sitter language loading -------------------------------------------

def load_csharp_language() -> Language:
    """
    Loads the Tree-sitter C# grammar shipped by the `tree-sitter-c-sharp`
    package.
    """
    try:
        import tree_sitter_c_sharp
    except ImportError as exc:
        raise RuntimeError(
            "Could not load the C# grammar.\n"
            "- Install `tree-sitter-c-sharp` (pip install tree-sitter-c-sharp)."
        ) from exc
    return Language(tree_sitter_c_sharp.language())


# --- The Indexer -------------------------------------------------------------

class CSharpIndexer:
    """
    Walks Tree-sitter C# syntax trees and feeds a shared CallerGraph with
    caller -> callee edges. Calls to the API surface are returned as
    ApiInvocationRecord values.

    One indexer may be used from many threads: each thread gets its own
    Parser, and the graph does its own locking.
    """

    def __init__(self, graph: Optional[CallerGraph] = None,
                 api_methods: Iterable[str] = DEFAULT_API_METHODS):
        self.language = load_csharp_language()
        self.graph = graph if graph is not None else CallerGraph()
        self.api_methods = frozenset(api_methods)
        self._local = threading.local()

    @property
    def parser(self) -> Parser:
        parser = getattr(self._local, "parser", None)
        if parser is None:
            parser = Parser(self.language)
            self._local.parser = parser
        return parser

    def parse(self, source: str) -> Tree:
        """
        Parses a single source string into a Tree-sitter tree.
        """
        return self.parser.parse(source.encode("utf-8"))

    def index_source(self, source: str, file_path: str) -> list[ApiInvocationRecord]:
        """
        Parses & indexes one C# source file. Returns the API calls found in
        it, in source order.
        """
        source_bytes = source.encode("utf-8")
        tree: Tree = self.parser.parse(source_bytes)
        root: Node = tree.root_node
        if root.has_error:
            logger.debug("Syntax errors in %s; indexing the recovered tree", file_path)
        return self._walk_and_index(source_bytes, root, file_path)

    # -- AST helpers ----------------------------------------------------------

    def _walk_and_index(self, source_bytes: bytes, root: Node,
                        file_path: str) -> list[ApiInvocationRecord]:
        records: list[ApiInvocationRecord] = []
        for node in iter_descendants(root):
            if node.type != "invocation_expression":
                continue
            record = self._index_invocation(source_bytes, node, file_path)
            if record is not None:
                records.append(record)
        return records

    def _invoked_name(self, source_bytes: bytes, invocation: Node) -> Optional[str]:
        """
        Simple name of the method being called. Handles `recv.Name(...)`,
        `recv?.Name(...)`, `Name(...)` and generic `Name<T>(...)`. Anything
        else (delegate calls on arbitrary expressions, etc.) is ignored.
        """
        target = invocation.child_by_field_name("function")
        if target is None:
            return None
        if target.type == "conditional_access_expression":
            # recv?.Name(...) wraps the member in the conditional access
            target = next(
                (c for c in reversed(target.named_children)
                 if c.type in ("member_binding_expression", "member_access_expression")),
                None,
            )
            if target is None:
                return None
        if target.type in ("member_access_expression", "member_binding_expression"):
            name_node = target.child_by_field_name("name")
            if name_node is None:
                return None
            return simple_name(source_bytes, name_node)
        if target.type in ("identifier", "generic_name"):
            return simple_name(source_bytes, target)
        return None

    def _index_invocation(self, source_bytes: bytes, invocation: Node,
                          file_path: str) -> Optional[ApiInvocationRecord]:
        invoked_name = self._invoked_name(source_bytes, invocation)
        if not invoked_name:
            return None

        method_node = enclosing_ancestor(invocation, METHOD_DECLARATION_TYPES)
        if method_node is None:
            # field initializers, properties, constructors: out of scope
            return None
        name_node = method_node.child_by_field_name("name")
        if name_node is None:
            return None

        caller = MethodIdentity(node_text(source_bytes, name_node), file_path)
        self.graph.add_edge(invoked_name, caller)

        if invoked_name not in self.api_methods:
            return None

        endpoint = self._first_argument_value(source_bytes, invocation, method_node)
        line, col = node_point(invocation)
        return ApiInvocationRecord(
            api_file=file_path,
            api_method=invoked_name,
            endpoint=endpoint,
            immediate_method=caller,
            line=line,
            col=col,
        )

    def _first_argument_value(self, source_bytes: bytes, invocation: Node,
                              method_node: Node) -> str:
        arguments = invocation.child_by_field_name("arguments")
        if arguments is None:
            return NO_PARAMETER
        first = next((c for c in arguments.named_children if c.type == "argument"), None)
        if first is None:
            return NO_PARAMETER
        expression = argument_expression(first)
        if expression is None:
            return NO_PARAMETER
        return resolve_argument_value(source_bytes, expression, method_node)
