"""Tree-sitter parser wrapper for Go sources.

Usage:
    parser = TreeSitterParser()
    tree = parser.parse(code_bytes)
    line = first_error_line(tree.root_node)
"""

from __future__ import annotations

import threading

import tree_sitter_go
from tree_sitter import Language, Node, Parser, Tree

# tree-sitter >= 0.23 returns a PyCapsule; wrap in Language()
GO_LANGUAGE = Language(tree_sitter_go.language())


class TreeSitterParser:
    """Wrapper around a tree-sitter Go parser.

    Parser objects are not shared between threads; each thread lazily gets
    its own instance.
    """

    def __init__(self) -> None:
        self._local = threading.local()

    def _parser(self) -> Parser:
        parser = getattr(self._local, "parser", None)
        if parser is None:
            parser = Parser(GO_LANGUAGE)
            self._local.parser = parser
        return parser

    def parse(self, code: bytes) -> Tree:
        """Parse code and return the syntax tree (possibly containing ERROR nodes)."""
        return self._parser().parse(code)


def node_text(node: Node, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def node_line(node: Node) -> int:
    """1-based start line of a node."""
    return node.start_point[0] + 1


def first_error_line(root: Node) -> int | None:
    """Line of the first ERROR or MISSING node in document order, or None."""
    if not root.has_error:
        return None

    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node_line(node)
        # Push children reversed so the leftmost is visited first
        stack.extend(child for child in reversed(node.children) if child.has_error)
    return node_line(root)
