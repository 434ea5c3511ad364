"""GoSyntaxExtractor: produces FileSyntax from Go source bytes.

Usage:
    extractor = GoSyntaxExtractor()
    syntax = extractor.extract(source_bytes, "payments/service.go")

Syntax errors raise ParseError with the line of the first error node; the
project analyzer records them as warnings and skips the file.
"""

from __future__ import annotations

from typing import Iterator

from tree_sitter import Node

from ..exceptions import ParseError
from ..logging_config import get_logger
from .syntax import Comment, CommentGroup, FileSyntax, Symbol, SymbolKind
from .treesitter_parser import TreeSitterParser, first_error_line, node_line, node_text

logger = get_logger(__name__)

_SPEC_KINDS = {
    "const_declaration": ("const_spec", SymbolKind.CONSTANT),
    "var_declaration": ("var_spec", SymbolKind.VARIABLE),
    "type_declaration": ("type_spec", SymbolKind.TYPE),
}


def is_exported(name: str) -> bool:
    return bool(name) and name[0].isupper()


def count_lines(source: bytes) -> int:
    if not source:
        return 0
    return source.count(b"\n") + (0 if source.endswith(b"\n") else 1)


class GoSyntaxExtractor:
    """Extracts package, imports, comment groups and exported symbols."""

    def __init__(self, parser: TreeSitterParser | None = None) -> None:
        self._parser = parser or TreeSitterParser()

    def extract(self, source: bytes, path: str) -> FileSyntax:
        tree = self._parser.parse(source)
        root = tree.root_node

        error_line = first_error_line(root)
        if error_line is not None:
            raise ParseError(path, error_line)

        syntax = FileSyntax(path=path, line_count=count_lines(source))
        # (start line, first exported name) of each top-level declaration
        declarations: list[tuple[int, str | None]] = []

        for child in root.named_children:
            if child.type == "package_clause":
                syntax.package_name = self._package_name(child, source)
            elif child.type == "import_declaration":
                syntax.imports.extend(self._imports(child, source))
            elif child.type in ("function_declaration", "method_declaration"):
                name_node = child.child_by_field_name("name")
                name = node_text(name_node, source) if name_node is not None else ""
                exported = None
                if is_exported(name):
                    syntax.symbols.append(Symbol(name, SymbolKind.FUNCTION.value, node_line(child)))
                    exported = name
                declarations.append((node_line(child), exported))
            elif child.type in _SPEC_KINDS:
                symbols = list(self._spec_symbols(child, source))
                syntax.symbols.extend(symbols)
                declarations.append((node_line(child), symbols[0].name if symbols else None))

        groups = self._comment_groups(root, source)
        self._attach_doc_comments(groups, declarations)
        syntax.comment_groups = [group for group, _ in groups]

        logger.debug(
            f"{path}: package={syntax.package_name} imports={len(syntax.imports)} "
            f"symbols={len(syntax.symbols)} comment_groups={len(syntax.comment_groups)}"
        )
        return syntax

    @staticmethod
    def _package_name(node: Node, source: bytes) -> str:
        for child in node.named_children:
            if child.type == "package_identifier":
                return node_text(child, source)
        return ""

    @staticmethod
    def _imports(node: Node, source: bytes) -> Iterator[str]:
        stack = list(reversed(node.named_children))
        while stack:
            current = stack.pop()
            if current.type == "import_spec":
                path_node = current.child_by_field_name("path")
                if path_node is not None:
                    yield node_text(path_node, source).strip("\"`")
            elif current.type == "import_spec_list":
                stack.extend(reversed(current.named_children))

    @staticmethod
    def _spec_symbols(node: Node, source: bytes) -> Iterator[Symbol]:
        spec_type, kind = _SPEC_KINDS[node.type]
        specs: list[Node] = []
        for child in node.named_children:
            if child.type in (spec_type, "type_alias"):
                specs.append(child)
            elif child.type.endswith("_spec_list"):
                specs.extend(c for c in child.named_children if c.type in (spec_type, "type_alias"))

        for spec in specs:
            for name_node in spec.children_by_field_name("name"):
                name = node_text(name_node, source)
                if is_exported(name):
                    yield Symbol(name, kind.value, node_line(name_node))

    @staticmethod
    def _comment_groups(root: Node, source: bytes) -> list[tuple[CommentGroup, bool]]:
        """Group comments; the flag marks groups that sit at file top level."""
        comments: list[Node] = []
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == "comment":
                comments.append(node)
                continue
            stack.extend(node.children)
        comments.sort(key=lambda n: n.start_byte)

        groups: list[tuple[CommentGroup, bool]] = []
        for node in comments:
            comment = Comment(
                text=node_text(node, source),
                line=node_line(node),
                end_line=node.end_point[0] + 1,
            )
            top_level = node.parent is not None and node.parent.type == "source_file"
            line_start = source.rfind(b"\n", 0, node.start_byte) + 1
            starts_line = not source[line_start : node.start_byte].strip()

            if groups and starts_line and comment.line <= groups[-1][0].end_line + 1:
                groups[-1][0].comments.append(comment)
            else:
                groups.append((CommentGroup(comments=[comment]), top_level and starts_line))
        return groups

    @staticmethod
    def _attach_doc_comments(
        groups: list[tuple[CommentGroup, bool]], declarations: list[tuple[int, str | None]]
    ) -> None:
        doc_candidates = {group.end_line: group for group, top_level in groups if top_level}
        for line, name in declarations:
            group = doc_candidates.get(line - 1)
            if group is not None and name is not None:
                group.symbol = name
