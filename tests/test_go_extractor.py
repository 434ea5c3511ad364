"""Tests for scanning/syntax_extractor.py (tree-sitter Go)."""

from textwrap import dedent

import pytest

from kthulu_insight.exceptions import ParseError
from kthulu_insight.scanning import GoSyntaxExtractor
from kthulu_insight.scanning.syntax_extractor import count_lines, is_exported


def _extract(source: str):
    return GoSyntaxExtractor().extract(dedent(source).lstrip("\n").encode("utf-8"), "x.go")


SOURCE = """
    // @kthulu:module:order
    package order

    import (
        "fmt"
        api "example.com/shop/internal/modules/user"
    )

    import "strings"

    // OrderService places orders.
    // @kthulu:service:orders
    type OrderService struct{}

    func (s *OrderService) Place() error {
        return fmt.Errorf(strings.ToUpper("todo"))
    }

    func helper() {}

    const (
        MaxItems = 10
        minItems = 1
    )

    var Default, other = 1, 2
"""


class TestHelpers:
    def test_is_exported(self):
        assert is_exported("OrderService")
        assert not is_exported("helper")
        assert not is_exported("")

    @pytest.mark.parametrize(
        "source, expected",
        [(b"", 0), (b"package a", 1), (b"package a\n", 1), (b"package a\n\nfunc F() {}\n", 3)],
    )
    def test_count_lines(self, source, expected):
        assert count_lines(source) == expected


class TestGoSyntaxExtractor:
    def test_package_and_imports(self):
        syntax = _extract(SOURCE)
        assert syntax.package_name == "order"
        assert syntax.imports == ["fmt", "example.com/shop/internal/modules/user", "strings"]

    def test_exported_symbols_only(self):
        syntax = _extract(SOURCE)
        names = {(s.name, s.kind) for s in syntax.symbols}
        assert names == {
            ("OrderService", "type"),
            ("Place", "function"),
            ("MaxItems", "constant"),
            ("Default", "variable"),
        }

    def test_symbol_lines_are_one_based(self):
        syntax = _extract(SOURCE)
        by_name = {s.name: s for s in syntax.symbols}
        assert by_name["OrderService"].line == 13

    def test_doc_comment_attaches_symbol(self):
        syntax = _extract(SOURCE)
        documented = [g for g in syntax.comment_groups if g.symbol is not None]
        assert len(documented) == 1
        assert documented[0].symbol == "OrderService"
        assert documented[0].line == 11
        assert documented[0].end_line == 12

    def test_package_comment_is_not_attached(self):
        syntax = _extract(SOURCE)
        first = syntax.comment_groups[0]
        assert first.line == 1
        assert first.symbol is None

    def test_separated_comment_does_not_document(self):
        syntax = _extract(
            """
            package a

            // @kthulu:service:floating

            func Run() {}
            """
        )
        assert syntax.comment_groups[0].symbol is None

    def test_block_comment_group(self):
        syntax = _extract(
            """
            package a

            /*
             * @kthulu:module:billing
             */
            type Invoice struct{}
            """
        )
        assert len(syntax.comment_groups) == 1
        assert syntax.comment_groups[0].symbol == "Invoice"

    def test_line_count(self):
        syntax = _extract(SOURCE)
        assert syntax.line_count == len(dedent(SOURCE).lstrip("\n").splitlines())

    def test_syntax_error_raises(self):
        with pytest.raises(ParseError) as exc_info:
            _extract(
                """
                package broken

                func Oops( {
                """
            )
        assert exc_info.value.filepath == "x.go"
        assert exc_info.value.line >= 1
