"""Source scanning: directory walk and Go syntax extraction."""

from .models import ScanFault, ScannedFile
from .scanner import SourceScanner, is_ignored
from .syntax import Comment, CommentGroup, FileSyntax, Symbol, SymbolKind
from .syntax_extractor import GoSyntaxExtractor, count_lines, is_exported
from .treesitter_parser import TreeSitterParser

__all__ = [
    "Comment",
    "CommentGroup",
    "FileSyntax",
    "GoSyntaxExtractor",
    "ScanFault",
    "ScannedFile",
    "SourceScanner",
    "Symbol",
    "SymbolKind",
    "TreeSitterParser",
    "count_lines",
    "is_ignored",
    "is_exported",
]
