"""Annotation tags: ``@kthulu:<type>[:<value>] [attrs]``."""

from .models import KNOWN_TAG_TYPES, Tag, TagType
from .parser import TAG_PATTERN, TagParser, parse_attributes, smart_split, strip_comment_markers

__all__ = [
    "KNOWN_TAG_TYPES",
    "TAG_PATTERN",
    "Tag",
    "TagParser",
    "TagType",
    "parse_attributes",
    "smart_split",
    "strip_comment_markers",
]
