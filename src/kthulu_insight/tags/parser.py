"""Tag parser: comment text -> Tag records.

Grammar for one comment line, after comment markers are stripped::

    @kthulu:<type>[:<value>][ <attrs>]

``<type>`` is an identifier, ``<value>`` may contain letters, digits, ``_``
and ``-``. ``<attrs>`` is a list of ``key=value`` or bare ``key`` tokens
separated by spaces, commas or tabs. Quoted runs are never split and the
surrounding quotes are removed from values. Bare keys become ``"true"``.
"""

from __future__ import annotations

import re
from typing import Iterable

from ..logging_config import get_logger
from .models import Tag

logger = get_logger(__name__)

TAG_PATTERN = re.compile(
    r"^@kthulu:(?P<type>[A-Za-z_][A-Za-z0-9_]*)"
    r"(?::(?P<value>[A-Za-z0-9_-]*))?"
    r"(?:\s+(?P<attrs>.*))?$"
)

_DELIMITERS = frozenset(" ,\t")
_QUOTES = frozenset("\"'")


def strip_comment_markers(line: str) -> str:
    """Remove ``//``, ``/*``, ``*/`` and block-continuation ``*`` markers."""
    text = line.strip()
    if text.startswith("//"):
        text = text[2:]
    elif text.startswith("/*"):
        text = text[2:]
    if text.endswith("*/"):
        text = text[:-2]
    text = text.strip()
    if text.startswith("*"):
        text = text[1:]
    return text.strip()


def smart_split(text: str) -> list[str]:
    """Split on spaces, commas and tabs outside of quoted runs."""
    tokens: list[str] = []
    current: list[str] = []
    quote: str | None = None

    for ch in text:
        if quote is not None:
            current.append(ch)
            if ch == quote:
                quote = None
        elif ch in _QUOTES:
            quote = ch
            current.append(ch)
        elif ch in _DELIMITERS:
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(ch)

    if current:
        tokens.append("".join(current))
    return tokens


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        return value[1:-1]
    return value


def parse_attributes(text: str | None) -> dict[str, str]:
    """Parse an attribute list into a map. Later duplicate keys win."""
    attributes: dict[str, str] = {}
    if not text:
        return attributes

    for token in smart_split(text):
        if "=" in token:
            key, _, value = token.partition("=")
            key = key.strip()
            if not key:
                continue
            attributes[key] = _unquote(value.strip())
        else:
            attributes[_unquote(token)] = "true"
    return attributes


class TagParser:
    """Extracts tags from comment text."""

    def parse_line(self, line: str, line_number: int, symbol: str | None = None) -> Tag | None:
        """Parse a single comment line; non-matching lines yield None."""
        body = strip_comment_markers(line)
        match = TAG_PATTERN.match(body)
        if match is None:
            return None

        return Tag(
            type=match.group("type"),
            value=match.group("value") or None,
            attributes=parse_attributes(match.group("attrs")),
            line=line_number,
            content=body,
            symbol=symbol,
        )

    def parse_comment(
        self, text: str, start_line: int, symbol: str | None = None
    ) -> list[Tag]:
        """Parse a (possibly multi-line) comment starting at ``start_line``."""
        tags = []
        for offset, raw in enumerate(text.splitlines()):
            tag = self.parse_line(raw, start_line + offset, symbol)
            if tag is not None:
                tags.append(tag)
        return tags

    def parse_groups(self, groups: Iterable) -> list[Tag]:
        """Parse comment groups (objects with ``comments`` and ``symbol``)."""
        tags: list[Tag] = []
        for group in groups:
            for comment in group.comments:
                tags.extend(self.parse_comment(comment.text, comment.line, group.symbol))
        if tags:
            logger.debug(f"Parsed {len(tags)} tags")
        return tags
