"""Tag records parsed from ``@kthulu:`` annotations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TagType(str, Enum):
    """Closed set of tag types the engine understands.

    Tags with any other type are preserved verbatim; ``Tag.type`` is a plain
    string so custom types round-trip.
    """

    MODULE = "module"
    DEPENDENCY = "dependency"
    REQUIRES = "requires"
    PROVIDES = "provides"
    OBSERVABLE = "observable"
    SECURITY = "security"
    COMPLIANCE = "compliance"
    HANDLER = "handler"
    SERVICE = "service"
    REPOSITORY = "repository"
    DOMAIN = "domain"
    GENERATED = "generated"
    PROJECT = "project"


KNOWN_TAG_TYPES = frozenset(t.value for t in TagType)


@dataclass
class Tag:
    """A parsed annotation.

    Attributes:
        type: Tag type (one of TagType or a custom string)
        value: Text after the second colon, None when absent or empty
        attributes: key -> value map, empty when no attributes are present
        line: 1-based line the annotation was found on
        content: Raw comment body starting at ``@kthulu:``
        symbol: Exported symbol documented by the comment group, if any
    """

    type: str
    value: str | None = None
    attributes: dict[str, str] = field(default_factory=dict)
    line: int = 0
    content: str = ""
    symbol: str | None = None

    @property
    def is_known(self) -> bool:
        return self.type in KNOWN_TAG_TYPES

    def attr(self, key: str, default: str | None = None) -> str | None:
        return self.attributes.get(key, default)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "value": self.value,
            "attributes": dict(self.attributes),
            "line": self.line,
            "content": self.content,
            "symbol": self.symbol,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Tag:
        return cls(
            type=data["type"],
            value=data.get("value"),
            attributes=dict(data.get("attributes") or {}),
            line=int(data.get("line", 0)),
            content=data.get("content", ""),
            symbol=data.get("symbol"),
        )
