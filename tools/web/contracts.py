"""Data contracts for web search context."""

from dataclasses import dataclass, field
from typing import Any

MAX_RELATED_LINKS = 5


@dataclass(frozen=True)
class InstantAnswer:
    """Short direct-answer snippet from the instant-answer provider."""

    title: str
    text: str
    source: str | None = None
    url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "text": self.text, "source": self.source, "url": self.url}


@dataclass(frozen=True)
class EncyclopediaSummary:
    """Lead-section summary of an encyclopedia article."""

    title: str
    text: str
    url: str | None = None
    language: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "text": self.text, "url": self.url}


@dataclass(frozen=True)
class RelatedLink:
    text: str
    url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "url": self.url}


@dataclass(frozen=True)
class SearchResult:
    """Merged lookup result; built once per search and never mutated."""

    query: str
    instant: InstantAnswer | None = None
    encyclopedia: EncyclopediaSummary | None = None
    related: tuple[RelatedLink, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if len(self.related) > MAX_RELATED_LINKS:
            object.__setattr__(self, "related", tuple(self.related[:MAX_RELATED_LINKS]))

    @property
    def is_empty(self) -> bool:
        return self.instant is None and self.encyclopedia is None and not self.related

    def to_dict(self) -> dict[str, Any]:
        """Wire shape: {instant, wiki, related}."""
        return {
            "instant": self.instant.to_dict() if self.instant else None,
            "wiki": self.encyclopedia.to_dict() if self.encyclopedia else None,
            "related": [link.to_dict() for link in self.related],
        }
