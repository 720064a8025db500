"""Web search context tools for Claritool."""

from .contracts import EncyclopediaSummary, InstantAnswer, RelatedLink, SearchResult
from .factory import create_search_service
from .research_pack import build_system_preamble, format_search_context
from .search_service import SearchAggregator

__all__ = [
    "EncyclopediaSummary",
    "InstantAnswer",
    "RelatedLink",
    "SearchAggregator",
    "SearchResult",
    "build_system_preamble",
    "create_search_service",
    "format_search_context",
]
