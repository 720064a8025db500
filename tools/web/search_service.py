"""Search aggregation: instant answer + encyclopedia summary with language fallback."""

import asyncio

from utils.logger import get_logger

from .cache import InMemoryTTLCache
from .contracts import SearchResult
from .duckduckgo_client import DuckDuckGoClient
from .wikipedia_client import WikipediaClient

logger = get_logger(__name__)


class SearchAggregator:
    """
    Merge an instant-answer lookup and an encyclopedia summary into one SearchResult.

    The instant-answer and primary-language summary lookups run concurrently.
    The secondary-language summary is requested only when the primary one
    yields nothing. Each lookup handles its own failures; a failed source just
    leaves its field empty.
    """

    def __init__(
        self,
        *,
        instant_client: DuckDuckGoClient,
        encyclopedia_client: WikipediaClient,
        primary_language: str = "pt",
        secondary_language: str | None = "en",
        cache: InMemoryTTLCache | None = None,
    ):
        self.instant_client = instant_client
        self.encyclopedia_client = encyclopedia_client
        self.primary_language = primary_language
        self.secondary_language = secondary_language
        self.cache = cache

    async def search(self, query: str) -> SearchResult:
        """
        Run the lookups for a query.

        Raises:
            ValueError: if the query is empty or blank
        """
        query = (query or "").strip()
        if not query:
            raise ValueError("query is required")

        if self.cache is not None:
            cached = self.cache.get(query)
            if cached is not None:
                logger.info("Search cache hit", extra={"extra_fields": {"query": query[:100]}})
                return cached

        instant_lookup, encyclopedia = await asyncio.gather(
            self.instant_client.lookup(query),
            self.encyclopedia_client.summary(query, self.primary_language),
        )

        if encyclopedia is None and self.secondary_language and self.secondary_language != self.primary_language:
            encyclopedia = await self.encyclopedia_client.summary(query, self.secondary_language)

        result = SearchResult(
            query=query,
            instant=instant_lookup.instant,
            encyclopedia=encyclopedia,
            related=instant_lookup.related,
        )

        logger.info(
            "Search complete",
            extra={
                "extra_fields": {
                    "query": query[:100],
                    "has_instant": result.instant is not None,
                    "encyclopedia_language": encyclopedia.language if encyclopedia else None,
                    "related_count": len(result.related),
                }
            },
        )

        if self.cache is not None and not result.is_empty:
            self.cache.set(query, result)
        return result
