"""Factory for building the search aggregator from configuration."""

import httpx

from config.config import Config
from utils.logger import get_logger

from .cache import InMemoryTTLCache
from .duckduckgo_client import DuckDuckGoClient
from .search_service import SearchAggregator
from .wikipedia_client import WikipediaClient

logger = get_logger(__name__)


def create_search_service(config: Config, http_client: httpx.AsyncClient | None = None) -> SearchAggregator:
    """
    Build a SearchAggregator.

    Args:
        config: Application configuration (timeouts, languages, user agent, cache TTL)
        http_client: Shared client; a new one with SEARCH_TIMEOUT_S is created if omitted

    Returns:
        Configured SearchAggregator
    """
    client = http_client or httpx.AsyncClient(timeout=config.SEARCH_TIMEOUT_S, follow_redirects=True)
    user_agent = config.SEARCH_USER_AGENT

    cache = None
    if config.SEARCH_CACHE_TTL_SECONDS > 0:
        cache = InMemoryTTLCache(ttl_seconds=config.SEARCH_CACHE_TTL_SECONDS)

    logger.info(
        "Search service configured",
        extra={
            "extra_fields": {
                "primary_language": config.WIKI_PRIMARY_LANG,
                "secondary_language": config.WIKI_SECONDARY_LANG,
                "cache_ttl_seconds": config.SEARCH_CACHE_TTL_SECONDS,
            }
        },
    )

    return SearchAggregator(
        instant_client=DuckDuckGoClient(client, user_agent=user_agent),
        encyclopedia_client=WikipediaClient(client, user_agent=user_agent),
        primary_language=config.WIKI_PRIMARY_LANG,
        secondary_language=config.WIKI_SECONDARY_LANG,
        cache=cache,
    )
