"""DuckDuckGo Instant Answer API client."""

from dataclasses import dataclass
from typing import Any

import httpx

from utils.logger import get_logger

from .contracts import MAX_RELATED_LINKS, InstantAnswer, RelatedLink

logger = get_logger(__name__)

DDG_API_URL = "https://api.duckduckgo.com/"


@dataclass(frozen=True)
class InstantAnswerLookup:
    instant: InstantAnswer | None = None
    related: tuple[RelatedLink, ...] = ()


def parse_instant_answer(payload: Any, query: str) -> InstantAnswerLookup:
    """
    Map a DuckDuckGo JSON payload to an InstantAnswerLookup.

    Args:
        payload: Decoded JSON body (anything; non-dicts yield an empty lookup)
        query: Original query, used as the title when Heading is missing

    Returns:
        InstantAnswerLookup with the abstract (if any) and up to 5 related snippets
    """
    if not isinstance(payload, dict):
        return InstantAnswerLookup()

    instant = None
    abstract = payload.get("Abstract")
    if isinstance(abstract, str) and abstract.strip():
        instant = InstantAnswer(
            title=payload.get("Heading") or query,
            text=abstract,
            source=payload.get("AbstractSource") or None,
            url=payload.get("AbstractURL") or None,
        )

    related: list[RelatedLink] = []
    topics = payload.get("RelatedTopics")
    if isinstance(topics, list):
        for topic in topics:
            if len(related) >= MAX_RELATED_LINKS:
                break
            if not isinstance(topic, dict):
                continue
            text = topic.get("Text")
            if not isinstance(text, str) or not text.strip():
                continue
            related.append(RelatedLink(text=text, url=topic.get("FirstURL") or None))

    return InstantAnswerLookup(instant=instant, related=tuple(related))


class DuckDuckGoClient:
    """Anonymous lookups against the instant-answer API. Never raises."""

    def __init__(self, http_client: httpx.AsyncClient, *, user_agent: str = "Claritool/1.0"):
        self.client = http_client
        self.user_agent = user_agent

    async def lookup(self, query: str) -> InstantAnswerLookup:
        params = {"q": query, "format": "json", "no_html": "1", "skip_disambig": "1"}
        try:
            response = await self.client.get(
                DDG_API_URL, params=params, headers={"User-Agent": self.user_agent}
            )
            payload = response.json()
        except Exception as exc:
            logger.warning(
                "DuckDuckGo lookup failed",
                extra={"extra_fields": {"query": query[:100], "error": str(exc), "error_type": type(exc).__name__}},
            )
            return InstantAnswerLookup()

        return parse_instant_answer(payload, query)
