"""Wikipedia REST page-summary client."""

from typing import Any
from urllib.parse import quote

import httpx

from utils.logger import get_logger

from .contracts import EncyclopediaSummary

logger = get_logger(__name__)

SUMMARY_URL_TEMPLATE = "https://{lang}.wikipedia.org/api/rest_v1/page/summary/{title}"


def summary_url(query: str, language: str) -> str:
    return SUMMARY_URL_TEMPLATE.format(lang=language, title=quote(query, safe=""))


def parse_summary(payload: Any, language: str) -> EncyclopediaSummary | None:
    if not isinstance(payload, dict):
        return None
    extract = payload.get("extract")
    if not isinstance(extract, str) or not extract.strip():
        return None

    page_url = None
    content_urls = payload.get("content_urls")
    if isinstance(content_urls, dict) and isinstance(content_urls.get("desktop"), dict):
        page_url = content_urls["desktop"].get("page")

    return EncyclopediaSummary(
        title=payload.get("title") or "",
        text=extract,
        url=page_url,
        language=language,
    )


class WikipediaClient:
    """Anonymous summary lookups for one query in one language. Never raises."""

    def __init__(self, http_client: httpx.AsyncClient, *, user_agent: str = "Claritool/1.0"):
        self.client = http_client
        self.user_agent = user_agent

    async def summary(self, query: str, language: str) -> EncyclopediaSummary | None:
        try:
            response = await self.client.get(
                summary_url(query, language), headers={"User-Agent": self.user_agent}
            )
            if not response.is_success:
                logger.info(
                    "Wikipedia summary not available",
                    extra={"extra_fields": {"language": language, "status_code": response.status_code}},
                )
                return None
            payload = response.json()
        except Exception as exc:
            logger.warning(
                "Wikipedia lookup failed",
                extra={
                    "extra_fields": {
                        "language": language,
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                    }
                },
            )
            return None

        return parse_summary(payload, language)
