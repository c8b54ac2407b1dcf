"""Business headlines from NewsData.io.

News is an optional feed: apart from a missing API key, every failure
(timeout, bad status, unexpected payload) degrades to an empty list.
"""

import httpx

from fxtrack.config import NewsSettings
from fxtrack.exceptions import ProviderError
from fxtrack.logging import get_logger
from fxtrack.models import NewsItem

logger = get_logger(__name__)

COUNTRY_CODES = {
    "US": "us",
    "GB": "gb",
    "EU": "eu",
    "KE": "ke",
    "NG": "ng",
    "ZA": "za",
}
DEFAULT_COUNTRY = "us"


def _to_item(article: dict, index: int) -> NewsItem:
    summary = article.get("description")
    if not summary:
        content = article.get("content")
        summary = f"{content[:150]}..." if isinstance(content, str) and content else ""
    return NewsItem(
        id=article.get("article_id") or f"news-{index}",
        title=article.get("title") or "",
        summary=summary,
        url=article.get("link") or "",
        published_at=article.get("pubDate") or "",
        source=article.get("source_name") or "News Source",
    )


class NewsFeed:
    """Fetches and normalises the latest business headlines for a country."""

    def __init__(self, settings: NewsSettings, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._client = client or httpx.AsyncClient()

    async def close(self) -> None:
        await self._client.aclose()

    async def fetch(self, country_code: str) -> list[NewsItem]:
        api_key = self._settings.api_key.get_secret_value()
        if not api_key:
            raise ProviderError("NewsData.io API key is not set")

        country = COUNTRY_CODES.get(country_code.upper(), DEFAULT_COUNTRY)
        params = {
            "category": "business",
            "language": "en",
            "size": str(self._settings.page_size),
        }
        if country != DEFAULT_COUNTRY:
            params["country"] = country

        try:
            response = await self._client.get(
                self._settings.base_url,
                params=params,
                headers={"Accept": "application/json", "X-ACCESS-KEY": api_key},
                timeout=self._settings.timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("news_fetch_failed", country=country, error=str(e))
            return []

        results = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(results, list):
            logger.warning("news_payload_invalid", country=country)
            return []

        items = [_to_item(a, i) for i, a in enumerate(results) if isinstance(a, dict)]
        items = [item for item in items if item.title.strip() and item.url]
        # pubDate is "YYYY-MM-DD HH:MM:SS", so string order is chronological
        items.sort(key=lambda item: item.published_at, reverse=True)
        return items[: self._settings.max_items]
