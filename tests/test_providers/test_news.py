"""Tests for the NewsData.io headline feed."""

import httpx
import pytest
from pydantic import SecretStr

from fxtrack.config import NewsSettings
from fxtrack.exceptions import ProviderError
from fxtrack.providers.news import NewsFeed


def _feed(handler, api_key: str = "news-key", **overrides) -> NewsFeed:  # type: ignore[no-untyped-def]
    settings = NewsSettings(api_key=SecretStr(api_key), **overrides)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return NewsFeed(settings, client=client)


def _article(title: str, pub_date: str, **extra) -> dict:  # type: ignore[no-untyped-def]
    return {
        "article_id": f"id-{title}",
        "title": title,
        "link": f"https://news.example/{title}",
        "pubDate": pub_date,
        "source_name": "Daily",
        **extra,
    }


class TestNewsFeed:
    @pytest.mark.asyncio
    async def test_request_shape_for_mapped_country(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"results": []})

        await _feed(handler).fetch("ke")

        params = requests[0].url.params
        assert params["category"] == "business"
        assert params["language"] == "en"
        assert params["size"] == "5"
        assert params["country"] == "ke"
        assert requests[0].headers["X-ACCESS-KEY"] == "news-key"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("country_code", ["US", "XX"])
    async def test_default_country_sends_no_country_param(self, country_code: str) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"results": []})

        await _feed(handler).fetch(country_code)

        assert "country" not in requests[0].url.params

    @pytest.mark.asyncio
    async def test_missing_key_raises(self) -> None:
        feed = _feed(lambda request: httpx.Response(200, json={"results": []}), api_key="")
        with pytest.raises(ProviderError, match="API key"):
            await feed.fetch("KE")

    @pytest.mark.asyncio
    async def test_failures_degrade_to_empty(self) -> None:
        assert await _feed(lambda request: httpx.Response(500)).fetch("KE") == []
        assert await _feed(lambda request: httpx.Response(200, text="oops")).fetch("KE") == []
        assert await _feed(lambda request: httpx.Response(200, json={"results": "x"})).fetch(
            "KE"
        ) == []

    @pytest.mark.asyncio
    async def test_normalise_filter_sort(self) -> None:
        results = [
            _article("older", "2024-03-01 08:00:00", description="first"),
            _article("newer", "2024-03-02 08:00:00", content="x" * 200),
            _article("", "2024-03-03 08:00:00"),
            {"title": "no link", "pubDate": "2024-03-04 08:00:00"},
        ]
        feed = _feed(lambda request: httpx.Response(200, json={"results": results}))

        items = await feed.fetch("KE")

        assert [item.title for item in items] == ["newer", "older"]
        assert items[0].summary == "x" * 150 + "..."
        assert items[1].summary == "first"
        assert items[1].source == "Daily"
        assert items[1].url == "https://news.example/older"

    @pytest.mark.asyncio
    async def test_capped_at_max_items(self) -> None:
        results = [_article(f"t{i}", f"2024-03-01 08:{i:02d}:00") for i in range(30)]
        feed = _feed(lambda request: httpx.Response(200, json={"results": results}), max_items=20)

        items = await feed.fetch("KE")

        assert len(items) == 20
        assert items[0].title == "t29"
