"""Exchange-rate quote providers.

QuoteProvider is the contract the ingest path depends on; the concrete
ExchangeRateApiProvider talks to exchangerate-api.com over httpx. Every
upstream failure surfaces as ProviderError so the caller can fail the one
base currency and carry on with the rest.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from datetime import date, timedelta

import httpx

from fxtrack.config import QuoteProviderSettings
from fxtrack.exceptions import ProviderError
from fxtrack.logging import get_logger
from fxtrack.models import DailyRate, QuoteSnapshot

logger = get_logger(__name__)


class QuoteProvider(ABC):
    """Abstract source of FX quotes."""

    @abstractmethod
    async def fetch(self, base_currency: str) -> QuoteSnapshot:
        """Fetch the full quote table for a base currency."""
        ...

    @abstractmethod
    async def fetch_daily_history(
        self, base_currency: str, target_currency: str, start: date, end: date
    ) -> list[DailyRate]:
        """Fetch one rate per day for a pair, start and end inclusive."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release network resources."""
        ...


def _parse_rates(payload: object, key: str) -> dict[str, float]:
    if not isinstance(payload, dict) or not isinstance(payload.get(key), dict):
        raise ProviderError(f"quote payload has no '{key}' table")
    try:
        return {str(code): float(rate) for code, rate in payload[key].items()}
    except (TypeError, ValueError) as e:
        raise ProviderError(f"non-numeric rate in quote payload: {e}") from e


class ExchangeRateApiProvider(QuoteProvider):
    """Quotes from exchangerate-api.com.

    Latest quotes use the keyless v4 endpoint and the transport's default
    timeout unless ``timeout_seconds`` is configured. Daily history uses the
    keyed v6 endpoint, one request per day.
    """

    def __init__(
        self,
        settings: QuoteProviderSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        if client is None:
            kwargs: dict = {}
            if settings.timeout_seconds is not None:
                kwargs["timeout"] = settings.timeout_seconds
            client = httpx.AsyncClient(**kwargs)
        self._client = client

    async def close(self) -> None:
        await self._client.aclose()

    async def fetch(self, base_currency: str) -> QuoteSnapshot:
        url = f"{self._settings.latest_url.rstrip('/')}/{base_currency}"
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"quote fetch for {base_currency} failed with status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(f"quote fetch for {base_currency} failed: {e}") from e
        except ValueError as e:
            raise ProviderError(f"quote payload for {base_currency} is not JSON") from e

        rates = _parse_rates(payload, "rates")
        logger.debug("quotes_fetched", base_currency=base_currency, currencies=len(rates))
        return QuoteSnapshot(
            base_currency=base_currency,
            rates=rates,
            timestamp_ms=int(time.time() * 1000),
        )

    async def fetch_daily_history(
        self, base_currency: str, target_currency: str, start: date, end: date
    ) -> list[DailyRate]:
        """Walk each day from start to end. Days that fail or lack the pair are skipped.

        Raises ProviderError if no API key is configured or the transport fails.
        """
        api_key = self._settings.api_key.get_secret_value()
        if not api_key:
            raise ProviderError("exchange rate API key not configured")
        if end < start:
            raise ValueError("end date is before start date")

        base_url = self._settings.history_url.rstrip("/")
        results: list[DailyRate] = []
        day = start
        while day <= end:
            url = (
                f"{base_url}/{api_key}/history/{base_currency}/"
                f"{day.year}/{day.month}/{day.day}"
            )
            try:
                response = await self._client.get(url)
            except httpx.HTTPError as e:
                raise ProviderError(f"daily history fetch failed: {e}") from e

            if response.is_success:
                rate = self._daily_rate(response, target_currency)
                if rate is not None:
                    results.append(DailyRate(date=day.isoformat(), rate=rate))
            else:
                logger.warning(
                    "daily_history_day_failed",
                    date=day.isoformat(),
                    status=response.status_code,
                )

            day += timedelta(days=1)
            if day <= end:
                await asyncio.sleep(self._settings.history_request_delay)

        return results

    @staticmethod
    def _daily_rate(response: httpx.Response, target_currency: str) -> float | None:
        try:
            payload = response.json()
        except ValueError:
            return None
        if not isinstance(payload, dict) or payload.get("result") != "success":
            return None
        rate = (payload.get("conversion_rates") or {}).get(target_currency)
        return float(rate) if rate else None
