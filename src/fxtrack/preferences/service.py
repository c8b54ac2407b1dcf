"""Watch lists and news country per user."""

from fxtrack.alerts.service import require_identity
from fxtrack.data.preferences_store import PreferencesStore
from fxtrack.logging import get_logger
from fxtrack.models import UserPreferences, WatchedPair

logger = get_logger(__name__)

DEFAULT_NEWS_COUNTRY = "KE"

# Major currencies against KES
DEFAULT_PAIRS: tuple[tuple[str, str], ...] = (
    ("USD", "KES"),
    ("EUR", "KES"),
    ("GBP", "KES"),
    ("JPY", "KES"),
    ("AUD", "KES"),
    ("CAD", "KES"),
    ("CHF", "KES"),
    ("CNY", "KES"),
)


def default_watched_pairs() -> list[WatchedPair]:
    return [
        WatchedPair(id=f"{base}-{target}", base_currency=base, target_currency=target, order=i)
        for i, (base, target) in enumerate(DEFAULT_PAIRS)
    ]


class PreferencesService:
    def __init__(self, store: PreferencesStore) -> None:
        self._store = store

    async def get_preferences(self, user_id: str | None) -> UserPreferences | None:
        if not user_id:
            return None
        return await self._store.get(user_id)

    async def initialize_default_pairs(self, user_id: str | None) -> list[WatchedPair]:
        """Give a user the default watch list unless they already have pairs."""
        owner = require_identity(user_id)
        existing = await self._store.get(owner)

        if existing is not None and existing.watched_pairs:
            return existing.watched_pairs

        pairs = default_watched_pairs()
        if existing is not None:
            existing.watched_pairs = pairs
            await self._store.save(existing)
        else:
            await self._store.save(
                UserPreferences(
                    user_id=owner,
                    watched_pairs=pairs,
                    news_country=DEFAULT_NEWS_COUNTRY,
                )
            )
        logger.info("default_pairs_initialized", pairs=len(pairs))
        return pairs

    async def update_preferences(
        self,
        user_id: str | None,
        watched_pairs: list[WatchedPair] | None = None,
        news_country: str | None = None,
    ) -> UserPreferences:
        """Overwrite the given fields; fields left as None are kept.

        Country codes are stored upper-case.
        """
        owner = require_identity(user_id)
        prefs = await self._store.get(owner) or UserPreferences(user_id=owner)
        if watched_pairs is not None:
            prefs.watched_pairs = sorted(watched_pairs, key=lambda p: p.order)
        if news_country is not None:
            prefs.news_country = news_country.strip().upper()
        await self._store.save(prefs)
        return prefs

    async def set_news_country(self, user_id: str | None, country_code: str) -> str | None:
        prefs = await self.update_preferences(user_id, news_country=country_code)
        return prefs.news_country

    async def get_news_country(self, user_id: str | None) -> str | None:
        """Stored news country, or None for anonymous callers and unknown users."""
        if not user_id:
            return None
        prefs = await self._store.get(user_id)
        return prefs.news_country if prefs is not None else None
