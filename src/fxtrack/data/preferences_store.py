"""SQLite persistence for per-user watch lists and news settings.

Watched pairs are stored as a JSON array on the user's row.
"""

import json

from fxtrack.data.database import FxDatabase
from fxtrack.models import UserPreferences, WatchedPair


def _pairs_to_json(pairs: list[WatchedPair]) -> str:
    return json.dumps(
        [
            {
                "id": p.id,
                "baseCurrency": p.base_currency,
                "targetCurrency": p.target_currency,
                "order": p.order,
            }
            for p in pairs
        ]
    )


def _pairs_from_json(raw: str) -> list[WatchedPair]:
    return [
        WatchedPair(
            id=item["id"],
            base_currency=item["baseCurrency"],
            target_currency=item["targetCurrency"],
            order=item["order"],
        )
        for item in json.loads(raw)
    ]


class PreferencesStore:
    """Typed access to the user_preferences table."""

    def __init__(self, database: FxDatabase) -> None:
        self._database = database

    async def get(self, user_id: str) -> UserPreferences | None:
        cursor = await self._database.db.execute(
            "SELECT user_id, watched_pairs, news_country FROM user_preferences "
            "WHERE user_id = ?",
            (user_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return UserPreferences(
            user_id=row[0],
            watched_pairs=_pairs_from_json(row[1]),
            news_country=row[2],
        )

    async def save(self, prefs: UserPreferences) -> None:
        """Insert or replace the user's row."""
        await self._database.db.execute(
            "INSERT OR REPLACE INTO user_preferences "
            "(user_id, watched_pairs, news_country) VALUES (?, ?, ?)",
            (prefs.user_id, _pairs_to_json(prefs.watched_pairs), prefs.news_country),
        )
        await self._database.db.commit()
