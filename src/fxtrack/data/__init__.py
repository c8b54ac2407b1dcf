"""Persistence layer: SQLite connection management and typed stores."""

from fxtrack.data.alert_store import AlertStore
from fxtrack.data.database import FxDatabase
from fxtrack.data.preferences_store import PreferencesStore
from fxtrack.data.store import RateStore

__all__ = [
    "AlertStore",
    "FxDatabase",
    "PreferencesStore",
    "RateStore",
]
