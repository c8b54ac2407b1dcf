"""Shared test fixtures for fxtrack.

Store-backed tests run against a real SQLite file in pytest's tmp_path.
"""

import pytest

from fxtrack.alerts.evaluator import AlertEvaluator
from fxtrack.config import AppSettings, RetentionSettings, StorageSettings
from fxtrack.data.alert_store import AlertStore
from fxtrack.data.database import FxDatabase
from fxtrack.data.preferences_store import PreferencesStore
from fxtrack.data.store import RateStore
from fxtrack.retention.pruner import RetentionPruner
from fxtrack.retention.sampler import SamplingEngine


@pytest.fixture
def mock_settings(tmp_path) -> AppSettings:
    """Return AppSettings with a temporary database and the daily sweep disabled."""
    return AppSettings(
        log_level="DEBUG",
        storage=StorageSettings(db_path=str(tmp_path / "fxtrack.db")),
        retention=RetentionSettings(sweep_enabled=False),
    )


@pytest.fixture
def retention_settings() -> RetentionSettings:
    return RetentionSettings()


@pytest.fixture
async def database(tmp_path):
    """Connected FxDatabase, closed after the test."""
    async with FxDatabase(str(tmp_path / "test.db")) as db:
        yield db


@pytest.fixture
def rate_store(database: FxDatabase) -> RateStore:
    return RateStore(database)


@pytest.fixture
def alert_store(database: FxDatabase) -> AlertStore:
    return AlertStore(database)


@pytest.fixture
def preferences_store(database: FxDatabase) -> PreferencesStore:
    return PreferencesStore(database)


@pytest.fixture
def pruner(rate_store: RateStore, retention_settings: RetentionSettings) -> RetentionPruner:
    return RetentionPruner(rate_store, retention_settings)


@pytest.fixture
def sampler(rate_store: RateStore, pruner: RetentionPruner) -> SamplingEngine:
    return SamplingEngine(rate_store, pruner)


@pytest.fixture
def evaluator(alert_store: AlertStore) -> AlertEvaluator:
    return AlertEvaluator(alert_store)
