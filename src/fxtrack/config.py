"""Configuration system using pydantic-settings with environment variable loading."""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class QuoteProviderSettings(BaseSettings):
    """Exchange-rate quote provider settings."""

    model_config = SettingsConfigDict(env_prefix="QUOTE_")

    latest_url: str = "https://api.exchangerate-api.com/v4/latest"
    history_url: str = "https://v6.exchangerate-api.com/v6"
    api_key: SecretStr = SecretStr("")  # only needed for daily history
    timeout_seconds: float | None = None  # None keeps the transport default
    history_request_delay: float = 0.1  # seconds between daily history calls


class NewsSettings(BaseSettings):
    """Business news feed settings (NewsData.io)."""

    model_config = SettingsConfigDict(env_prefix="NEWS_")

    base_url: str = "https://newsdata.io/api/1/latest"
    api_key: SecretStr = SecretStr("")
    timeout_seconds: float = 10.0
    page_size: int = 5
    max_items: int = 20


class RetentionSettings(BaseSettings):
    """Historical rate pruning parameters.

    Tier spacings and horizons are fixed in fxtrack.retention.tiers; only the
    batching and the daily sweep schedule are tunable here.
    """

    model_config = SettingsConfigDict(env_prefix="RETENTION_")

    prune_batch_size: int = Field(default=100, ge=1)  # per-pair prune after each accepted sample
    sweep_batch_size: int = Field(default=50, ge=1)  # system-wide daily sweep
    sweep_enabled: bool = True
    sweep_hour_utc: int = Field(default=2, ge=0, le=23)
    sweep_minute_utc: int = Field(default=0, ge=0, le=59)


class StorageSettings(BaseSettings):
    """SQLite storage location."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    db_path: str = "data/fxtrack.db"


class ApiSettings(BaseSettings):
    """HTTP API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8080
    enabled: bool = True


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    quotes: QuoteProviderSettings = QuoteProviderSettings()
    news: NewsSettings = NewsSettings()
    retention: RetentionSettings = RetentionSettings()
    storage: StorageSettings = StorageSettings()
    api: ApiSettings = ApiSettings()
