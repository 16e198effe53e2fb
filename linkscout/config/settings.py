"""Application settings loaded from environment variables via pydantic-settings.

Values come from (highest priority first) environment variables, then a
``.env`` file in the working directory, then the defaults below.  Field
``musicfetch_api_token`` maps to env var ``MUSICFETCH_API_TOKEN``.

An empty token string means "not configured": the composition root in
``linkscout.main`` still builds the matching catalog source, but its
``is_available()`` reports ``False`` and the resolver skips it.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """LinkScout application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Catalog credentials ===
    apple_music_developer_token: str = ""
    musicfetch_api_token: str = ""
    musicfetch_enabled: bool = True

    # === Lookup behaviour ===
    default_storefront: str = "us"
    http_timeout_seconds: float = 10.0
    http_max_retries: int = 1
    http_backoff_seconds: float = 0.5
    http_max_retry_after_seconds: float = 5.0
    deezer_requests_per_second: float = 10.0
    musicfetch_requests_per_minute: int = 60
    lookup_cache_ttl_seconds: int = 86400

    # === Batch discovery ===
    inter_release_delay_seconds: float = 0.2

    # === Monitoring ===
    regression_threshold_percent: float = 20.0
    regression_max_samples: int = 100

    # === Persistence ===
    database_path: str = "data/linkscout.db"

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"

    def is_musicfetch_available(self) -> bool:
        """Return ``True`` when MusicFetch is both enabled and has a token."""
        return self.musicfetch_enabled and bool(self.musicfetch_api_token)

    def get_configured_sources(self) -> list[str]:
        """Return the names of catalog sources whose credentials are present.

        Deezer and the iTunes fallback need no credentials and are always
        listed.
        """
        sources = ["apple_music", "deezer"]
        if self.is_musicfetch_available():
            sources.append("musicfetch")
        return sources
