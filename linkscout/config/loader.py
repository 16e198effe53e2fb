"""YAML configuration loader with environment variable overrides.

Configuration is layered (later layers override earlier):

  1. config/config.yaml  -- static defaults checked into the repo
  2. .env file           -- local developer overrides (not committed)
  3. Environment vars    -- set at deploy time

Layers 2 and 3 are read by :class:`Settings`; :func:`load_config` reads the
YAML file first and deep-merges the settings-derived values on top.  Keys the
YAML file defines but Settings does not know about (for example
``discovery.providers``) pass through untouched.
"""

from pathlib import Path

import yaml

from linkscout.config.settings import Settings


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.  A missing file is not an
            error; the result then holds only the settings-derived values.
        settings: Pre-built settings; a fresh :class:`Settings` is read from
            the environment when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "env": settings.app_env,
        },
        "catalogs": {
            "apple_music": {
                "developer_token": settings.apple_music_developer_token,
            },
            "deezer": {
                "requests_per_second": settings.deezer_requests_per_second,
            },
            "musicfetch": {
                "api_token": settings.musicfetch_api_token,
                "enabled": settings.musicfetch_enabled,
                "requests_per_minute": settings.musicfetch_requests_per_minute,
                "available": settings.is_musicfetch_available(),
            },
        },
        "http": {
            "timeout_seconds": settings.http_timeout_seconds,
            "max_retries": settings.http_max_retries,
            "backoff_seconds": settings.http_backoff_seconds,
            "max_retry_after_seconds": settings.http_max_retry_after_seconds,
        },
        "discovery": {
            "default_storefront": settings.default_storefront,
            "inter_release_delay_seconds": settings.inter_release_delay_seconds,
            "lookup_cache_ttl_seconds": settings.lookup_cache_ttl_seconds,
        },
        "monitoring": {
            "regression_threshold_percent": settings.regression_threshold_percent,
            "regression_max_samples": settings.regression_max_samples,
        },
        "database": {
            "path": settings.database_path,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
