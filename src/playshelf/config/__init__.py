"""Configuration models and loaders."""

from __future__ import annotations

from .config import (
    CacheConfig,
    CatalogConfig,
    Config,
    ExtractionSettings,
    FetcherConfig,
    MonitoringConfig,
    WebConfig,
    find_config_file,
    load_config,
    settings,
)

__all__ = [
    "CacheConfig",
    "CatalogConfig",
    "Config",
    "ExtractionSettings",
    "FetcherConfig",
    "MonitoringConfig",
    "WebConfig",
    "find_config_file",
    "load_config",
    "settings",
]
