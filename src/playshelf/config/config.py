"""
Configuration management for PlayShelf using Pydantic.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, ClassVar, Dict, List, cast

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Setup Logging ---
log = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# --- Nested Configuration Models ---


class FetcherConfig(BaseModel):
    """Outbound request settings for the store detail page."""

    base_url: str = Field(
        default="https://play.google.com/store/apps/details",
        description="Detail-page endpoint; the app id is passed as the `id` query parameter.",
    )
    language: str = Field(default="ar", description="Fixed `hl` query parameter.")
    region: str = Field(default="EG", description="Fixed `gl` query parameter.")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="Browser User-Agent header.")
    accept_language: str = Field(
        default="ar,en-US;q=0.9,en;q=0.8",
        description="Accept-Language header matching the fixed locale.",
    )
    timeout: float = Field(default=15.0, gt=0, description="Total request timeout in seconds.")
    max_concurrency: int = Field(default=4, ge=1, description="Parallel fetches when enriching many apps.")


class ExtractionSettings(BaseModel):
    """Tuning knobs for the field extraction chains."""

    description_max_length: int = Field(default=500, ge=1, description="Length of the truncated description.")
    ellipsis: str = Field(default="...", description="Suffix appended to a truncated description.")
    field_order: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Per-field matcher names to try first, e.g. {'rating': ['aria_label']}.",
    )

    @field_validator("field_order")
    @classmethod
    def validate_field_order(cls, v: Dict[str, List[str]]) -> Dict[str, List[str]]:
        """Reject overrides for fields the extractor does not know."""
        from playshelf.extractor.strategies import FIELD_NAMES

        unknown = sorted(set(v) - set(FIELD_NAMES))
        if unknown:
            raise ValueError(f"unknown fields in field_order: {', '.join(unknown)}")
        return v


class CacheConfig(BaseModel):
    """Ephemeral response cache."""

    ttl_seconds: float = Field(default=600.0, description="Entry lifetime; 0 disables caching.")
    max_entries: int = Field(default=512, ge=1, description="Maximum cached apps.")


class CatalogConfig(BaseModel):
    """Location of the known-apps catalog."""

    path: Path = Field(default=Path("catalog.yaml"), description="YAML file listing the catalog apps.")


class WebConfig(BaseModel):
    """Configuration for the HTTP API."""

    host: str = Field(default="127.0.0.1", description="Host for the web server.")
    port: int = Field(default=8000, description="Port for the web server.")


class MonitoringConfig(BaseModel):
    """Configuration for logging and metrics."""

    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(
        default=None,
        description="Path to log file. If None, logs to console.",
    )
    web: WebConfig = Field(default_factory=WebConfig)

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Config(BaseSettings):
    project_name: str = "PlayShelf"
    version: str = "0.1.0"
    fetcher: FetcherConfig = Field(default_factory=FetcherConfig)
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="PLAYSHELF_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        return cls.model_validate(yaml_data)


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    for path in (current_dir / "config.yaml", current_dir / "config.yml"):
        if path.exists():
            return path
    return None


def load_config(path: Path | None = None) -> Config:
    """Load an explicit YAML file, else a discovered one, else defaults."""
    if path is not None:
        return Config.from_yaml(path)
    found = find_config_file()
    if found is not None:
        return Config.from_yaml(found)
    return Config()


# --- Lazy Configuration Loader ---


class LazyConfig:
    """
    A proxy for the Config object that delays its loading and validation
    until an attribute is first accessed.
    """

    _config: ClassVar[Config | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __getattr__(self, name: str) -> Any:
        if self.__class__._config is None:
            with self.__class__._lock:
                if self.__class__._config is None:
                    self.__class__._config = self._load_config_with_fallback()
        return getattr(self.__class__._config, name)

    def _load_config_with_fallback(self) -> Config:
        config_path = find_config_file()
        if config_path:
            try:
                log.info("Lazy loading configuration from: %s", config_path)
                return Config.from_yaml(config_path)
            except (ValidationError, FileNotFoundError, yaml.YAMLError) as e:
                log.error(
                    "Failed to load or validate configuration from '%s': %s. Falling back to default settings.",
                    config_path,
                    e,
                    exc_info=log.getEffectiveLevel() <= logging.DEBUG,
                )
        else:
            log.info("No config file found. Using default settings for lazy load.")

        try:
            return Config()
        except ValidationError as e:
            log.critical("FATAL: Default configuration is invalid: %s", e, exc_info=True)
            raise RuntimeError(f"Default configuration is invalid, cannot start: {e}") from e


settings: "Config" = cast("Config", LazyConfig())
