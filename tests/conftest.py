"""
Shared fixtures for PlayShelf tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from playshelf.config.config import Config, FetcherConfig
from playshelf.crawler.http_client import StoreFetcher
from tests.helpers.pages import ARABIC_DETAIL_PAGE, ENGLISH_DETAIL_PAGE


@pytest.fixture
def english_page() -> str:
    return ENGLISH_DETAIL_PAGE


@pytest.fixture
def arabic_page() -> str:
    return ARABIC_DETAIL_PAGE


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Default configuration with a catalog file in a temp directory."""
    catalog_file = tmp_path / "catalog.yaml"
    catalog_file.write_text(
        """
apps:
  - id: com.example.psalms
    title: "سفر المزامير"
    developer: Xopoc
    category: Bible
    featured: true
  - id: com.example.radio
    title: "Radio FM"
    developer: Xopoc
    category: Radio
    directDownloadUrl: "https://dl.example.com/radio.apk"
""",
        encoding="utf-8",
    )
    return Config.model_validate({"catalog": {"path": str(catalog_file)}})


@pytest_asyncio.fixture
async def fetcher() -> AsyncGenerator[StoreFetcher, None]:
    """Initialized fetcher with a short timeout."""
    store_fetcher = StoreFetcher(FetcherConfig(timeout=2.0))
    await store_fetcher.initialize()
    yield store_fetcher
    await store_fetcher.close()

