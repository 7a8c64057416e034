"""
Request boundary for app metadata: validate, fetch, extract, degrade.
"""

from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence

import structlog

from playshelf.cache import MetadataCache
from playshelf.config.config import Config
from playshelf.crawler.http_client import StoreFetcher, require_app_id
from playshelf.extractor.app_extractor import AppMetadataExtractor
from playshelf.observability.metrics import increment
from playshelf.protocols import DegradationReason, FetchFailure, MetadataResult

logger = structlog.get_logger(__name__)


class MetadataService:
    """
    ``getAppMetadata`` as used by the web API and the CLI.

    Only :class:`~playshelf.protocols.CallerInputError` escapes; every other
    failure becomes a degraded :class:`MetadataResult` whose record carries the
    id and source URL with all scraped fields at their defaults.
    """

    def __init__(
        self,
        fetcher: StoreFetcher,
        extractor: Optional[AppMetadataExtractor] = None,
        cache: Optional[MetadataCache] = None,
        max_concurrency: int = 4,
    ):
        self.fetcher = fetcher
        self.extractor = extractor or AppMetadataExtractor()
        self.cache = cache
        self.max_concurrency = max_concurrency

    @classmethod
    def from_config(cls, config: Config) -> "MetadataService":
        return cls(
            fetcher=StoreFetcher(config.fetcher),
            extractor=AppMetadataExtractor(config.extraction),
            cache=MetadataCache(config.cache.ttl_seconds, config.cache.max_entries),
            max_concurrency=config.fetcher.max_concurrency,
        )

    async def start(self) -> None:
        await self.fetcher.initialize()

    async def close(self) -> None:
        await self.fetcher.close()

    async def __aenter__(self) -> "MetadataService":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def get_app_metadata(self, app_id: str) -> MetadataResult:
        """
        Fetch and extract metadata for one app.

        Raises:
            CallerInputError: if ``app_id`` is missing or empty.
        """
        app_id = require_app_id(app_id)
        source_url = self.fetcher.detail_url(app_id)
        log = logger.bind(app_id=app_id)

        if self.cache is not None:
            cached = await self.cache.get(app_id)
            if cached is not None:
                increment("metadata_requests_total", outcome="cached")
                log.debug("Serving metadata from cache")
                return cached.from_cache()

        try:
            fetched = await self.fetcher.fetch(app_id)
            if isinstance(fetched, FetchFailure):
                reason = DegradationReason.from_failure(fetched.kind)
                log.info("Origin unavailable, returning degraded record", reason=reason.value, status=fetched.status)
                increment("metadata_requests_total", outcome=reason.value)
                return MetadataResult.degrade(app_id, source_url, reason, status=fetched.status)

            metadata = self.extractor.extract(fetched.markup, app_id, fetched.url)
        except Exception:
            log.exception("Unexpected error while processing metadata")
            increment("metadata_requests_total", outcome=DegradationReason.PROCESSING_ERROR.value)
            return MetadataResult.degrade(app_id, source_url, DegradationReason.PROCESSING_ERROR)

        result = MetadataResult(metadata=metadata, status=fetched.status)
        increment("metadata_requests_total", outcome="ok")
        if self.cache is not None:
            await self.cache.set(app_id, result)
        return result

    async def get_many(self, app_ids: Sequence[str]) -> List[MetadataResult]:
        """Fetch several apps concurrently; results keep the input order."""
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _one(app_id: str) -> MetadataResult:
            async with semaphore:
                return await self.get_app_metadata(app_id)

        return list(await asyncio.gather(*(_one(app_id) for app_id in app_ids)))
