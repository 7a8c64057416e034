"""
HTTP fetcher for store detail pages.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import aiohttp
import structlog

from playshelf.config.config import FetcherConfig
from playshelf.observability.metrics import increment, observe
from playshelf.protocols import CallerInputError, FetchFailure, FetchFailureKind, FetchResult, FetchSuccess

logger = structlog.get_logger(__name__)


def require_app_id(app_id: Optional[str]) -> str:
    """Return the stripped identifier or raise :class:`CallerInputError`."""
    if app_id is None or not str(app_id).strip():
        raise CallerInputError("App ID is required")
    return str(app_id).strip()


class StoreFetcher:
    """
    Retrieves the detail page of one app with a browser-like request signature.

    Failures are returned as :class:`FetchFailure` values rather than raised:
    the store answers unreliably and the caller always renders something. No
    retries happen here.
    """

    def __init__(self, config: Optional[FetcherConfig] = None):
        self.config = config or FetcherConfig()
        self.session: Optional[aiohttp.ClientSession] = None
        self._is_initialized = False
        self._in_flight_requests = 0

        logger.info(
            "Store fetcher initialized",
            base_url=self.config.base_url,
            language=self.config.language,
            region=self.config.region,
            timeout=self.config.timeout,
        )

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.config.user_agent,
            "Accept-Language": self.config.accept_language,
        }

    def detail_url(self, app_id: str) -> str:
        """Detail-page URL with the identifier and the fixed locale parameters."""
        query = urlencode({"id": require_app_id(app_id), "hl": self.config.language, "gl": self.config.region})
        return f"{self.config.base_url}?{query}"

    async def initialize(self) -> None:
        """Initialize the HTTP client session."""
        if self.session is None:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout)
            self.session = aiohttp.ClientSession(timeout=timeout)
            self._is_initialized = True
            logger.info("Store fetcher session initialized")

    async def close(self) -> None:
        """Close the HTTP client session."""
        if self.session:
            await self.session.close()
            self.session = None
        self._is_initialized = False
        logger.info("Store fetcher closed")

    async def __aenter__(self) -> "StoreFetcher":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def fetch(self, app_id: str) -> FetchResult:
        """
        Fetch the detail page for ``app_id``.

        Args:
            app_id: Package-name-shaped identifier; must not be empty.

        Returns:
            FetchSuccess with the markup on a 2xx answer, otherwise a
            FetchFailure describing the status code or transport error.

        Raises:
            CallerInputError: if the identifier is missing or empty.
        """
        url = self.detail_url(app_id)
        if not self._is_initialized or self.session is None:
            raise RuntimeError("Store fetcher not initialized. Call initialize() first.")

        start_time = time.monotonic()
        self._in_flight_requests += 1
        try:
            async with self.session.get(url, headers=self.headers) as response:
                status = response.status
                elapsed = time.monotonic() - start_time
                increment("fetch_responses_total", status_class=f"{status // 100}xx")
                observe("fetch_latency_seconds", elapsed)

                if not 200 <= status < 300:
                    logger.warning("Store returned non-success status", app_id=app_id, status=status, url=url)
                    increment("fetch_failures_total", kind=FetchFailureKind.ORIGIN_UNAVAILABLE.value)
                    return FetchFailure(
                        url=url,
                        kind=FetchFailureKind.ORIGIN_UNAVAILABLE,
                        status=status,
                        elapsed=elapsed,
                    )

                markup = await response.text(errors="replace")
                logger.debug("Fetched detail page", app_id=app_id, status=status, size=len(markup))
                return FetchSuccess(url=url, status=status, markup=markup, elapsed=elapsed)

        except asyncio.TimeoutError:
            elapsed = time.monotonic() - start_time
            logger.warning("Request timed out", app_id=app_id, url=url, timeout=self.config.timeout)
            increment("fetch_failures_total", kind=FetchFailureKind.TRANSPORT_ERROR.value)
            return FetchFailure(
                url=url,
                kind=FetchFailureKind.TRANSPORT_ERROR,
                error=f"Request timed out after {self.config.timeout}s",
                elapsed=elapsed,
            )
        except aiohttp.ClientError as e:
            elapsed = time.monotonic() - start_time
            logger.warning("Request failed", app_id=app_id, url=url, error=str(e))
            increment("fetch_failures_total", kind=FetchFailureKind.TRANSPORT_ERROR.value)
            return FetchFailure(
                url=url,
                kind=FetchFailureKind.TRANSPORT_ERROR,
                error=str(e) or type(e).__name__,
                elapsed=elapsed,
            )
        finally:
            self._in_flight_requests -= 1

    def get_stats(self) -> Dict[str, Any]:
        """Get current fetcher statistics."""
        return {
            "initialized": self._is_initialized,
            "in_flight_requests": self._in_flight_requests,
        }
