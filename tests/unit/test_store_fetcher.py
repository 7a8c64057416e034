"""
Tests for StoreFetcher: request signature, status handling and transport errors.
"""

import asyncio

import aiohttp
import pytest
from aioresponses import aioresponses

from playshelf.config.config import DEFAULT_USER_AGENT, FetcherConfig
from playshelf.crawler.http_client import StoreFetcher, require_app_id
from playshelf.protocols import CallerInputError, FetchFailure, FetchFailureKind, FetchSuccess
from tests.helpers import metric_delta
from tests.helpers.pages import APP_ID, DETAIL_URL


class TestRequireAppId:
    def test_strips(self):
        assert require_app_id("  com.example.app ") == "com.example.app"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing(self, value):
        with pytest.raises(CallerInputError, match="App ID is required"):
            require_app_id(value)


class TestDetailUrl:
    def test_fixed_locale(self):
        assert StoreFetcher().detail_url(APP_ID) == DETAIL_URL

    def test_configured_locale(self):
        fetcher = StoreFetcher(FetcherConfig(language="en", region="US"))
        assert fetcher.detail_url("a.b") == "https://play.google.com/store/apps/details?id=a.b&hl=en&gl=US"

    def test_identifier_is_encoded(self):
        assert "id=a%26b" in StoreFetcher().detail_url("a&b")

    def test_empty_identifier(self):
        with pytest.raises(CallerInputError):
            StoreFetcher().detail_url("")


class TestFetch:
    @pytest.mark.asyncio
    async def test_success_returns_markup(self, fetcher):
        with aioresponses() as m:
            m.get(DETAIL_URL, status=200, body="<html>ok</html>")
            result = await fetcher.fetch(APP_ID)

        assert isinstance(result, FetchSuccess)
        assert result.ok
        assert result.status == 200
        assert result.markup == "<html>ok</html>"
        assert result.url == DETAIL_URL

    @pytest.mark.asyncio
    async def test_browser_headers_sent(self, fetcher):
        with aioresponses() as m:
            m.get(DETAIL_URL, status=200, body="")
            await fetcher.fetch(APP_ID)

            ((method, url), calls), = m.requests.items()

        assert method == "GET"
        assert url.query["id"] == APP_ID
        headers = calls[0].kwargs["headers"]
        assert headers["User-Agent"] == DEFAULT_USER_AGENT
        assert headers["Accept-Language"] == "ar,en-US;q=0.9,en;q=0.8"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [404, 429, 500, 503])
    async def test_non_success_status_is_origin_unavailable(self, fetcher, status):
        with aioresponses() as m:
            m.get(DETAIL_URL, status=status, body="nope")
            with metric_delta("playshelf_fetch_failures_total", kind="origin_unavailable"):
                result = await fetcher.fetch(APP_ID)

        assert isinstance(result, FetchFailure)
        assert not result.ok
        assert result.kind is FetchFailureKind.ORIGIN_UNAVAILABLE
        assert result.status == status

    @pytest.mark.asyncio
    async def test_connection_error_is_transport_error(self, fetcher):
        with aioresponses() as m:
            m.get(DETAIL_URL, exception=aiohttp.ClientConnectionError("connection reset"))
            with metric_delta("playshelf_fetch_failures_total", kind="transport_error"):
                result = await fetcher.fetch(APP_ID)

        assert isinstance(result, FetchFailure)
        assert result.kind is FetchFailureKind.TRANSPORT_ERROR
        assert result.status is None
        assert "connection reset" in result.error

    @pytest.mark.asyncio
    async def test_timeout_is_transport_error(self, fetcher):
        with aioresponses() as m:
            m.get(DETAIL_URL, exception=asyncio.TimeoutError())
            result = await fetcher.fetch(APP_ID)

        assert result.kind is FetchFailureKind.TRANSPORT_ERROR
        assert "timed out" in result.error

    @pytest.mark.asyncio
    async def test_response_status_class_counted(self, fetcher):
        with aioresponses() as m:
            m.get(DETAIL_URL, status=200, body="")
            with metric_delta("playshelf_fetch_responses_total", status_class="2xx"):
                await fetcher.fetch(APP_ID)

    @pytest.mark.asyncio
    async def test_empty_identifier_raises(self, fetcher):
        with pytest.raises(CallerInputError):
            await fetcher.fetch("  ")

    @pytest.mark.asyncio
    async def test_fetch_requires_initialize(self):
        with pytest.raises(RuntimeError, match="not initialized"):
            await StoreFetcher().fetch(APP_ID)


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_context_manager(self):
        async with StoreFetcher() as fetcher:
            assert fetcher.get_stats()["initialized"]
            assert fetcher.session is not None
        assert fetcher.session is None
        assert not fetcher.get_stats()["initialized"]

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        fetcher = StoreFetcher()
        await fetcher.initialize()
        await fetcher.close()
        await fetcher.close()
        assert fetcher.session is None
