"""Tests for the click command-line interface."""

import json

import pytest
from click.testing import CliRunner

from playshelf import cli as cli_module
from playshelf.cli import cli
from playshelf.service import MetadataService
from tests.helpers import StubFetcher, page
from tests.helpers.pages import APP_ID, ENGLISH_DETAIL_PAGE


@pytest.fixture
def config_file(tmp_path, config):
    path = tmp_path / "config.yaml"
    path.write_text(f"catalog:\n  path: {config.catalog.path}\n", encoding="utf-8")
    return str(path)


@pytest.fixture(autouse=True)
def logging_calls(monkeypatch):
    calls = []
    monkeypatch.setattr(cli_module, "configure_logging", calls.append)
    return calls


@pytest.fixture
def stub_service(monkeypatch):
    fetcher = StubFetcher({APP_ID: page(APP_ID, ENGLISH_DETAIL_PAGE)})
    monkeypatch.setattr(cli_module.MetadataService, "from_config", lambda config: MetadataService(fetcher))
    return fetcher


@pytest.fixture
def runner():
    return CliRunner()


class TestFetchCommand:
    def test_prints_metadata(self, runner, config_file, stub_service):
        result = runner.invoke(cli, ["--config", config_file, "fetch", "--compact", APP_ID])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output.strip().splitlines()[-1])
        assert payload["id"] == APP_ID
        assert payload["version"] == "2.3.1"
        assert stub_service.started and stub_service.closed

    def test_all_degraded_exits_non_zero(self, runner, config_file, stub_service):
        result = runner.invoke(cli, ["--config", config_file, "fetch", "com.example.gone"])

        assert result.exit_code == 1
        assert "degraded" in result.output

    def test_empty_identifier(self, runner, config_file, stub_service):
        result = runner.invoke(cli, ["--config", config_file, "fetch", " "])

        assert result.exit_code == 2
        assert "App ID is required" in result.output


class TestCatalogCommand:
    def test_json_listing(self, runner, config_file):
        result = runner.invoke(cli, ["--config", config_file, "catalog", "--json", "--category", "Radio"])

        assert result.exit_code == 0, result.output
        assert [entry["id"] for entry in json.loads(result.output)] == ["com.example.radio"]

    def test_table_listing(self, runner, config_file):
        result = runner.invoke(cli, ["--config", config_file, "catalog"])

        assert result.exit_code == 0, result.output
        assert "com.example.psalms" in result.output
        assert "Catalog (2 of 2)" in result.output

    def test_featured_only(self, runner, config_file):
        result = runner.invoke(cli, ["--config", config_file, "catalog", "--json", "--featured"])

        assert result.exit_code == 0, result.output
        assert [entry["id"] for entry in json.loads(result.output)] == ["com.example.psalms"]


class TestShowCommand:
    def test_known_entry(self, runner, config_file):
        result = runner.invoke(cli, ["--config", config_file, "show", "com.example.radio"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["directDownloadUrl"] == "https://dl.example.com/radio.apk"

    def test_unknown_entry(self, runner, config_file):
        result = runner.invoke(cli, ["--config", config_file, "show", "com.example.unknown"])

        assert result.exit_code == 1
        assert "App not found in catalog" in result.output


def test_serve_uses_configured_address(runner, config_file, monkeypatch):
    import playshelf.web.main as web_main

    calls = []
    monkeypatch.setattr(web_main, "run_web_server", lambda **kwargs: calls.append(kwargs))

    result = runner.invoke(cli, ["--config", config_file, "serve", "--port", "9100"])

    assert result.exit_code == 0, result.output
    assert calls[0]["host"] == "127.0.0.1"
    assert calls[0]["port"] == 9100


def test_log_level_override(runner, config_file, logging_calls):
    runner.invoke(cli, ["--config", config_file, "--log-level", "DEBUG", "catalog", "--json"])

    assert logging_calls[0].log_level == "DEBUG"
