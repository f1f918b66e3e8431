"""Tests for the typer CLI (search and logs commands)."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from typeahead.cli import app
from typeahead.exceptions import NetworkError
from typeahead.search import ProductSearchClient
from typeahead.models import Page
from typeahead.telemetry import Telemetry

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("TYPEAHEAD_BASE_URL", "TYPEAHEAD_DEBOUNCE_MS", "TYPEAHEAD_PAGE_SIZE"):
        monkeypatch.delenv(name, raising=False)


class TestSearchCommand:
    def test_prints_results_table(self, page_factory):
        pages = [page_factory("Phone", 1, 15), page_factory("Phone", 2, 2)]
        with patch("typeahead.cli._fetch_pages", new=AsyncMock(return_value=pages)) as fetch:
            result = runner.invoke(app, ["search", "phone", "--pages", "3"])

        assert result.exit_code == 0, result.output
        assert "Phone 16" in result.output
        assert "17 results across 2 page(s)" in result.output
        config, query, first_page, count = fetch.await_args.args
        assert (query, first_page, count) == ("phone", 1, 3)
        assert config.page_size == 15

    def test_reports_more_available(self, page_factory):
        pages = [page_factory("Phone", 1, 15)]
        with patch("typeahead.cli._fetch_pages", new=AsyncMock(return_value=pages)):
            result = runner.invoke(app, ["search", "phone"])

        assert "more available from page 2" in result.output

    def test_trace_installs_console_telemetry(self, page_factory):
        pages = [page_factory("Phone", 1, 3)]
        with patch("typeahead.cli._fetch_pages", new=AsyncMock(return_value=pages)), patch(
            "typeahead.cli.set_telemetry"
        ) as install:
            result = runner.invoke(app, ["search", "phone", "--trace"])

        assert result.exit_code == 0, result.output
        (telemetry,) = install.call_args.args
        assert isinstance(telemetry, Telemetry)

    def test_no_results(self):
        with patch("typeahead.cli._fetch_pages", new=AsyncMock(return_value=[Page(number=1)])):
            result = runner.invoke(app, ["search", "zzz"])

        assert result.exit_code == 0
        assert "No results found" in result.output

    def test_empty_query_skips_fetch(self):
        fetch = AsyncMock()
        with patch("typeahead.cli._fetch_pages", new=fetch):
            result = runner.invoke(app, ["search", "   "])

        assert result.exit_code == 0
        assert "nothing to search" in result.output
        fetch.assert_not_awaited()

    def test_network_error_exits_1(self):
        failing = AsyncMock(side_effect=NetworkError("Search request failed with HTTP 502"))
        with patch("typeahead.cli._fetch_pages", new=failing):
            result = runner.invoke(app, ["search", "phone"])

        assert result.exit_code == 1
        assert "Search failed" in result.output

    def test_invalid_config_exits_1(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"page_size": 0}))

        result = runner.invoke(app, ["search", "phone", "--config", str(path)])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestSearchPaging:
    """Runs the real page loop with only the HTTP fetch replaced."""

    @pytest.fixture
    def fetch_page(self, page_factory):
        def respond(query, page):
            return page_factory("Phone", page, {1: 15, 2: 7}.get(page, 0))

        mock = AsyncMock(side_effect=respond)
        with patch.object(ProductSearchClient, "fetch_page", new=mock):
            yield mock

    def test_stops_at_short_page(self, fetch_page):
        result = runner.invoke(app, ["search", "phone", "--pages", "5"])

        assert result.exit_code == 0, result.output
        assert [c.args for c in fetch_page.await_args_list] == [("phone", 1), ("phone", 2)]
        assert "22 results across 2 page(s)" in result.output
        assert "more available" not in result.output

    def test_starts_at_requested_page(self, fetch_page):
        result = runner.invoke(app, ["search", "phone", "--page", "2", "--pages", "3"])

        assert result.exit_code == 0, result.output
        assert [c.args for c in fetch_page.await_args_list] == [("phone", 2)]
        assert "7 results across 1 page(s)" in result.output

    def test_page_limit_reports_more(self, fetch_page):
        result = runner.invoke(app, ["search", "phone", "--pages", "1"])

        assert fetch_page.await_count == 1
        assert "more available from page 2" in result.output

    def test_last_page_flag_stops_paging(self, page_factory):
        full = page_factory("Phone", 1, 15)
        last = Page(number=1, items=full.items, is_last=True)
        with patch.object(ProductSearchClient, "fetch_page", new=AsyncMock(return_value=last)) as fetch:
            result = runner.invoke(app, ["search", "phone", "--pages", "3"])

        assert result.exit_code == 0, result.output
        assert fetch.await_count == 1
        assert "more available" not in result.output


class TestLogsCommand:
    def _write_log(self, directory, entries):
        directory.mkdir()
        with open(directory / "search-20260101.log", "w", encoding="utf-8") as f:
            for entry in entries:
                f.write(json.dumps(entry) + "\n")
            f.write("not json\n")

    def test_filters_by_level(self, tmp_path):
        log_dir = tmp_path / "logs"
        self._write_log(
            log_dir,
            [
                {"ts": "2026-01-01T10:00:00", "level": "INFO", "trace": "a" * 32, "msg": "query settled"},
                {"ts": "2026-01-01T10:00:01", "level": "ERROR", "trace": "b" * 32, "msg": "page fetch failed"},
            ],
        )

        result = runner.invoke(app, ["logs", "--dir", str(log_dir), "--level", "error"])

        assert result.exit_code == 0
        assert "page fetch failed" in result.output
        assert "query settled" not in result.output

    def test_unknown_level(self, tmp_path):
        result = runner.invoke(app, ["logs", "--level", "loud"])
        assert result.exit_code == 1

    def test_missing_directory(self, tmp_path):
        result = runner.invoke(app, ["logs", "--dir", str(tmp_path / "none")])
        assert result.exit_code == 0
        assert "No log files found" in result.output
