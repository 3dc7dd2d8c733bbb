"""Tests for the resource gate, proxy selection, browser session and fetcher.

Mocking strategy:
- Playwright objects (``Page``, ``Route``, the driver) are ``MagicMock``s; no
  browser is launched.
- ``sync_playwright`` is patched where ``pagecorpus.scraper.browser`` imports it.
"""

from __future__ import annotations

import random
from dataclasses import replace
from unittest.mock import MagicMock, call, patch

import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from pagecorpus.config import ScraperSettings
from pagecorpus.scraper.browser import BrowserSession
from pagecorpus.scraper.errors import BrowserStartupError, NavigationError, NavigationTimeout
from pagecorpus.scraper.fetcher import fetch_page
from pagecorpus.scraper.gate import (
    BLOCKED_RESOURCE_TYPES,
    GateDecision,
    decide,
    install_resource_gate,
)
from pagecorpus.scraper.proxies import load_proxies, select_proxy


def _config(**overrides) -> ScraperSettings:
    return replace(ScraperSettings(), **overrides)


def _fake_route(resource_type: str) -> MagicMock:
    route = MagicMock()
    route.request.resource_type = resource_type
    return route


# ---------------------------------------------------------------------------
# Resource gate
# ---------------------------------------------------------------------------

class TestResourceGate:
    @pytest.mark.parametrize("resource_type", sorted(BLOCKED_RESOURCE_TYPES))
    def test_blocks_heavy_types(self, resource_type: str) -> None:
        assert decide(resource_type) is GateDecision.ABORT

    @pytest.mark.parametrize(
        "resource_type", ["document", "script", "xhr", "fetch", "other", "manifest"]
    )
    def test_allows_everything_else(self, resource_type: str) -> None:
        assert decide(resource_type) is GateDecision.ALLOW

    def test_install_routes_all_requests(self) -> None:
        page = MagicMock()
        install_resource_gate(page)

        page.route.assert_called_once()
        pattern, handler = page.route.call_args.args
        assert pattern == "**/*"

        image = _fake_route("image")
        handler(image)
        image.abort.assert_called_once_with()
        image.continue_.assert_not_called()

        script = _fake_route("script")
        handler(script)
        script.continue_.assert_called_once_with()
        script.abort.assert_not_called()

    def test_install_closes_websockets(self) -> None:
        page = MagicMock()
        install_resource_gate(page)

        page.route_web_socket.assert_called_once()
        pattern, handler = page.route_web_socket.call_args.args
        assert pattern == "**/*"

        ws = MagicMock()
        handler(ws)
        ws.close.assert_called_once_with()
        ws.connect_to_server.assert_not_called()


# ---------------------------------------------------------------------------
# Proxy selector
# ---------------------------------------------------------------------------

class TestProxies:
    def test_absent_file_yields_empty_list(self, tmp_path) -> None:
        assert load_proxies(tmp_path / "proxies.list") == []
        assert load_proxies(None) == []

    def test_loads_non_blank_lines(self, tmp_path) -> None:
        path = tmp_path / "proxies.list"
        path.write_text("http://10.0.0.1:3128\n\n  socks5://10.0.0.2:1080 \n", encoding="utf-8")
        assert load_proxies(path) == ["http://10.0.0.1:3128", "socks5://10.0.0.2:1080"]

    def test_select_from_empty_is_none(self) -> None:
        assert select_proxy([]) is None

    def test_select_is_uniform_choice(self) -> None:
        proxies = ["p1", "p2", "p3"]
        picks = {select_proxy(proxies, random.Random(seed)) for seed in range(50)}
        assert picks == set(proxies)


# ---------------------------------------------------------------------------
# Browser session
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_playwright():
    """Patch ``sync_playwright`` and return the fake driver object."""
    driver = MagicMock()
    with patch("pagecorpus.scraper.browser.sync_playwright") as mock_sp:
        mock_sp.return_value.start.return_value = driver
        yield driver


class TestBrowserSession:
    def test_no_proxy_argument_without_proxy(self, fake_playwright) -> None:
        config = _config()
        with BrowserSession(config, proxy=None):
            pass

        kwargs = fake_playwright.chromium.launch.call_args.kwargs
        assert "proxy" not in kwargs
        assert kwargs["headless"] is True
        assert "--single-process" in kwargs["args"]

    def test_proxy_passed_to_launch(self, fake_playwright) -> None:
        with BrowserSession(_config(), proxy="http://10.0.0.1:3128"):
            pass
        kwargs = fake_playwright.chromium.launch.call_args.kwargs
        assert kwargs["proxy"] == {"server": "http://10.0.0.1:3128"}

    def test_user_agent_and_viewport_set_on_context(self, fake_playwright) -> None:
        config = _config(user_agent="UA/1.0", viewport_width=800, viewport_height=600)
        with BrowserSession(config):
            pass
        browser = fake_playwright.chromium.launch.return_value
        browser.new_context.assert_called_once_with(
            user_agent="UA/1.0",
            viewport={"width": 800, "height": 600},
            service_workers="block",
        )

    def test_shared_mode_reuses_one_gated_page(self, fake_playwright) -> None:
        context = fake_playwright.chromium.launch.return_value.new_context.return_value
        with patch("pagecorpus.scraper.browser.install_resource_gate") as mock_gate:
            with BrowserSession(_config(page_mode="shared")) as session:
                with session.page() as first:
                    pass
                with session.page() as second:
                    pass

        assert first is second
        context.new_page.assert_called_once_with()
        mock_gate.assert_called_once_with(first)
        first.close.assert_not_called()

    def test_per_url_mode_opens_and_closes_pages(self, fake_playwright) -> None:
        context = fake_playwright.chromium.launch.return_value.new_context.return_value
        pages = [MagicMock(name="p1"), MagicMock(name="p2")]
        context.new_page.side_effect = pages

        with patch("pagecorpus.scraper.browser.install_resource_gate") as mock_gate:
            with BrowserSession(_config(page_mode="per-url")) as session:
                context.new_page.assert_not_called()
                with session.page() as first:
                    pass
                with session.page() as second:
                    pass

        assert (first, second) == tuple(pages)
        assert mock_gate.call_args_list == [call(pages[0]), call(pages[1])]
        pages[0].close.assert_called_once_with()
        pages[1].close.assert_called_once_with()

    def test_close_order_and_idempotence(self, fake_playwright) -> None:
        browser = fake_playwright.chromium.launch.return_value
        context = browser.new_context.return_value
        session = BrowserSession(_config())
        with session:
            pass
        session.close()

        context.close.assert_called_once_with()
        browser.close.assert_called_once_with()
        fake_playwright.stop.assert_called_once_with()

    def test_launch_failure_is_startup_error(self, fake_playwright) -> None:
        fake_playwright.chromium.launch.side_effect = PlaywrightError("no chromium")
        with pytest.raises(BrowserStartupError):
            with BrowserSession(_config()):
                pass  # pragma: no cover
        fake_playwright.stop.assert_called_once_with()


# ---------------------------------------------------------------------------
# Page fetcher
# ---------------------------------------------------------------------------

class TestFetchPage:
    def test_returns_live_content_after_wait(self) -> None:
        page = MagicMock()
        page.content.return_value = "<html>rendered</html>"

        html = fetch_page(page, "http://a.test/post", timeout_ms=1234, wait_until="networkidle")

        assert html == "<html>rendered</html>"
        page.goto.assert_called_once_with(
            "http://a.test/post", timeout=1234, wait_until="networkidle"
        )

    def test_timeout_maps_to_navigation_timeout(self) -> None:
        page = MagicMock()
        page.goto.side_effect = PlaywrightTimeoutError("Timeout 10ms exceeded")

        with pytest.raises(NavigationTimeout) as info:
            fetch_page(page, "http://a.test/slow", timeout_ms=10)

        assert info.value.url == "http://a.test/slow"
        assert info.value.timeout_ms == 10
        page.content.assert_not_called()

    def test_other_errors_map_to_navigation_error(self) -> None:
        page = MagicMock()
        page.goto.side_effect = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")

        with pytest.raises(NavigationError) as info:
            fetch_page(page, "http://nowhere.test/")

        assert not isinstance(info.value, NavigationTimeout)
        assert "ERR_NAME_NOT_RESOLVED" in str(info.value)
