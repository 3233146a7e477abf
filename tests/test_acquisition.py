"""
Tests for the Page Acquisition Layer.

Covers:
- HttpPageFetcher: success, non-2xx, transport failure (respx)
- BrowserPageRenderer: navigation, challenge delay, content wait, cleanup
- PageAcquirer: mode dispatch, AUTO fallback chain, overall time budget
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, call, patch

import httpx
import pytest
import respx
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from pokesweep.config import AcquisitionMode, settings
from pokesweep.errors import AcquisitionError
from pokesweep.scraper import PageSnapshot
from pokesweep.scraper.browser_render import CARD_CONTENT_PROBE, BrowserPageRenderer
from pokesweep.scraper.http_fetch import HttpPageFetcher
from pokesweep.scraper.runner import PageAcquirer, looks_like_pop_report

URL = "https://www.pikawiz.com/cards/pop-report/baseset"


# ---------------------------------------------------------------------------
# HttpPageFetcher tests
# ---------------------------------------------------------------------------

class TestHttpPageFetcher:
    @pytest.mark.asyncio
    async def test_fetch_success(self, structural_html: str) -> None:
        """200 response comes back as an http snapshot with browser-like headers."""
        with respx.mock:
            route = respx.get(URL).mock(return_value=httpx.Response(200, text=structural_html))
            async with HttpPageFetcher() as fetcher:
                snapshot = await fetcher.fetch(URL)

        assert snapshot.url == URL
        assert snapshot.html == structural_html
        assert snapshot.status_code == 200
        assert snapshot.acquisition_method == "http"

        request = route.calls.last.request
        assert request.headers["User-Agent"] == settings.USER_AGENT
        assert request.headers["Referer"] == settings.POP_REPORT_REFERER
        assert "text/html" in request.headers["Accept"]

    @pytest.mark.asyncio
    async def test_fetch_non_success_status(self) -> None:
        with respx.mock:
            respx.get(URL).mock(return_value=httpx.Response(404, text="Not Found"))
            async with HttpPageFetcher() as fetcher:
                with pytest.raises(AcquisitionError) as exc_info:
                    await fetcher.fetch(URL)

        assert exc_info.value.status_code == 404
        assert "404" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_fetch_transport_error(self) -> None:
        with respx.mock:
            respx.get(URL).mock(side_effect=httpx.ConnectError("connection refused"))
            async with HttpPageFetcher() as fetcher:
                with pytest.raises(AcquisitionError) as exc_info:
                    await fetcher.fetch(URL)

        assert exc_info.value.status_code is None
        assert exc_info.value.hint == "Upstream fetch failed"

    @pytest.mark.asyncio
    async def test_fetch_requires_context_manager(self) -> None:
        with pytest.raises(AssertionError):
            await HttpPageFetcher().fetch(URL)


# ---------------------------------------------------------------------------
# BrowserPageRenderer tests
# ---------------------------------------------------------------------------

def _make_browser(
    status: int | None = 200,
    title: str = "Base Set Pop Report",
    html: str = "<html><body>PSA 10 121</body></html>",
) -> tuple[MagicMock, MagicMock, AsyncMock]:
    """Returns (playwright context manager, browser, page)."""
    page = AsyncMock()
    page.goto = AsyncMock(return_value=MagicMock(status=status))
    page.title = AsyncMock(return_value=title)
    page.wait_for_function = AsyncMock(return_value=True)
    page.content = AsyncMock(return_value=html)

    context = MagicMock()
    context.new_page = AsyncMock(return_value=page)

    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()

    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(return_value=browser)

    cm = MagicMock()
    cm.__aenter__ = AsyncMock(return_value=playwright)
    cm.__aexit__ = AsyncMock(return_value=False)
    return cm, browser, page


class TestBrowserPageRenderer:
    @pytest.mark.asyncio
    async def test_render_success(self) -> None:
        cm, browser, page = _make_browser()
        with patch("pokesweep.scraper.browser_render.async_playwright", return_value=cm), \
             patch("pokesweep.scraper.browser_render.asyncio.sleep", new_callable=AsyncMock) as sleep:
            snapshot = await BrowserPageRenderer().render(URL)

        assert snapshot.html == "<html><body>PSA 10 121</body></html>"
        assert snapshot.status_code == 200
        assert snapshot.acquisition_method == "browser"

        page.goto.assert_awaited_once_with(
            URL, wait_until="domcontentloaded", timeout=settings.NAVIGATION_TIMEOUT_MS
        )
        page.wait_for_function.assert_awaited_once_with(
            CARD_CONTENT_PROBE, timeout=settings.CONTENT_WAIT_TIMEOUT_MS
        )
        sleep.assert_awaited_once_with(settings.SETTLE_DELAY_SECONDS)
        browser.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_context_carries_user_agent_and_referer(self) -> None:
        cm, browser, _ = _make_browser()
        with patch("pokesweep.scraper.browser_render.async_playwright", return_value=cm), \
             patch("pokesweep.scraper.browser_render.asyncio.sleep", new_callable=AsyncMock):
            await BrowserPageRenderer(user_agent="UA/1.0", referer="https://ref.example").render(URL)

        kwargs = browser.new_context.call_args.kwargs
        assert kwargs["user_agent"] == "UA/1.0"
        assert kwargs["extra_http_headers"]["Referer"] == "https://ref.example"

    @pytest.mark.asyncio
    async def test_challenge_page_waits_longer(self) -> None:
        cm, _, _ = _make_browser(title="Just a moment...")
        with patch("pokesweep.scraper.browser_render.async_playwright", return_value=cm), \
             patch("pokesweep.scraper.browser_render.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await BrowserPageRenderer().render(URL)

        assert sleep.await_args_list == [
            call(settings.SETTLE_DELAY_SECONDS),
            call(settings.CHALLENGE_DELAY_SECONDS),
        ]

    @pytest.mark.asyncio
    async def test_navigation_timeout(self) -> None:
        """A goto timeout raises AcquisitionError and still closes the browser."""
        cm, browser, page = _make_browser()
        page.goto.side_effect = PlaywrightTimeoutError("Timeout 20000ms exceeded")
        with patch("pokesweep.scraper.browser_render.async_playwright", return_value=cm), \
             patch("pokesweep.scraper.browser_render.asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(AcquisitionError) as exc_info:
                await BrowserPageRenderer().render(URL)

        assert exc_info.value.hint == "Headless navigation timed out"
        browser.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_navigation_failure(self) -> None:
        cm, browser, page = _make_browser()
        page.goto.side_effect = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")
        with patch("pokesweep.scraper.browser_render.async_playwright", return_value=cm), \
             patch("pokesweep.scraper.browser_render.asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(AcquisitionError) as exc_info:
                await BrowserPageRenderer().render(URL)

        assert exc_info.value.hint == "Headless scrape failed"
        assert exc_info.value.status_code is None
        browser.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_error_status_without_content_fails(self) -> None:
        cm, browser, page = _make_browser(status=403)
        page.wait_for_function.side_effect = PlaywrightTimeoutError("Timeout 15000ms exceeded")
        with patch("pokesweep.scraper.browser_render.async_playwright", return_value=cm), \
             patch("pokesweep.scraper.browser_render.asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(AcquisitionError) as exc_info:
                await BrowserPageRenderer().render(URL)

        assert exc_info.value.status_code == 403
        page.content.assert_not_awaited()
        browser.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_content_wait_timeout_is_tolerated(self) -> None:
        """A 200 page whose list never appears is still parsed (it may just be empty)."""
        cm, _, page = _make_browser(html="<html><body>Nothing</body></html>")
        page.wait_for_function.side_effect = PlaywrightTimeoutError("Timeout 15000ms exceeded")
        with patch("pokesweep.scraper.browser_render.async_playwright", return_value=cm), \
             patch("pokesweep.scraper.browser_render.asyncio.sleep", new_callable=AsyncMock):
            snapshot = await BrowserPageRenderer().render(URL)

        assert snapshot.html == "<html><body>Nothing</body></html>"

    @pytest.mark.asyncio
    async def test_context_destroyed_during_wait_is_tolerated(self) -> None:
        """The interstitial navigating away mid-wait still yields the rendered page."""
        cm, browser, page = _make_browser(title="Just a moment...")
        page.wait_for_function.side_effect = PlaywrightError(
            "Execution context was destroyed, most likely because of a navigation"
        )
        with patch("pokesweep.scraper.browser_render.async_playwright", return_value=cm), \
             patch("pokesweep.scraper.browser_render.asyncio.sleep", new_callable=AsyncMock):
            snapshot = await BrowserPageRenderer().render(URL)

        assert snapshot.html == "<html><body>PSA 10 121</body></html>"
        assert snapshot.status_code == 200
        page.content.assert_awaited_once()
        browser.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_error_status_with_content_is_kept(self) -> None:
        cm, _, _ = _make_browser(status=403)
        with patch("pokesweep.scraper.browser_render.async_playwright", return_value=cm), \
             patch("pokesweep.scraper.browser_render.asyncio.sleep", new_callable=AsyncMock):
            snapshot = await BrowserPageRenderer().render(URL)

        assert snapshot.status_code == 403


# ---------------------------------------------------------------------------
# PageAcquirer tests
# ---------------------------------------------------------------------------

class FakeFetcher:
    """Stands in for HttpPageFetcher, including its async context manager."""

    def __init__(self, snapshot: PageSnapshot | None = None, error: Exception | None = None) -> None:
        self.snapshot = snapshot
        self.error = error
        self.calls: list[str] = []

    async def __aenter__(self) -> FakeFetcher:
        return self

    async def __aexit__(self, *args) -> None:
        return None

    async def fetch(self, url: str) -> PageSnapshot:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.snapshot


def _renderer(snapshot: PageSnapshot | None = None) -> MagicMock:
    renderer = MagicMock()
    renderer.render = AsyncMock(return_value=snapshot)
    return renderer


class TestLooksLikePopReport:
    def test_grade_text(self) -> None:
        assert looks_like_pop_report("<p>PSA 10 121</p>") is True

    def test_fraction_text(self) -> None:
        assert looks_like_pop_report("<p>Charizard 4/102</p>") is True

    def test_js_shell(self) -> None:
        """Card data only inside a script tag does not count."""
        html = "<div id='root'></div><script>window.data = 'PSA 10 1 4/102'</script>"
        assert looks_like_pop_report(html) is False


class TestPageAcquirer:
    @pytest.mark.asyncio
    async def test_http_mode_fetches_only(self, make_snapshot, structural_html: str) -> None:
        fetcher = FakeFetcher(snapshot=make_snapshot(structural_html, method="http"))
        renderer = _renderer()
        acquirer = PageAcquirer(mode=AcquisitionMode.HTTP, fetcher_factory=lambda: fetcher, renderer=renderer)

        snapshot = await acquirer.acquire(URL)

        assert snapshot.acquisition_method == "http"
        assert fetcher.calls == [URL]
        renderer.render.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_http_mode_propagates_error(self) -> None:
        fetcher = FakeFetcher(error=AcquisitionError("HTTP 403", status_code=403))
        renderer = _renderer()
        acquirer = PageAcquirer(mode=AcquisitionMode.HTTP, fetcher_factory=lambda: fetcher, renderer=renderer)

        with pytest.raises(AcquisitionError) as exc_info:
            await acquirer.acquire(URL)

        assert exc_info.value.status_code == 403
        renderer.render.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_browser_mode_renders_only(self, make_snapshot, structural_html: str) -> None:
        fetcher = FakeFetcher()
        renderer = _renderer(make_snapshot(structural_html))
        acquirer = PageAcquirer(mode="browser", fetcher_factory=lambda: fetcher, renderer=renderer)

        snapshot = await acquirer.acquire(URL)

        assert snapshot.acquisition_method == "browser"
        assert fetcher.calls == []
        renderer.render.assert_awaited_once_with(URL)

    @pytest.mark.asyncio
    async def test_auto_keeps_http_when_cards_present(self, make_snapshot, structural_html: str) -> None:
        fetcher = FakeFetcher(snapshot=make_snapshot(structural_html, method="http"))
        renderer = _renderer()
        acquirer = PageAcquirer(mode=AcquisitionMode.AUTO, fetcher_factory=lambda: fetcher, renderer=renderer)

        snapshot = await acquirer.acquire(URL)

        assert snapshot.acquisition_method == "http"
        renderer.render.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_auto_renders_js_shell(self, make_snapshot, structural_html: str) -> None:
        shell = "<html><body><div id='root'></div></body></html>"
        fetcher = FakeFetcher(snapshot=make_snapshot(shell, method="http"))
        renderer = _renderer(make_snapshot(structural_html))
        acquirer = PageAcquirer(mode=AcquisitionMode.AUTO, fetcher_factory=lambda: fetcher, renderer=renderer)

        snapshot = await acquirer.acquire(URL)

        assert snapshot.acquisition_method == "browser"
        assert fetcher.calls == [URL]
        renderer.render.assert_awaited_once_with(URL)

    @pytest.mark.asyncio
    async def test_auto_renders_after_fetch_error(self, make_snapshot, structural_html: str) -> None:
        fetcher = FakeFetcher(error=AcquisitionError("HTTP 403", status_code=403))
        renderer = _renderer(make_snapshot(structural_html))
        acquirer = PageAcquirer(mode=AcquisitionMode.AUTO, fetcher_factory=lambda: fetcher, renderer=renderer)

        snapshot = await acquirer.acquire(URL)

        assert snapshot.acquisition_method == "browser"
        renderer.render.assert_awaited_once_with(URL)

    @pytest.mark.asyncio
    async def test_time_budget_exceeded(self) -> None:
        async def slow_render(url: str) -> PageSnapshot:
            await asyncio.sleep(5)
            raise AssertionError("should have been cancelled")

        renderer = MagicMock()
        renderer.render = slow_render
        acquirer = PageAcquirer(
            mode=AcquisitionMode.BROWSER,
            timeout_seconds=0.05,
            fetcher_factory=FakeFetcher,
            renderer=renderer,
        )

        with pytest.raises(AcquisitionError) as exc_info:
            await acquirer.acquire(URL)

        assert exc_info.value.hint == "Page acquisition timed out"

    def test_defaults_from_settings(self) -> None:
        acquirer = PageAcquirer()
        assert acquirer.mode == settings.ACQUISITION_MODE
        assert acquirer.timeout_seconds == settings.ACQUISITION_TIMEOUT_SECONDS
