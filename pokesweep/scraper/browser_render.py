"""
PokéSweep — Headless Browser Renderer

Loads a pop-report page in headless Chromium like a real visitor and hands
back the rendered HTML. Nothing here knows about cards beyond the content
probe used to decide the page has finished building its list.

Sequence:
1. goto(domcontentloaded)
2. short settle delay
3. extra delay when an interstitial ("Just a moment...") is showing
4. bounded wait for PSA / card-number text (timeout tolerated)
5. page.content()

The browser is closed on every exit path.
"""

from __future__ import annotations

import asyncio
import re
from datetime import datetime, timezone
from typing import Any

import structlog
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from pokesweep.config import settings
from pokesweep.errors import AcquisitionError
from pokesweep.scraper import BROWSER_HEADERS, PageSnapshot

logger = structlog.get_logger(__name__)

CHALLENGE_TITLE_PATTERN = re.compile(r"just a moment", re.IGNORECASE)

CARD_CONTENT_PROBE = r"""
() => typeof document !== "undefined" &&
      document.body &&
      /PSA\s*\d|(\d{1,4}\s*\/\s*\d{1,4})/i.test(document.body.innerText)
"""

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
]


class BrowserPageRenderer:
    """
    Renders pages with Playwright Chromium.

    Usage:
        renderer = BrowserPageRenderer()
        snapshot = await renderer.render(url)
    """

    def __init__(
        self,
        headless: bool | None = None,
        user_agent: str | None = None,
        referer: str | None = None,
    ) -> None:
        self.headless = settings.HEADLESS if headless is None else headless
        self.user_agent = user_agent or settings.USER_AGENT
        self.referer = referer or settings.POP_REPORT_REFERER

    async def render(self, url: str) -> PageSnapshot:
        """
        Navigate to `url` and return the rendered DOM as HTML.

        Raises:
            AcquisitionError: Navigation failed or timed out, or the page
                answered with an error status and never showed card content.
        """
        logger.info("browser_render_start", url=url, headless=self.headless, source="browser_render")

        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=self.headless, args=LAUNCH_ARGS)
            try:
                context = await browser.new_context(
                    user_agent=self.user_agent,
                    extra_http_headers={**BROWSER_HEADERS, "Referer": self.referer},
                    viewport={"width": 1366, "height": 900},
                )
                page = await context.new_page()

                try:
                    response = await page.goto(
                        url,
                        wait_until="domcontentloaded",
                        timeout=settings.NAVIGATION_TIMEOUT_MS,
                    )
                except PlaywrightTimeoutError as e:
                    logger.error("browser_navigation_timeout", url=url, source="browser_render")
                    raise AcquisitionError(
                        f"Navigation to {url} timed out",
                        hint="Headless navigation timed out",
                    ) from e
                except PlaywrightError as e:
                    logger.error("browser_navigation_failed", url=url, error=str(e), source="browser_render")
                    raise AcquisitionError(
                        f"Navigation to {url} failed: {e}",
                        hint="Headless scrape failed",
                    ) from e

                status = response.status if response is not None else None

                await asyncio.sleep(settings.SETTLE_DELAY_SECONDS)
                if await self._is_challenge_page(page):
                    logger.info("browser_challenge_detected", url=url, source="browser_render")
                    await asyncio.sleep(settings.CHALLENGE_DELAY_SECONDS)

                content_ready = await self._wait_for_card_content(page)
                if not content_ready and status is not None and status >= 400:
                    raise AcquisitionError(
                        f"Upstream returned HTTP {status} for {url}",
                        status_code=status,
                        hint="Upstream page never showed card content",
                    )

                html = await page.content()
            finally:
                await self._close(browser)

        logger.info(
            "browser_render_complete",
            url=url,
            status_code=status,
            content_ready=content_ready,
            chars=len(html),
            source="browser_render",
        )
        return PageSnapshot(
            url=url,
            html=html,
            status_code=status,
            acquisition_method="browser",
            fetched_at=datetime.now(timezone.utc),
        )

    async def _is_challenge_page(self, page: Any) -> bool:
        try:
            title = await page.title()
        except PlaywrightError as e:
            logger.debug("browser_title_unavailable", error=str(e), source="browser_render")
            return False
        return bool(CHALLENGE_TITLE_PATTERN.search(title or ""))

    async def _wait_for_card_content(self, page: Any) -> bool:
        """
        Bounded wait for card-like text. A timeout, or an interstitial
        navigating mid-wait ("Execution context was destroyed"), still lets
        us parse whatever the page holds.
        """
        try:
            await page.wait_for_function(CARD_CONTENT_PROBE, timeout=settings.CONTENT_WAIT_TIMEOUT_MS)
            return True
        except PlaywrightTimeoutError:
            logger.warning("browser_content_wait_timeout", source="browser_render")
            return False
        except PlaywrightError as e:
            logger.warning("browser_content_wait_failed", error=str(e), source="browser_render")
            return False

    async def _close(self, browser: Any) -> None:
        try:
            await browser.close()
        except PlaywrightError as e:
            logger.warning("browser_close_failed", error=str(e), source="browser_render")
