"""
PokéSweep — Page Acquisition Runner

Picks how a pop-report page is obtained and bounds the whole sequence with
a single time budget:

- HTTP:    direct fetch only
- BROWSER: headless render only
- AUTO:    direct fetch first; headless render when the fetch fails or the
           HTML carries no PSA / card-number text (JS-built list)
"""

from __future__ import annotations

import asyncio
from typing import Callable

import structlog

from pokesweep.config import AcquisitionMode, settings
from pokesweep.errors import AcquisitionError
from pokesweep.extract.document import SoupDocument
from pokesweep.extract.fields import CARD_NUMBER_PATTERN, has_grade_marker
from pokesweep.scraper import PageSnapshot
from pokesweep.scraper.browser_render import BrowserPageRenderer
from pokesweep.scraper.http_fetch import HttpPageFetcher

logger = structlog.get_logger(__name__)


def looks_like_pop_report(html: str) -> bool:
    """True when the visible text shows a PSA grade or a card fraction."""
    text = SoupDocument(html).text_of(None)
    return has_grade_marker(text) or CARD_NUMBER_PATTERN.search(text) is not None


class PageAcquirer:
    """
    Runs the acquisition chain for one URL.

    Usage:
        acquirer = PageAcquirer(mode=AcquisitionMode.AUTO)
        snapshot = await acquirer.acquire(url)
    """

    def __init__(
        self,
        mode: AcquisitionMode | None = None,
        timeout_seconds: float | None = None,
        fetcher_factory: Callable[[], HttpPageFetcher] = HttpPageFetcher,
        renderer: BrowserPageRenderer | None = None,
    ) -> None:
        self.mode = AcquisitionMode(mode) if mode is not None else settings.ACQUISITION_MODE
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.ACQUISITION_TIMEOUT_SECONDS
        )
        self._fetcher_factory = fetcher_factory
        self._renderer = renderer or BrowserPageRenderer()

    async def acquire(self, url: str) -> PageSnapshot:
        """
        Obtain the page within the overall time budget.

        Raises:
            AcquisitionError: On upstream failure or when the budget runs out.
        """
        try:
            return await asyncio.wait_for(self._run_chain(url), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            logger.error(
                "acquisition_budget_exceeded",
                url=url,
                mode=self.mode.value,
                timeout_seconds=self.timeout_seconds,
                source="acquisition_runner",
            )
            raise AcquisitionError(
                f"Acquiring {url} exceeded {self.timeout_seconds}s",
                hint="Page acquisition timed out",
            ) from e

    async def _run_chain(self, url: str) -> PageSnapshot:
        if self.mode == AcquisitionMode.HTTP:
            return await self._fetch(url)

        if self.mode == AcquisitionMode.BROWSER:
            return await self._render(url)

        # AUTO
        logger.info("acquisition_trying_http", url=url, source="acquisition_runner")
        try:
            snapshot = await self._fetch(url)
        except AcquisitionError as e:
            logger.warning(
                "acquisition_http_failed_falling_back",
                url=url,
                error=str(e),
                status_code=e.status_code,
                source="acquisition_runner",
            )
            return await self._render(url)

        if looks_like_pop_report(snapshot.html):
            return snapshot

        logger.info("acquisition_http_no_card_text", url=url, source="acquisition_runner")
        return await self._render(url)

    async def _fetch(self, url: str) -> PageSnapshot:
        async with self._fetcher_factory() as fetcher:
            return await fetcher.fetch(url)

    async def _render(self, url: str) -> PageSnapshot:
        logger.info("acquisition_trying_browser", url=url, source="acquisition_runner")
        return await self._renderer.render(url)
