"""
PokéSweep — Direct HTTP Fetcher

Plain GET of the pop-report page. Cheap, but only sees server-rendered HTML;
the rendered-browser path covers pages that build their card list in JS.
Non-2xx responses and network failures raise AcquisitionError; there are
no automatic retries.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx
import structlog

from pokesweep.config import settings
from pokesweep.errors import AcquisitionError
from pokesweep.scraper import BROWSER_HEADERS, PageSnapshot

logger = structlog.get_logger(__name__)


class HttpPageFetcher:
    """
    Async fetcher for pop-report pages.

    Usage:
        async with HttpPageFetcher() as fetcher:
            snapshot = await fetcher.fetch(url)
    """

    def __init__(
        self,
        timeout: float | None = None,
        user_agent: str | None = None,
        referer: str | None = None,
    ) -> None:
        self._timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS
        self._user_agent = user_agent or settings.USER_AGENT
        self._referer = referer or settings.POP_REPORT_REFERER
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> HttpPageFetcher:
        headers = {
            **BROWSER_HEADERS,
            "User-Agent": self._user_agent,
            "Referer": self._referer,
        }
        self._client = httpx.AsyncClient(
            headers=headers,
            timeout=self._timeout,
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()

    async def fetch(self, url: str) -> PageSnapshot:
        """
        GET a page and return its HTML.

        Raises:
            AcquisitionError: Non-2xx status (status_code carried through)
                or a transport-level failure (status_code None).
        """
        assert self._client is not None, "Fetcher not initialized. Use 'async with'."

        logger.info("http_fetch_start", url=url, source="http_fetch")

        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error("http_fetch_bad_status", url=url, status_code=status, source="http_fetch")
            raise AcquisitionError(
                f"Upstream returned HTTP {status} for {url}",
                status_code=status,
                hint="Upstream fetch returned a non-success status",
            ) from e
        except httpx.RequestError as e:
            logger.error("http_fetch_request_error", url=url, error=str(e), source="http_fetch")
            raise AcquisitionError(
                f"Request to {url} failed: {e}",
                hint="Upstream fetch failed",
            ) from e

        logger.info(
            "http_fetch_complete",
            url=url,
            status_code=response.status_code,
            chars=len(response.text),
            source="http_fetch",
        )
        return PageSnapshot(
            url=url,
            html=response.text,
            status_code=response.status_code,
            acquisition_method="http",
            fetched_at=datetime.now(timezone.utc),
        )
