"""PokéSweep — Page Acquisition Layer"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

# Sent by both the direct fetcher and the headless browser
BROWSER_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Upgrade-Insecure-Requests": "1",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


class PageSnapshot(BaseModel):
    """A fetched or rendered page, ready for extraction."""
    url: str
    html: str
    status_code: int | None = None
    acquisition_method: str  # "http" | "browser"
    fetched_at: datetime
