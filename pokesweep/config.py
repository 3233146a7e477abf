"""
PokéSweep — Configuration & Constants

Every URL, timeout, threshold and selector budget lives here.
No hardcoded values in business logic.

Usage:
    from pokesweep.config import settings
"""

from __future__ import annotations

from enum import Enum

from pydantic_settings import BaseSettings


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class SelectionStrategy(str, Enum):
    """How candidate card blocks are picked out of a page."""
    STRUCTURAL_FIRST = "structural_first"  # class/tag conventions, text fallback
    BROAD_SWEEP = "broad_sweep"            # every container, content checks only


class AcquisitionMode(str, Enum):
    """How the pop-report page is obtained."""
    HTTP = "http"          # direct fetch, raw HTML
    BROWSER = "browser"    # headless Chromium, rendered DOM
    AUTO = "auto"          # HTTP first, browser when the HTML has no card text


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """
    Central configuration for PokéSweep.

    Loads from environment variables with fallback defaults.
    """

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # -----------------------------------------------------------------------
    # Pop report source
    # -----------------------------------------------------------------------
    POP_REPORT_BASE_URL: str = "https://www.pikawiz.com/cards/pop-report"
    POP_REPORT_REFERER: str = "https://www.pikawiz.com/cards/pop-report"
    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    )

    # -----------------------------------------------------------------------
    # Page acquisition
    # -----------------------------------------------------------------------
    ACQUISITION_MODE: AcquisitionMode = AcquisitionMode.BROWSER
    ACQUISITION_TIMEOUT_SECONDS: float = 25.0   # whole fetch + wait sequence
    HTTP_TIMEOUT_SECONDS: float = 15.0
    NAVIGATION_TIMEOUT_MS: int = 20000
    CONTENT_WAIT_TIMEOUT_MS: int = 15000
    SETTLE_DELAY_SECONDS: float = 1.2           # after domcontentloaded
    CHALLENGE_DELAY_SECONDS: float = 4.0        # extra wait on "Just a moment..."
    HEADLESS: bool = True

    # -----------------------------------------------------------------------
    # Extraction
    # -----------------------------------------------------------------------
    DEFAULT_SELECTION_STRATEGY: SelectionStrategy = SelectionStrategy.BROAD_SWEEP
    BROAD_SWEEP_MIN_GRADES: int = 3
    RESULT_LIMIT_MIN: int = 1
    RESULT_LIMIT_MAX: int = 200
    DEBUG_HINT_CHARS: int = 200

    # -----------------------------------------------------------------------
    # Service
    # -----------------------------------------------------------------------
    LOG_LEVEL: str = "INFO"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000


# Singleton instance
settings = Settings()
