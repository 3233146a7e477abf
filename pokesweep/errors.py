"""
PokéSweep — Error taxonomy

Field-level misses are never errors (extractors return None / empty).
Everything here aborts a whole scrape and is surfaced to the caller.
"""

from __future__ import annotations


class PokeSweepError(Exception):
    """Base class for all scrape failures."""


class InputError(PokeSweepError):
    """A required identifier is missing or a parameter is malformed."""


class AcquisitionError(PokeSweepError):
    """
    The pop-report page could not be obtained.

    Carries the upstream HTTP status when there was one (non-2xx response)
    and a short diagnostic hint for the handler layer.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        hint: str = "Upstream fetch failed",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.hint = hint


class ExtractionError(PokeSweepError):
    """Unexpected failure while parsing a document; no records are returned."""
