"""
PokéSweep — Set Scrape Service

The one operation the handler layer calls: resolve a set slug to its
pop-report page, acquire it, run extraction and shape the result.

Error contract:
- InputError       missing slug / malformed limit, raised before any fetch
- AcquisitionError page could not be obtained (status + hint carried)
- ExtractionError  anything unexpected while parsing; no partial results
"""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import quote

import structlog

from pokesweep.config import SelectionStrategy, settings
from pokesweep.errors import ExtractionError, InputError
from pokesweep.extract.filters import clamp_limit
from pokesweep.extract.fields import normalize_text
from pokesweep.extract.pipeline import extract_cards
from pokesweep.models import DebugInfo, FilterEcho, ScrapeSetResult
from pokesweep.scraper.runner import PageAcquirer

logger = structlog.get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")


def normalize_slug(set_slug: Any) -> str:
    """'Evolving Skies' -> 'evolvingskies'. Raises InputError when empty."""
    if set_slug is None:
        raise InputError("setSlug is required")
    slug = _WHITESPACE.sub("", str(set_slug).lower())
    if not slug:
        raise InputError("setSlug is required")
    return slug


def build_source_url(slug: str) -> str:
    return f"{settings.POP_REPORT_BASE_URL.rstrip('/')}/{quote(slug, safe='')}"


def _sample_text_hints(body_text: str) -> list[str]:
    """Two short slices of the page text for debugging selector misses."""
    size = settings.DEBUG_HINT_CHARS
    return [
        normalize_text(body_text[:size]),
        normalize_text(body_text[size:size * 2]),
    ]


async def scrape_set(
    set_slug: Any,
    pokemon_name: str | None = None,
    card_number: str | None = None,
    limit: Any = None,
    debug: bool = False,
    strategy: SelectionStrategy | str | None = None,
    acquirer: PageAcquirer | None = None,
) -> ScrapeSetResult:
    """
    Scrape one set's pop report.

    Args:
        set_slug: Set identifier, e.g. "baseset" or "Evolving Skies".
        pokemon_name: Optional substring filter on card name / details.
        card_number: Optional exact card-number filter ("4/102").
        limit: Optional result cap, clamped to [1, 200].
        debug: Attach internal counts and text hints to the result.
        strategy: Block selection strategy; settings default when None.
        acquirer: Page acquisition chain; settings-driven default when None.

    Returns:
        ScrapeSetResult with ok=True.
    """
    slug = normalize_slug(set_slug)
    try:
        clamped_limit = clamp_limit(limit)
    except (TypeError, ValueError) as e:
        raise InputError(f"limit must be an integer, got {limit!r}") from e
    try:
        chosen_strategy = (
            SelectionStrategy(strategy) if strategy else settings.DEFAULT_SELECTION_STRATEGY
        )
    except ValueError as e:
        raise InputError(f"Unknown strategy {strategy!r}") from e

    url = build_source_url(slug)
    acquirer = acquirer or PageAcquirer()

    logger.info(
        "scrape_set_start",
        set_slug=slug,
        url=url,
        strategy=chosen_strategy.value,
        mode=acquirer.mode.value,
        source="service",
    )

    snapshot = await acquirer.acquire(url)

    try:
        outcome = extract_cards(
            snapshot.html,
            strategy=chosen_strategy,
            name_query=pokemon_name or None,
            number_query=card_number or None,
            limit=clamped_limit,
        )
    except ExtractionError:
        raise
    except Exception as e:
        logger.error("scrape_set_unexpected_error", set_slug=slug, error=str(e), source="service")
        raise ExtractionError(str(e)) from e

    result = ScrapeSetResult(
        ok=True,
        source=url,
        total_found=outcome.total_found,
        returned=len(outcome.records),
        filtered_by=FilterEcho(pokemon_name=pokemon_name or None, card_number=card_number or None),
        cards=outcome.records,
    )

    if debug:
        result.debug = DebugInfo(
            node_count=outcome.candidate_count,
            block_count=outcome.block_count,
            kept_count=outcome.kept_block_count,
            strategy=chosen_strategy.value,
            acquisition_method=snapshot.acquisition_method,
            sample_text_hints=_sample_text_hints(outcome.body_text),
        )

    logger.info(
        "scrape_set_complete",
        set_slug=slug,
        total_found=result.total_found,
        returned=result.returned,
        source="service",
    )
    return result
