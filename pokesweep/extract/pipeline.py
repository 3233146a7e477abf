"""
PokéSweep — Extraction Pipeline

One pipeline, configured by a SelectionStrategy. Each strategy supplies its
own block selection, acceptance rule and post-processing; field extraction,
assembly and filtering are shared.

    html -> Document -> select -> extract/accept/dedupe -> filter -> limit
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import structlog

from pokesweep.config import SelectionStrategy
from pokesweep.errors import ExtractionError
from pokesweep.extract.assembler import AcceptFn, accept_strict, accept_weak, assemble_records
from pokesweep.extract.document import Document, SoupDocument
from pokesweep.extract.filters import apply_limit, clamp_limit, filter_records
from pokesweep.extract.selector import Selection, select_broad_sweep, select_structural
from pokesweep.models import CardRecord

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StrategySpec:
    select: Callable[[Document], Selection]
    accept: AcceptFn
    rank: bool = False
    collapse: bool = False


STRATEGIES: dict[SelectionStrategy, StrategySpec] = {
    SelectionStrategy.STRUCTURAL_FIRST: StrategySpec(
        select=select_structural,
        accept=accept_weak,
        collapse=True,
    ),
    SelectionStrategy.BROAD_SWEEP: StrategySpec(
        select=select_broad_sweep,
        accept=accept_strict,
        rank=True,
        collapse=True,
    ),
}


@dataclass
class ExtractionOutcome:
    """Records after filtering plus the counts the debug block reports."""
    records: list[CardRecord] = field(default_factory=list)
    total_found: int = 0
    candidate_count: int = 0
    block_count: int = 0
    kept_block_count: int = 0
    body_text: str = ""


def extract_cards(
    html: str | Document,
    strategy: SelectionStrategy = SelectionStrategy.BROAD_SWEEP,
    name_query: str | None = None,
    number_query: str | None = None,
    limit: int | None = None,
) -> ExtractionOutcome:
    """
    Extract card population records from a pop-report page.

    Args:
        html: Raw or rendered page HTML, or an already-parsed Document.
        strategy: Which block selection / acceptance policy to run.
        name_query: Optional substring filter on name or details.
        number_query: Optional exact card-number filter.
        limit: Optional result cap, clamped to [1, 200].

    Returns:
        ExtractionOutcome. `total_found` counts records before filtering.

    Raises:
        ExtractionError: On any unexpected parsing failure. No partial
            record list is ever returned.
    """
    spec = STRATEGIES[SelectionStrategy(strategy)]

    try:
        document = SoupDocument(html) if isinstance(html, str) else html
        selection = spec.select(document)
        assembly = assemble_records(
            document,
            selection.blocks,
            accept=spec.accept,
            rank=spec.rank,
            collapse=spec.collapse,
        )
        filtered = filter_records(assembly.records, name_query=name_query, number_query=number_query)
        limited = apply_limit(filtered, clamp_limit(limit))
        body_text = document.text_of(None)
    except Exception as e:
        logger.error(
            "extraction_failed",
            strategy=SelectionStrategy(strategy).value,
            error=str(e),
            error_type=type(e).__name__,
            source="pipeline",
        )
        raise ExtractionError(str(e)) from e

    logger.info(
        "extraction_complete",
        strategy=SelectionStrategy(strategy).value,
        candidates=selection.candidate_count,
        blocks=len(selection.blocks),
        total_found=len(assembly.records),
        returned=len(limited),
        source="pipeline",
    )
    return ExtractionOutcome(
        records=limited,
        total_found=len(assembly.records),
        candidate_count=selection.candidate_count,
        block_count=len(selection.blocks),
        kept_block_count=assembly.kept_block_count,
        body_text=body_text,
    )
