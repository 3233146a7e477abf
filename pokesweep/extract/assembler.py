"""
PokéSweep — Record Assembler

Runs every field extractor over each admitted block, applies the
strategy's acceptance rule, collapses nested views of the same card,
deduplicates by (name, card number) and optionally ranks by block size.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import structlog

from pokesweep.config import settings
from pokesweep.extract.document import Document
from pokesweep.extract.fields import (
    count_distinct_grades,
    extract_card_number,
    extract_grade_list,
    extract_name_and_details,
    extract_total_population,
    has_total_population_marker,
)
from pokesweep.extract.selector import CandidateBlock
from pokesweep.models import CardRecord

logger = structlog.get_logger(__name__)

_EMPTY_KEY = "|"


@dataclass
class BlockExtraction:
    """A block together with everything the extractors found in it."""
    block: CandidateBlock
    record: CardRecord
    grade_pairs: list[tuple[str, int]]


@dataclass
class Assembly:
    records: list[CardRecord] = field(default_factory=list)
    kept_block_count: int = 0


AcceptFn = Callable[[BlockExtraction], bool]


# ---------------------------------------------------------------------------
# Extraction per block
# ---------------------------------------------------------------------------


def extract_block(document: Document, block: CandidateBlock) -> BlockExtraction:
    pairs = extract_grade_list(block.text)
    grades: dict[str, int] = {}
    for label, value in pairs:
        grades.setdefault(label, value)

    name, details = extract_name_and_details(document, block.node, block.text)
    record = CardRecord(
        name=name,
        details=details,
        card_number=extract_card_number(block.text),
        total_pop=extract_total_population(block.text),
        grades=grades,
    )
    return BlockExtraction(block=block, record=record, grade_pairs=pairs)


# ---------------------------------------------------------------------------
# Acceptance rules
# ---------------------------------------------------------------------------


def accept_weak(item: BlockExtraction) -> bool:
    """Structural / text-fallback blocks: population marker plus a name or details."""
    if not has_total_population_marker(item.block.text):
        return False
    return bool(item.record.name or item.record.details)


def accept_strict(item: BlockExtraction, min_grades: int | None = None) -> bool:
    """
    Broad-sweep blocks: a card-number fraction AND at least `min_grades`
    distinct grade labels. Guards against page furniture that merely
    mentions "PSA" or a date like 1/2.
    """
    threshold = min_grades if min_grades is not None else settings.BROAD_SWEEP_MIN_GRADES
    if not item.grade_pairs:
        return False
    if item.record.card_number is None:
        return False
    return count_distinct_grades(item.grade_pairs) >= threshold


# ---------------------------------------------------------------------------
# Post-acceptance passes
# ---------------------------------------------------------------------------


def _is_list_wrapper(
    document: Document,
    item: BlockExtraction,
    items: list[BlockExtraction],
) -> bool:
    inner = [
        other for other in items
        if other is not item and document.contains(item.block.node, other.block.node)
    ]
    outermost = [
        other for other in inner
        if not any(
            parent is not other and document.contains(parent.block.node, other.block.node)
            for parent in inner
        )
    ]
    if len(outermost) < 2:
        return False
    numbers = {other.record.card_number for other in outermost}
    return None in numbers or len(numbers) > 1


def collapse_nested(document: Document, items: list[BlockExtraction]) -> list[BlockExtraction]:
    """
    One entry per card-sized subtree.

    - A block whose outermost accepted descendants are two or more separate
      cards is a list container, not a card: dropped. Descendants count as
      one card only when they all share the same card number; blocks
      without a number are always separate cards.
    - A block sitting inside a surviving block for the same (present) card
      number is a partial view of that card: dropped in favour of the
      outer one.
    """
    survivors = [item for item in items if not _is_list_wrapper(document, item, items)]

    collapsed = []
    for item in survivors:
        number = item.record.card_number
        shadowed = number is not None and any(
            other is not item
            and other.record.card_number == number
            and document.contains(other.block.node, item.block.node)
            for other in survivors
        )
        if not shadowed:
            collapsed.append(item)
    return collapsed


def deduplicate(items: list[BlockExtraction]) -> list[BlockExtraction]:
    """
    First record per lowercase-name + card-number key wins, in selection order.

    A key with both parts empty never collides: separate no-name/no-number
    records are all kept.
    """
    seen: set[str] = set()
    unique = []
    for item in items:
        key = item.record.identity_key
        if key != _EMPTY_KEY and key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique


def rank_by_length(items: list[BlockExtraction]) -> list[BlockExtraction]:
    """Longer blocks first; stable, so equal lengths keep selection order."""
    return sorted(items, key=lambda item: item.block.length, reverse=True)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def assemble_records(
    document: Document,
    blocks: list[CandidateBlock],
    accept: AcceptFn,
    rank: bool = False,
    collapse: bool = False,
) -> Assembly:
    """
    Turn admitted blocks into deduplicated CardRecords.

    Args:
        document: The parsed page the blocks came from.
        blocks: Admitted blocks in selection order.
        accept: Block-level acceptance rule for the selection strategy.
        rank: Sort by descending block text length after deduplication.
        collapse: Drop list containers and nested partial views.

    Returns:
        Assembly with the retained records and how many blocks were accepted.
    """
    accepted = [item for item in (extract_block(document, b) for b in blocks) if accept(item)]
    if collapse:
        accepted = collapse_nested(document, accepted)

    unique = deduplicate(accepted)
    if rank:
        unique = rank_by_length(unique)

    logger.info(
        "assembler_complete",
        admitted=len(blocks),
        accepted=len(accepted),
        unique=len(unique),
        source="assembler",
    )
    return Assembly(records=[item.record for item in unique], kept_block_count=len(accepted))
