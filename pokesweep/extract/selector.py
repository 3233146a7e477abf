"""
PokéSweep — Block Selector

Finds the nodes of a pop-report page that each hold one card's data.

Two strategies:
1. Structural-first: try a prioritized list of CSS conventions and keep the
   query with the MOST matches (pages often follow a guessed convention only
   partly). If nothing matches, fall back to any container whose text carries
   a "(Total) Population" marker.
2. Broad sweep: every section/article/div/li is a candidate; only blocks whose
   text shows a PSA grade or a card-number fraction are admitted. Final
   acceptance is left to the assembler's content checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from pokesweep.config import SelectionStrategy
from pokesweep.extract.document import Document
from pokesweep.extract.fields import (
    CARD_NUMBER_PATTERN,
    has_grade_marker,
    has_total_population_marker,
    normalize_text,
)

logger = structlog.get_logger(__name__)

STRUCTURAL_QUERIES: tuple[str, ...] = (
    ".card",
    "article, li[role='listitem'], [role='article']",
    "[class*='card']",
)
FALLBACK_CONTAINERS = "div, section, article, li"
BROAD_SWEEP_CONTAINERS = "section, article, div, li"


@dataclass
class CandidateBlock:
    """A node hypothesized to be one card entry, with its normalized text."""
    node: Any
    text: str

    @property
    def length(self) -> int:
        return len(self.text)


@dataclass
class Selection:
    """Admitted blocks plus how many raw candidates were looked at."""
    blocks: list[CandidateBlock] = field(default_factory=list)
    candidate_count: int = 0
    matched_query: str | None = None


def _to_block(document: Document, node: Any) -> CandidateBlock:
    return CandidateBlock(node=node, text=normalize_text(document.text_of(node)))


def select_structural(document: Document) -> Selection:
    """Structural conventions first, population-marker text scan second."""
    best_query: str | None = None
    best_nodes: list[Any] = []

    for query in STRUCTURAL_QUERIES:
        nodes = document.select(query)
        logger.debug("selector_query_evaluated", query=query, matches=len(nodes), source="selector")
        if len(nodes) > len(best_nodes):
            best_query, best_nodes = query, nodes

    if best_nodes:
        blocks = [_to_block(document, node) for node in best_nodes]
        logger.info(
            "selector_structural_match",
            query=best_query,
            blocks=len(blocks),
            source="selector",
        )
        return Selection(blocks=blocks, candidate_count=len(best_nodes), matched_query=best_query)

    containers = document.select(FALLBACK_CONTAINERS)
    blocks = []
    for node in containers:
        block = _to_block(document, node)
        if has_total_population_marker(block.text):
            blocks.append(block)

    logger.info(
        "selector_text_fallback",
        candidates=len(containers),
        blocks=len(blocks),
        source="selector",
    )
    return Selection(blocks=blocks, candidate_count=len(containers), matched_query=None)


def select_broad_sweep(document: Document) -> Selection:
    """Every generic container; admit only those showing a grade or a fraction."""
    containers = document.select(BROAD_SWEEP_CONTAINERS)
    blocks = []
    for node in containers:
        block = _to_block(document, node)
        if has_grade_marker(block.text) or CARD_NUMBER_PATTERN.search(block.text):
            blocks.append(block)

    logger.info(
        "selector_broad_sweep",
        candidates=len(containers),
        blocks=len(blocks),
        source="selector",
    )
    return Selection(blocks=blocks, candidate_count=len(containers), matched_query=BROAD_SWEEP_CONTAINERS)


def select_blocks(document: Document, strategy: SelectionStrategy | str) -> Selection:
    """Run the selector for one strategy."""
    if SelectionStrategy(strategy) == SelectionStrategy.STRUCTURAL_FIRST:
        return select_structural(document)
    return select_broad_sweep(document)
