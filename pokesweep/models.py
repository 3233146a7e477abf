"""
PokéSweep — Response Models

Pydantic models for everything that leaves the extraction pipeline.
Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CardRecord(BaseModel):
    """One card's population data extracted from a pop-report block."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(default="", description="Card display name")
    details: str = Field(default="", description="Rarity / subtype line")
    card_number: str | None = Field(
        default=None, alias="cardNumber", description="Set fraction, e.g. '4/102'"
    )
    total_pop: int | None = Field(
        default=None, alias="totalPop", description="Total graded population"
    )
    grades: dict[str, int] = Field(
        default_factory=dict, description="Grade label ('PSA 10') -> population"
    )

    @property
    def identity_key(self) -> str:
        """Lowercased name + card number, used for deduplication."""
        return f"{self.name.lower()}|{self.card_number or ''}"


class FilterEcho(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pokemon_name: str | None = Field(default=None, alias="pokemonName")
    card_number: str | None = Field(default=None, alias="cardNumber")


class DebugInfo(BaseModel):
    """Internal counts to help tune the heuristics without dumping HTML."""

    model_config = ConfigDict(populate_by_name=True)

    node_count: int = Field(..., alias="nodeCount")
    block_count: int = Field(..., alias="blockCount")
    kept_count: int = Field(..., alias="keptCount")
    strategy: str
    acquisition_method: str = Field(..., alias="acquisitionMethod")
    sample_text_hints: list[str] = Field(default_factory=list, alias="sampleTextHints")


class ScrapeSetResult(BaseModel):
    """Structured result of one set scrape."""

    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    source: str
    total_found: int = Field(..., alias="totalFound")
    returned: int
    filtered_by: FilterEcho = Field(..., alias="filteredBy")
    cards: list[CardRecord] = Field(default_factory=list)
    debug: DebugInfo | None = None

    def to_response(self) -> dict[str, Any]:
        """Wire format: camelCase keys, no `debug` key unless requested."""
        data = self.model_dump(mode="json", by_alias=True)
        if self.debug is None:
            data.pop("debug", None)
        return data
