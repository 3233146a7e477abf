"""
PokéSweep — Market Cap Aggregate

Manually entered (card name, price, population) triples and their running
market cap: sum of price x population across every entry.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, NamedTuple

import structlog

logger = structlog.get_logger(__name__)

_ZERO = Decimal("0")


class PortfolioEntry(NamedTuple):
    name: str
    price: Decimal
    population: int

    @property
    def market_cap(self) -> Decimal:
        return self.price * self.population


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class Portfolio:
    """
    Running list of entries.

    Usage:
        portfolio = Portfolio()
        portfolio.add("Charizard", "350.00", 1204)
        portfolio.total_market_cap  # Decimal('421400.00')
    """

    def __init__(self) -> None:
        self._entries: list[PortfolioEntry] = []

    @property
    def entries(self) -> list[PortfolioEntry]:
        return list(self._entries)

    def add(self, name: Any, price: Any, population: Any) -> bool:
        """
        Append an entry. Returns False (and adds nothing) when any field is
        empty.

        Raises:
            ValueError: price or population is present but not numeric, or
                either is negative.
        """
        if _is_blank(name) or _is_blank(price) or _is_blank(population):
            logger.debug("portfolio_entry_incomplete", name=name, source="portfolio")
            return False

        try:
            parsed_price = Decimal(str(price).strip())
        except InvalidOperation as e:
            raise ValueError(f"price must be numeric, got {price!r}") from e
        if not parsed_price.is_finite():
            raise ValueError(f"price must be numeric, got {price!r}")
        try:
            parsed_population = int(str(population).strip())
        except ValueError as e:
            raise ValueError(f"population must be an integer, got {population!r}") from e

        if parsed_price < _ZERO or parsed_population < 0:
            raise ValueError("price and population must be non-negative")

        entry = PortfolioEntry(str(name).strip(), parsed_price, parsed_population)
        self._entries.append(entry)
        logger.info(
            "portfolio_entry_added",
            name=entry.name,
            price=str(entry.price),
            population=entry.population,
            source="portfolio",
        )
        return True

    @property
    def total_market_cap(self) -> Decimal:
        return sum((entry.market_cap for entry in self._entries), _ZERO)
