"""
PokéSweep — Filter & Limit

Optional name / number filters (AND-composed) and a bounded result cap.
"""

from __future__ import annotations

import re
from typing import Any

from pokesweep.config import settings
from pokesweep.models import CardRecord

_WHITESPACE = re.compile(r"\s+")


def _strip_whitespace(value: str) -> str:
    return _WHITESPACE.sub("", value)


def filter_records(
    records: list[CardRecord],
    name_query: str | None = None,
    number_query: str | None = None,
) -> list[CardRecord]:
    """
    Keep records matching every filter given.

    - name_query: case-insensitive substring of name OR details.
    - number_query: exact match on the card number, whitespace ignored.
    """
    filtered = records

    if name_query:
        needle = name_query.lower()
        filtered = [
            r for r in filtered
            if needle in r.name.lower() or needle in r.details.lower()
        ]

    if number_query:
        want = _strip_whitespace(number_query)
        filtered = [
            r for r in filtered
            if r.card_number and _strip_whitespace(r.card_number) == want
        ]

    return filtered


def clamp_limit(limit: Any) -> int | None:
    """
    Clamp a requested limit into [RESULT_LIMIT_MIN, RESULT_LIMIT_MAX].

    None or "" means no limit. 0 behaves as 1, 500 as 200.

    Raises:
        ValueError: If the limit is not an integer.
    """
    if limit is None or (isinstance(limit, str) and not limit.strip()):
        return None
    value = int(limit)
    return max(settings.RESULT_LIMIT_MIN, min(settings.RESULT_LIMIT_MAX, value))


def apply_limit(records: list[CardRecord], limit: int | None) -> list[CardRecord]:
    if limit is None:
        return records
    return records[:limit]
