"""
PokéSweep — Numeric Normalizer

Population counts arrive as "13,782", "13782 cards", " 1 204 " etc.
"""

from __future__ import annotations

import re
from typing import Any

_NON_DIGIT = re.compile(r"\D")


def clean_number(value: Any) -> int | None:
    """
    Strip everything but digits and parse as a base-10 integer.

    Returns None for None, an empty string, or input with no digits.
    Never raises.
    """
    if value is None:
        return None
    digits = _NON_DIGIT.sub("", str(value))
    if not digits:
        return None
    return int(digits)
