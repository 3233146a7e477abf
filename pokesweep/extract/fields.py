"""
PokéSweep — Field Extractors

Independent pattern matchers, one per semantic field. Each takes normalized
block text (or a node scoped to one block) and returns a typed optional value.
A miss is None / empty, never an exception.

Patterns:
- Grades:        "PSA 10 13,782", "PSA10 13782", "psa 9 1,204" (repeated)
- Total:         "Total Population 18,361" or "Population 18,361"
- Card number:   "215/203", "4 / 102"
"""

from __future__ import annotations

import re
from typing import Any

from pokesweep.extract.document import Document
from pokesweep.extract.numeric import clean_number

GRADE_PATTERN = re.compile(r"PSA\s*([0-9]{1,2})(?!\d)\s*([0-9,]+)", re.IGNORECASE)
GRADE_MARKER_PATTERN = re.compile(r"PSA\s*\d", re.IGNORECASE)
TOTAL_POP_PATTERN = re.compile(r"(Total\s*)?Population\s*([0-9,]+)", re.IGNORECASE)
TOTAL_POP_MARKER_PATTERN = re.compile(r"(Total\s*)?Population", re.IGNORECASE)
CARD_NUMBER_PATTERN = re.compile(r"\d{1,4}\s*/\s*\d{1,4}")

# A word that can be part of a card name ("Mr.", "Farfetch'd", "Ho-Oh", "Porygon2")
_NAME_TOKEN = re.compile(r"[^\W\d_][\w'’.\-]*")
_POP_REPORT_LABEL = re.compile(
    r"^\s*(?:pop(?:ulation)?[\s\-]*report)\b[\s:\-–]*", re.IGNORECASE
)
_WHITESPACE = re.compile(r"\s+")

NAME_HINTS = "h2, h3, .name, .title"
DETAIL_HINTS = "p, .details, small, .subtitle, .sub"


def normalize_text(text: str | None) -> str:
    """Collapse whitespace runs to a single space and trim."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


def grade_label(grade: str) -> str:
    return f"PSA {int(grade)}"


def extract_grade_list(text: str) -> list[tuple[str, int]]:
    """Every (grade label, population) pair in order, repeats included."""
    pairs: list[tuple[str, int]] = []
    for match in GRADE_PATTERN.finditer(text or ""):
        value = clean_number(match.group(2))
        if value is None:
            continue
        pairs.append((grade_label(match.group(1)), value))
    return pairs


def extract_grades(text: str) -> dict[str, int]:
    """
    Grade label -> population, one entry per distinct grade.

    The first occurrence of a grade wins; values that fail to parse
    (a bare "," for instance) are omitted rather than stored as None.
    """
    grades: dict[str, int] = {}
    for label, value in extract_grade_list(text):
        grades.setdefault(label, value)
    return grades


def count_distinct_grades(pairs: list[tuple[str, int]]) -> int:
    return len({label for label, _ in pairs})


def has_grade_marker(text: str) -> bool:
    return GRADE_MARKER_PATTERN.search(text or "") is not None


def extract_total_population(text: str) -> int | None:
    match = TOTAL_POP_PATTERN.search(text or "")
    return clean_number(match.group(2)) if match else None


def has_total_population_marker(text: str) -> bool:
    return TOTAL_POP_MARKER_PATTERN.search(text or "") is not None


def extract_card_number(text: str) -> str | None:
    """First 'N/M' fraction in the text with internal whitespace removed."""
    match = CARD_NUMBER_PATTERN.search(text or "")
    if not match:
        return None
    return _WHITESPACE.sub("", match.group(0))


def extract_name_from_text(text: str) -> str:
    """
    Fallback name: the word span right before the first card-number fraction.

    "Pop Report Charizard Holo 4/102 ..." -> "Charizard Holo"
    """
    match = CARD_NUMBER_PATTERN.search(text or "")
    if not match:
        return ""

    words: list[str] = []
    for token in reversed(text[:match.start()].split()):
        if not _NAME_TOKEN.fullmatch(token):
            break
        words.append(token)

    name = " ".join(reversed(words))
    return normalize_text(_POP_REPORT_LABEL.sub("", name))


def extract_name_and_details(
    document: Document,
    node: Any,
    text: str | None = None,
) -> tuple[str, str]:
    """
    Name and detail line for one block.

    Heading / name-class nodes give the name, paragraph / details-class
    nodes give the details. When no name hint matches, the name falls back
    to the text heuristic over the block's normalized text.
    """
    name_node = document.select_first(NAME_HINTS, scope=node)
    detail_node = document.select_first(DETAIL_HINTS, scope=node)

    name = normalize_text(document.text_of(name_node)) if name_node is not None else ""
    details = normalize_text(document.text_of(detail_node)) if detail_node is not None else ""

    if not name:
        if text is None:
            text = normalize_text(document.text_of(node))
        name = extract_name_from_text(text)

    return name, details
