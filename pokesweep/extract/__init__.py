from pokesweep.extract.document import Document, SoupDocument
from pokesweep.extract.fields import (
    extract_card_number,
    extract_grade_list,
    extract_grades,
    extract_name_and_details,
    extract_name_from_text,
    extract_total_population,
)
from pokesweep.extract.filters import apply_limit, clamp_limit, filter_records
from pokesweep.extract.numeric import clean_number
from pokesweep.extract.pipeline import ExtractionOutcome, extract_cards

__all__ = [
    "Document",
    "ExtractionOutcome",
    "SoupDocument",
    "apply_limit",
    "clamp_limit",
    "clean_number",
    "extract_card_number",
    "extract_cards",
    "extract_grade_list",
    "extract_grades",
    "extract_name_and_details",
    "extract_name_from_text",
    "extract_total_population",
    "filter_records",
]
