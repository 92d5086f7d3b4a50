"""
Strip-then-validate candidate validation.

Raw strings read from a title-block crop are normalized, label prefixes are
stripped, and the remainder is judged against fixed lexicon tables. Validators
return tagged results with a RejectionReason; they never raise for content.
"""

from .choose import choose_best_candidate
from .discipline import infer_discipline, infer_sheet_kind
from .normalize import PrefixStrip, is_labeled_number, normalize_candidate, strip_number_prefix, strip_title_prefix
from .sheet_number import canonical_sheet_id, validate_sheet_number
from .sheet_title import validate_sheet_title

__all__ = [
    "PrefixStrip",
    "normalize_candidate",
    "strip_number_prefix",
    "strip_title_prefix",
    "is_labeled_number",
    "canonical_sheet_id",
    "validate_sheet_number",
    "validate_sheet_title",
    "choose_best_candidate",
    "infer_discipline",
    "infer_sheet_kind",
]
