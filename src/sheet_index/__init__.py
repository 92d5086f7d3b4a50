"""
Per-page sheet identification and the document sheet index.

Pipeline per page (deterministic, no network, no randomness):
label hits -> clusters -> selected title block -> label-anchored reads, then
the crop plan for anything still missing -> validated number/title ->
SheetIndexEntry or RejectionReason.
"""

from .anchored import read_anchored_values
from .confidence import ConfidenceParams, ConfidenceResult, calculate_confidence, route_confidence
from .config import SheetIdConfig
from .index import build_sheet_index, detect_boilerplate_titles, summarize_sheet_index
from .module import identify_sheet, identify_sheet_payload, locate_title_block, resolve_candidates

__all__ = [
    "SheetIdConfig",
    "ConfidenceParams",
    "ConfidenceResult",
    "calculate_confidence",
    "route_confidence",
    "locate_title_block",
    "read_anchored_values",
    "resolve_candidates",
    "identify_sheet",
    "identify_sheet_payload",
    "build_sheet_index",
    "detect_boilerplate_titles",
    "summarize_sheet_index",
]
