"""
Deterministic confidence gate for a sheet index entry.

Confidence is a QA routing signal, not decoration: the same inputs always
produce the same number, breakdown and routing.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from contracts.sheet_index import ExtractionSource, ReviewRouting

CONFIDENCE_BASE: MappingProxyType[ExtractionSource, float] = MappingProxyType(
    {
        ExtractionSource.VECTOR_ANCHORED: 0.95,
        ExtractionSource.VECTOR_HEURISTIC: 0.80,
        ExtractionSource.OCR_CROP: 0.75,
        ExtractionSource.VISION_CROP: 0.70,
        ExtractionSource.VISION_FULL: 0.60,
        ExtractionSource.FAIL_CROP: 0.30,
        ExtractionSource.UNKNOWN: 0.20,
    }
)

BOTH_LABELS_BONUS = 0.03
TOP_TIER_PATTERN_BONUS = 0.03
CLEAN_TITLE_BONUS = 0.02
ONE_SIDED_PENALTY = 0.10
TRUNCATION_PENALTY = 0.20

AUTO_ACCEPT_THRESHOLD = 0.85
MANUAL_FLAG_THRESHOLD = 0.30


@dataclass(frozen=True, slots=True)
class ConfidenceParams:
    extraction_source: ExtractionSource
    anchored_extraction: bool  # number read from a region beside its label
    has_sheet_number: bool
    has_sheet_title: bool
    has_both_labels_in_cluster: bool
    top_tier_number_pattern: bool
    title_passes_clean_checks: bool
    truncation_suspected: bool


@dataclass(frozen=True, slots=True)
class ConfidenceResult:
    confidence: float
    routing: ReviewRouting
    breakdown: list[str]

    @property
    def flag_for_review(self) -> bool:
        return self.routing == ReviewRouting.FLAG_FOR_REVIEW

    @property
    def manual_flag(self) -> bool:
        return self.routing == ReviewRouting.MANUAL_FLAG

    def to_dict(self) -> dict[str, Any]:
        return {
            "confidence": self.confidence,
            "routing": self.routing.value,
            "breakdown": list(self.breakdown),
        }


def resolve_source(source: ExtractionSource, *, anchored: bool) -> ExtractionSource:
    if source == ExtractionSource.VECTOR_TEXT:
        return ExtractionSource.VECTOR_ANCHORED if anchored else ExtractionSource.VECTOR_HEURISTIC
    return source


def route_confidence(confidence: float) -> ReviewRouting:
    if confidence < MANUAL_FLAG_THRESHOLD:
        return ReviewRouting.MANUAL_FLAG
    if confidence < AUTO_ACCEPT_THRESHOLD:
        return ReviewRouting.FLAG_FOR_REVIEW
    return ReviewRouting.AUTO_ACCEPT


def calculate_confidence(params: ConfidenceParams) -> ConfidenceResult:
    source = resolve_source(params.extraction_source, anchored=params.anchored_extraction)
    confidence = CONFIDENCE_BASE.get(source, CONFIDENCE_BASE[ExtractionSource.UNKNOWN])
    breakdown = [f"base({source.value})={confidence:.2f}"]

    if params.has_both_labels_in_cluster:
        confidence += BOTH_LABELS_BONUS
        breakdown.append(f"+{BOTH_LABELS_BONUS:.2f}(both_labels_in_cluster)")

    if params.has_sheet_number and params.top_tier_number_pattern:
        confidence += TOP_TIER_PATTERN_BONUS
        breakdown.append(f"+{TOP_TIER_PATTERN_BONUS:.2f}(top_tier_pattern)")

    if params.title_passes_clean_checks:
        confidence += CLEAN_TITLE_BONUS
        breakdown.append(f"+{CLEAN_TITLE_BONUS:.2f}(clean_title)")

    if params.has_sheet_number != params.has_sheet_title:
        missing = "title" if params.has_sheet_number else "number"
        confidence -= ONE_SIDED_PENALTY
        breakdown.append(f"-{ONE_SIDED_PENALTY:.2f}(missing_{missing})")

    if params.truncation_suspected:
        confidence -= TRUNCATION_PENALTY
        breakdown.append(f"-{TRUNCATION_PENALTY:.2f}(truncation_suspected)")

    # Clamp to [0, 1], 4 decimals.
    confidence = round(max(0.0, min(1.0, confidence)), 4)
    routing = route_confidence(confidence)
    breakdown.append(f"-> {routing.value}")

    return ConfidenceResult(confidence=confidence, routing=routing, breakdown=breakdown)
