from __future__ import annotations

import re

from contracts.geometry import PixelBox
from contracts.labels import LabelHit, LabelType, TextItem

from .config import LabelDetectionConfig

# Strong label lexicon only. The generic word "SHEET" on its own is never a label.
NUMBER_LABEL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bSHEET\s*(?:(?:NO\.?|NUMBER)(?![A-Z])|#)", re.IGNORECASE),
    re.compile(r"\bDRAWING\s*(NO\.?|NUMBER)(?![A-Z])", re.IGNORECASE),
    re.compile(r"\bDWG\.?\s*(NO\.?|NUMBER)(?![A-Z])", re.IGNORECASE),
    re.compile(r"\bSHT\.?\s*(NO\.?|NUMBER)(?![A-Z])", re.IGNORECASE),
)

TITLE_LABEL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bSHEET\s*TITLE\b", re.IGNORECASE),
    re.compile(r"\bDRAWING\s*TITLE\b", re.IGNORECASE),
    re.compile(r"\bTITLE\s*:", re.IGNORECASE),
)

# Weaker alias: counts toward cluster weight but not as a title label.
MODERATE_LABEL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^TITLE$", re.IGNORECASE),
)


def classify_label_text(text: str) -> LabelType | None:
    text = text.strip()
    if not text:
        return None
    if any(p.search(text) for p in NUMBER_LABEL_PATTERNS):
        return LabelType.NUMBER
    if any(p.search(text) for p in TITLE_LABEL_PATTERNS):
        return LabelType.TITLE
    if any(p.search(text) for p in MODERATE_LABEL_PATTERNS):
        return LabelType.OTHER
    return None


def detect_label_hits(items: list[TextItem], config: LabelDetectionConfig | None = None) -> list[LabelHit]:
    """
    Turn positioned text items into weighted label hits, in input order.

    Boxes are widened to a minimum size so tiny vector glyph runs still
    contribute a sensible center and height to clustering.
    """

    if config is None:
        config = LabelDetectionConfig()
    config.validate()

    hits: list[LabelHit] = []
    for item in items:
        label_type = classify_label_text(item.text)
        if label_type is None:
            continue

        bbox = PixelBox(
            x=item.bbox.x,
            y=item.bbox.y,
            w=max(item.bbox.w, config.min_label_w),
            h=max(item.bbox.h, config.min_label_h),
        )
        weight = config.moderate_label_weight if label_type == LabelType.OTHER else config.strong_label_weight
        hits.append(LabelHit(bbox=bbox, label_type=label_type, weight=weight, text=item.text.strip()))

    return hits
