"""
Canonical, authoritative sheet-identification contracts.

These models are the schema boundary between clustering, validation and the
sheet index orchestration. Stage code should consume/produce these contract
objects (not ad-hoc dicts).
"""

from .geometry import PixelBox, Point, bbox_union_many, clamp, distance, median_of
from .labels import LabelCluster, LabelHit, LabelType, TextItem
from .sheet_index import (
    AnchoredRegion,
    AnchoredRegionType,
    CropAttempt,
    CropStrategy,
    ExtractionSource,
    NumberValidation,
    PageInput,
    PipelineState,
    RawCandidates,
    RejectionReason,
    ReviewRouting,
    SheetIdentificationResult,
    SheetIdError,
    SheetIndexEntry,
    SheetIndexSummary,
    SheetKind,
    TitleBlockLocation,
    TitleValidation,
)

__all__ = [
    "PixelBox",
    "Point",
    "bbox_union_many",
    "clamp",
    "distance",
    "median_of",
    "LabelType",
    "LabelHit",
    "LabelCluster",
    "TextItem",
    "RejectionReason",
    "AnchoredRegionType",
    "AnchoredRegion",
    "ExtractionSource",
    "CropStrategy",
    "SheetKind",
    "ReviewRouting",
    "PipelineState",
    "SheetIdError",
    "NumberValidation",
    "TitleValidation",
    "SheetIndexEntry",
    "CropAttempt",
    "RawCandidates",
    "PageInput",
    "TitleBlockLocation",
    "SheetIdentificationResult",
    "SheetIndexSummary",
]
