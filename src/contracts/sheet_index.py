from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from .geometry import PixelBox
from .labels import LabelCluster, LabelHit, LabelType


class RejectionReason(str, Enum):
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    SCALE_JUNK = "scale_junk"
    STAMP_JUNK = "stamp_junk"
    LABEL_PREFIX_ONLY = "label_prefix_only"
    INSUFFICIENT_LETTERS = "insufficient_letters"
    INVALID_NUMBER_PATTERN = "invalid_number_pattern"
    INTERNAL_ERROR = "internal_error"


class ExtractionSource(str, Enum):
    """
    Where the candidate strings came from. Drives the confidence base.

    `vector_text` is resolved to `vector_anchored` when the sheet number was
    read from a region beside its label, `vector_heuristic` otherwise.
    """

    VECTOR_TEXT = "vector_text"
    VECTOR_ANCHORED = "vector_anchored"
    VECTOR_HEURISTIC = "vector_heuristic"
    OCR_CROP = "ocr_crop"
    VISION_CROP = "vision_crop"
    VISION_FULL = "vision_full"
    FAIL_CROP = "fail_crop"
    UNKNOWN = "unknown"


class CropStrategy(str, Enum):
    VECTOR_LABEL = "vector_label"
    FALLBACK_BR = "fallback_br"
    FALLBACK_BOTTOM_STRIP = "fallback_bottom_strip"


class AnchoredRegionType(str, Enum):
    RIGHT_OF = "right_of"
    BELOW = "below"


class SheetKind(str, Enum):
    PLAN = "plan"
    RCP = "rcp"
    SCHEDULE = "schedule"
    DETAIL = "detail"
    LEGEND = "legend"
    GENERAL = "general"
    UNKNOWN = "unknown"


class ReviewRouting(str, Enum):
    AUTO_ACCEPT = "auto_accept"
    FLAG_FOR_REVIEW = "flag_for_review"
    MANUAL_FLAG = "manual_flag"


class PipelineState(str, Enum):
    RAW_HITS = "RAW_HITS"
    CLUSTERED = "CLUSTERED"
    SELECTED_REGION = "SELECTED_REGION"
    RAW_CANDIDATES = "RAW_CANDIDATES"
    NORMALIZED = "NORMALIZED"
    VALIDATED = "VALIDATED"
    CHOSEN = "CHOSEN"


@dataclass(frozen=True, slots=True)
class SheetIdError:
    code: str
    message: str
    detail: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class NumberValidation:
    valid: bool
    value: str | None
    priority: int
    rejection_reason: RejectionReason | None = None
    had_prefix: bool = False

    @property
    def score(self) -> int:
        return self.priority

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "value": self.value,
            "priority": self.priority,
            "rejection_reason": None if self.rejection_reason is None else self.rejection_reason.value,
            "had_prefix": self.had_prefix,
        }


@dataclass(frozen=True, slots=True)
class TitleValidation:
    valid: bool
    value: str | None
    score: int
    rejection_reason: RejectionReason | None = None
    truncation_suspected: bool = False
    had_prefix: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "value": self.value,
            "score": self.score,
            "rejection_reason": None if self.rejection_reason is None else self.rejection_reason.value,
            "truncation_suspected": self.truncation_suspected,
            "had_prefix": self.had_prefix,
        }


@dataclass(frozen=True, slots=True)
class SheetIndexEntry:
    sheet_id: str
    sheet_title: str | None
    discipline: str
    confidence: float
    evidence_snip_ref: str | None = None

    def __post_init__(self) -> None:
        if not (0.0 <= self.confidence <= 1.0):
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence!r}")

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "SheetIndexEntry":
        return SheetIndexEntry(
            sheet_id=str(d["sheet_id"]),
            sheet_title=(None if d.get("sheet_title") is None else str(d["sheet_title"])),
            discipline=str(d["discipline"]),
            confidence=float(d["confidence"]),
            evidence_snip_ref=(None if d.get("evidence_snip_ref") is None else str(d["evidence_snip_ref"])),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "sheet_id": self.sheet_id,
            "sheet_title": self.sheet_title,
            "discipline": self.discipline,
            "confidence": self.confidence,
            "evidence_snip_ref": self.evidence_snip_ref,
        }


@dataclass(frozen=True, slots=True)
class CropAttempt:
    strategy: CropStrategy
    label: str  # e.g. "vector_label", "fallback_br_60"
    region: PixelBox

    def to_dict(self) -> dict[str, Any]:
        return {"strategy": self.strategy.value, "label": self.label, "region": self.region.to_dict()}


@dataclass(frozen=True, slots=True)
class RawCandidates:
    """
    Raw strings read from one crop region by an external extraction pass.
    """

    number_candidates: list[str] = field(default_factory=list)
    title_candidates: list[str] = field(default_factory=list)
    evidence_ref: str | None = None

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "RawCandidates":
        numbers = d.get("number_candidates") or []
        titles = d.get("title_candidates") or []
        if not isinstance(numbers, list) or not isinstance(titles, list):
            raise TypeError("RawCandidates candidate fields must be lists")
        return RawCandidates(
            number_candidates=[str(x) for x in numbers],
            title_candidates=[str(x) for x in titles],
            evidence_ref=(None if d.get("evidence_ref") is None else str(d["evidence_ref"])),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "number_candidates": list(self.number_candidates),
            "title_candidates": list(self.title_candidates),
            "evidence_ref": self.evidence_ref,
        }


@dataclass(frozen=True, slots=True)
class AnchoredRegion:
    """
    Audit record for one value region read beside a number/title label.

    `candidates` are the normalized texts found inside `bbox`; `chosen` is the
    first of them that validated.
    """

    region_type: AnchoredRegionType
    label_type: LabelType
    label_used: str
    bbox: PixelBox
    candidates: list[str]
    chosen: str | None
    passed: bool
    rejection_reason: RejectionReason | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "region_type": self.region_type.value,
            "label_type": self.label_type.value,
            "label_used": self.label_used,
            "bbox": self.bbox.to_dict(),
            "candidates": list(self.candidates),
            "chosen": self.chosen,
            "pass": self.passed,
            "rejection_reason": None if self.rejection_reason is None else self.rejection_reason.value,
        }


@dataclass(frozen=True, slots=True)
class PageInput:
    page_num: int  # 1-indexed
    render_w: float
    render_h: float
    hits: list[LabelHit]

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "PageInput":
        hits_raw = d.get("hits") or []
        if not isinstance(hits_raw, list):
            raise TypeError("PageInput.hits must be a list")
        return PageInput(
            page_num=int(d["page_num"]),
            render_w=float(d["render_w"]),
            render_h=float(d["render_h"]),
            hits=[LabelHit.from_dict(h) for h in hits_raw],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "page_num": self.page_num,
            "render_w": self.render_w,
            "render_h": self.render_h,
            "hits": [h.to_dict() for h in self.hits],
        }


@dataclass(frozen=True, slots=True)
class TitleBlockLocation:
    eps: float | None  # None when fewer than two hits
    clusters: list[LabelCluster]
    selected: LabelCluster | None
    selected_index: int | None
    crop_plan: list[CropAttempt]

    def to_dict(self) -> dict[str, Any]:
        return {
            "eps": self.eps,
            "clusters": [c.to_dict() for c in self.clusters],
            "selected": None if self.selected is None else self.selected.to_dict(),
            "selected_index": self.selected_index,
            "crop_plan": [a.to_dict() for a in self.crop_plan],
        }


@dataclass(frozen=True, slots=True)
class SheetIdentificationResult:
    """
    Terminal outcome for one page: either `entry` is set (ok=True) or
    `rejection_reason` explains why no entry could be produced.
    """

    ok: bool
    page_num: int | None
    entry: SheetIndexEntry | None
    rejection_reason: RejectionReason | None
    sheet_kind: SheetKind
    routing: ReviewRouting | None
    errors: list[SheetIdError]
    meta: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "page_num": self.page_num,
            "entry": None if self.entry is None else self.entry.to_dict(),
            "rejection_reason": None if self.rejection_reason is None else self.rejection_reason.value,
            "sheet_kind": self.sheet_kind.value,
            "routing": None if self.routing is None else self.routing.value,
            "errors": [e.to_dict() for e in self.errors],
            "meta": dict(self.meta),
        }


@dataclass(frozen=True, slots=True)
class SheetIndexSummary:
    valid: bool
    success_rate: float
    avg_confidence: float
    unindexed_count: int
    rejection_counts: dict[str, int]
    boilerplate_pages: list[int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "success_rate": self.success_rate,
            "avg_confidence": self.avg_confidence,
            "unindexed_count": self.unindexed_count,
            "rejection_counts": dict(self.rejection_counts),
            "boilerplate_pages": list(self.boilerplate_pages),
        }
