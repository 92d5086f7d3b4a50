from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from .geometry import PixelBox, Point, bbox_union_many


class LabelType(str, Enum):
    NUMBER = "number"
    TITLE = "title"
    OTHER = "other"

    @staticmethod
    def parse(value: str) -> "LabelType":
        # Older detector payloads tag the bare "TITLE" alias as "moderate".
        if value == "moderate":
            return LabelType.OTHER
        return LabelType(value)


@dataclass(frozen=True, slots=True)
class TextItem:
    """
    Positioned text fragment as delivered by a text source (vector text or OCR).

    `text` is literal; callers normalize it, not the source.
    """

    text: str
    bbox: PixelBox

    def center(self) -> Point:
        return self.bbox.center()

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "TextItem":
        return TextItem(text=str(d.get("text", "")), bbox=PixelBox.from_dict(d["bbox"]))


@dataclass(frozen=True, slots=True)
class LabelHit:
    bbox: PixelBox
    label_type: LabelType
    weight: float
    text: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.label_type, LabelType):
            raise TypeError(f"label_type must be a LabelType, got {self.label_type!r}")
        if not (self.weight >= 0):
            raise ValueError(f"LabelHit.weight must be >= 0, got {self.weight!r}")

    @property
    def center(self) -> Point:
        return self.bbox.center()

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "LabelHit":
        return LabelHit(
            bbox=PixelBox.from_dict(d["bbox"]),
            label_type=LabelType.parse(str(d["label_type"])),
            weight=float(d["weight"]),
            text=str(d.get("text", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "bbox": self.bbox.to_dict(),
            "label_type": self.label_type.value,
            "weight": self.weight,
            "text": self.text,
        }


@dataclass(frozen=True, slots=True)
class LabelCluster:
    """
    Candidate title-block group of label hits.

    Always build through `from_members` so the bbox and label flags are derived
    from the current members.
    """

    members: list[LabelHit]  # input order preserved
    bbox: PixelBox
    score: float
    has_number_label: bool
    has_title_label: bool
    tightness_bonus: float
    why_selected: str | None = None

    @staticmethod
    def from_members(
        members: list[LabelHit],
        *,
        both_labels_bonus: float = 10.0,
        tightness_k: float = 3.0,
    ) -> "LabelCluster":
        members = list(members)
        has_number = any(m.label_type == LabelType.NUMBER for m in members)
        has_title = any(m.label_type == LabelType.TITLE for m in members)
        total_weight = sum(m.weight for m in members)

        bbox = bbox_union_many([m.bbox for m in members])
        area = max(bbox.area(), 1.0)
        tightness_bonus = 1.0 / area

        score = (both_labels_bonus if (has_number and has_title) else 0.0) + total_weight + tightness_k * tightness_bonus

        return LabelCluster(
            members=members,
            bbox=bbox,
            score=score,
            has_number_label=has_number,
            has_title_label=has_title,
            tightness_bonus=tightness_bonus,
        )

    def has_both_labels(self) -> bool:
        return self.has_number_label and self.has_title_label

    def total_weight(self) -> float:
        return sum(m.weight for m in self.members)

    def area(self) -> float:
        return self.bbox.area()

    def with_why_selected(self, why: str) -> "LabelCluster":
        return replace(self, why_selected=why)

    def to_dict(self) -> dict[str, Any]:
        return {
            "members": [m.to_dict() for m in self.members],
            "bbox": self.bbox.to_dict(),
            "score": self.score,
            "has_number_label": self.has_number_label,
            "has_title_label": self.has_title_label,
            "tightness_bonus": self.tightness_bonus,
            "why_selected": self.why_selected,
        }
