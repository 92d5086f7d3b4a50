"""
Label-anchored value reads.

Sheet numbers and titles are usually printed right of their label or just
below it. For every number/title label of the selected cluster, two regions
sized from the label box are read from the page's positioned text: `right_of`
first, then `below`. Each region keeps an audit record whether or not it
produced a value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from contracts.geometry import PixelBox, clamp
from contracts.labels import LabelCluster, LabelHit, LabelType, TextItem
from contracts.sheet_index import (
    AnchoredRegion,
    AnchoredRegionType,
    NumberValidation,
    RejectionReason,
    TitleValidation,
)
from validation.choose import choose_best_candidate
from validation.normalize import is_labeled_number, normalize_candidate
from validation.sheet_number import validate_sheet_number
from validation.sheet_title import validate_sheet_title


def right_of_region(label: LabelHit) -> PixelBox:
    lw, lh = label.bbox.w, label.bbox.h
    return PixelBox(
        x=label.bbox.x1 + clamp(0.25 * lw, 10, 30),
        y=label.bbox.y - clamp(0.5 * lh, 10, 40),
        w=clamp(6.0 * lw, 250, 900),
        h=clamp(2.5 * lh, 80, 220),
    )


def below_region(label: LabelHit, *, is_title: bool = False) -> PixelBox:
    # Titles wrap onto several lines, so their window is taller.
    lw, lh = label.bbox.w, label.bbox.h
    k_h, min_h, max_h = (7.0, 200, 650) if is_title else (5.0, 140, 520)
    return PixelBox(
        x=label.bbox.x - clamp(0.25 * lw, 10, 40),
        y=label.bbox.y1 + clamp(0.25 * lh, 8, 25),
        w=clamp(10.0 * lw, 450, 1400),
        h=clamp(k_h * lh, min_h, max_h),
    )


def clip_to_render(box: PixelBox, render_w: float, render_h: float) -> PixelBox:
    """Intersection with the render; a region fully outside collapses to zero size."""
    x0 = min(max(0.0, box.x), render_w)
    y0 = min(max(0.0, box.y), render_h)
    x1 = max(x0, min(render_w, box.x1))
    y1 = max(y0, min(render_h, box.y1))
    return PixelBox(x=x0, y=y0, w=x1 - x0, h=y1 - y0)


def text_in_region(items: list[TextItem], region: PixelBox) -> list[str]:
    """Normalized texts of the items centered inside `region`, in reading order."""
    inside = [it for it in items if region.contains_point(it.center())]
    inside.sort(key=lambda it: (it.bbox.y, it.bbox.x, it.text))
    texts = (normalize_candidate(it.text) for it in inside)
    return [t for t in texts if t]


@dataclass(frozen=True, slots=True)
class AnchoredRead:
    validation: NumberValidation | TitleValidation | None = None
    region: AnchoredRegion | None = None
    regions: list[AnchoredRegion] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.validation is not None


@dataclass(frozen=True, slots=True)
class _Pass:
    validation: NumberValidation | TitleValidation
    region: AnchoredRegion

    @property
    def valid(self) -> bool:
        return True

    @property
    def score(self) -> int:
        return self.validation.score


def _read_region(
    label: LabelHit,
    region_type: AnchoredRegionType,
    bbox: PixelBox,
    items: list[TextItem],
    validate: Callable[[str], NumberValidation | TitleValidation],
    skip: Callable[[str], bool] | None,
) -> tuple[AnchoredRegion, NumberValidation | TitleValidation | None]:
    texts = text_in_region(items, bbox)
    rejection: RejectionReason | None = None
    for text in texts:
        if skip is not None and skip(text):
            continue
        v = validate(text)
        if v.valid and v.value is not None:
            region = AnchoredRegion(
                region_type=region_type,
                label_type=label.label_type,
                label_used=label.text,
                bbox=bbox,
                candidates=texts,
                chosen=v.value,
                passed=True,
            )
            return region, v
        if rejection is None:
            rejection = v.rejection_reason
    region = AnchoredRegion(
        region_type=region_type,
        label_type=label.label_type,
        label_used=label.text,
        bbox=bbox,
        candidates=texts,
        chosen=None,
        passed=False,
        rejection_reason=rejection,
    )
    return region, None


def _read_labels(
    labels: list[LabelHit],
    items: list[TextItem],
    *,
    is_title: bool,
    render_w: float,
    render_h: float,
) -> tuple[list[AnchoredRegion], list[_Pass]]:
    validate = validate_sheet_title if is_title else validate_sheet_number
    # A labeled number field is never a title.
    skip = is_labeled_number if is_title else None
    regions: list[AnchoredRegion] = []
    passes: list[_Pass] = []
    for label in labels:
        windows = (
            (AnchoredRegionType.RIGHT_OF, right_of_region(label)),
            (AnchoredRegionType.BELOW, below_region(label, is_title=is_title)),
        )
        for region_type, window in windows:
            bbox = clip_to_render(window, render_w, render_h)
            region, v = _read_region(label, region_type, bbox, items, validate, skip)
            regions.append(region)
            if v is not None:
                passes.append(_Pass(v, region))
    return regions, passes


def read_anchored_number(
    labels: list[LabelHit],
    items: list[TextItem],
    *,
    render_w: float,
    render_h: float,
) -> AnchoredRead:
    """Highest pattern priority wins; ties go to the shorter value, then the earlier region."""
    regions, passes = _read_labels(labels, items, is_title=False, render_w=render_w, render_h=render_h)
    if not passes:
        return AnchoredRead(regions=regions)
    best = min(passes, key=lambda p: (-p.validation.priority, len(p.validation.value or "")))
    return AnchoredRead(validation=best.validation, region=best.region, regions=regions)


def read_anchored_title(
    labels: list[LabelHit],
    items: list[TextItem],
    *,
    render_w: float,
    render_h: float,
) -> AnchoredRead:
    regions, passes = _read_labels(labels, items, is_title=True, render_w=render_w, render_h=render_h)
    best = choose_best_candidate(passes)
    if best is None:
        return AnchoredRead(regions=regions)
    return AnchoredRead(validation=best.validation, region=best.region, regions=regions)


@dataclass(frozen=True, slots=True)
class AnchoredValues:
    number: AnchoredRead = field(default_factory=AnchoredRead)
    title: AnchoredRead = field(default_factory=AnchoredRead)

    def regions(self) -> list[AnchoredRegion]:
        return [*self.number.regions, *self.title.regions]


def read_anchored_values(
    cluster: LabelCluster | None,
    items: list[TextItem] | None,
    *,
    render_w: float,
    render_h: float,
) -> AnchoredValues:
    """
    Read number and title values beside the selected cluster's labels.

    Without a cluster or positioned page text there is nothing to anchor on.
    """

    if cluster is None or items is None:
        return AnchoredValues()
    number_labels = [m for m in cluster.members if m.label_type == LabelType.NUMBER]
    title_labels = [m for m in cluster.members if m.label_type == LabelType.TITLE]
    return AnchoredValues(
        number=read_anchored_number(number_labels, items, render_w=render_w, render_h=render_h),
        title=read_anchored_title(title_labels, items, render_w=render_w, render_h=render_h),
    )
