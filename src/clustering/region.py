from __future__ import annotations

import math

from contracts.geometry import PixelBox, clamp, median_of
from contracts.labels import LabelCluster
from contracts.sheet_index import CropAttempt, CropStrategy

from .config import RegionExpansionConfig


def _check_render_size(render_w: float, render_h: float) -> None:
    if not (render_w > 0 and render_h > 0):
        raise ValueError(f"render size must be positive, got {render_w!r}x{render_h!r}")


def clamp_to_render(box: PixelBox, render_w: float, render_h: float) -> PixelBox:
    """
    Clamp origin to >= 0, then shrink w/h so the far edges stay inside the render.

    The origin is never shifted back to make room for the width.
    """

    _check_render_size(render_w, render_h)
    x = max(0.0, box.x)
    y = max(0.0, box.y)
    if x > render_w or y > render_h:
        raise ValueError(
            f"box origin ({x}, {y}) lies outside the render area {render_w}x{render_h}"
        )
    w = box.w
    h = box.h
    if x + w > render_w:
        w = render_w - x
    if y + h > render_h:
        h = render_h - y
    return PixelBox(x=x, y=y, w=w, h=h)


def expand_cluster_bbox(
    cluster: LabelCluster,
    render_w: float,
    render_h: float,
    config: RegionExpansionConfig | None = None,
) -> PixelBox:
    """
    Proportional crop around the winning cluster for a focused re-extraction.

    Padding scales with the median member size over the cluster's own members.
    """

    if config is None:
        config = RegionExpansionConfig()
    config.validate()

    med_w = median_of((m.bbox.w for m in cluster.members), default=config.default_member_w)
    med_h = median_of((m.bbox.h for m in cluster.members), default=config.default_member_h)

    pad_x = clamp(config.pad_x_k * med_w, config.pad_x_min, config.pad_x_max)
    pad_y = clamp(config.pad_y_k * med_h, config.pad_y_min, config.pad_y_max)

    bb = cluster.bbox
    expanded = PixelBox(
        x=bb.x - pad_x,
        y=bb.y - pad_y,
        w=bb.w + 2 * pad_x,
        h=bb.h + 2 * pad_y,
    )
    return clamp_to_render(expanded, render_w, render_h)


def _fraction_box(render_w: float, render_h: float, fx: float, fy: float, fw: float, fh: float) -> PixelBox:
    box = PixelBox(
        x=math.floor(render_w * fx),
        y=math.floor(render_h * fy),
        w=math.floor(render_w * fw),
        h=math.floor(render_h * fh),
    )
    return clamp_to_render(box, render_w, render_h)


def build_crop_plan(
    selected: LabelCluster | None,
    render_w: float,
    render_h: float,
    config: RegionExpansionConfig | None = None,
    *,
    include_fallbacks: bool = True,
) -> list[CropAttempt]:
    """
    Ordered crop attempts for the re-extraction pass.

    1) the expanded label cluster, or bottom-right 50% when no cluster won
    2) bottom-right 60%
    3) bottom strip: full width, bottom 35%
    """

    _check_render_size(render_w, render_h)

    attempts: list[CropAttempt] = []
    if selected is not None:
        attempts.append(
            CropAttempt(
                strategy=CropStrategy.VECTOR_LABEL,
                label="vector_label",
                region=expand_cluster_bbox(selected, render_w, render_h, config),
            )
        )
    else:
        attempts.append(
            CropAttempt(
                strategy=CropStrategy.FALLBACK_BR,
                label="fallback_br_50",
                region=_fraction_box(render_w, render_h, 0.5, 0.5, 0.5, 0.5),
            )
        )

    if include_fallbacks:
        attempts.append(
            CropAttempt(
                strategy=CropStrategy.FALLBACK_BR,
                label="fallback_br_60",
                region=_fraction_box(render_w, render_h, 0.4, 0.4, 0.6, 0.6),
            )
        )
        attempts.append(
            CropAttempt(
                strategy=CropStrategy.FALLBACK_BOTTOM_STRIP,
                label="fallback_bottom_strip_35",
                region=PixelBox(
                    x=0,
                    y=math.floor(render_h * 0.65),
                    w=render_w,
                    h=math.floor(render_h * 0.35),
                ),
            )
        )

    return attempts
