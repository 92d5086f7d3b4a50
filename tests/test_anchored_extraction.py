from __future__ import annotations

import unittest

from contracts.geometry import PixelBox
from contracts.labels import LabelCluster, LabelHit, LabelType, TextItem
from contracts.sheet_index import AnchoredRegionType, RejectionReason
from sheet_index.anchored import (
    below_region,
    clip_to_render,
    read_anchored_number,
    read_anchored_title,
    read_anchored_values,
    right_of_region,
    text_in_region,
)
from sheet_index.module import identify_sheet_payload


def _hit(label_type: LabelType, x: float, y: float, w: float = 100, h: float = 30, text: str = "") -> LabelHit:
    return LabelHit(bbox=PixelBox(x=x, y=y, w=w, h=h), label_type=label_type, weight=3.0, text=text)


def _item(text: str, x: float, y: float, w: float, h: float = 30) -> TextItem:
    return TextItem(text=text, bbox=PixelBox(x=x, y=y, w=w, h=h))


def _title_block_items() -> list[TextItem]:
    return [
        _item("SHEET NO.", 2600, 1800, 100),
        _item("A-101", 2720, 1800, 60),
        _item("SHEET TITLE", 2600, 1850, 100),
        _item("FIRST FLOOR PLAN", 2720, 1852, 200),
    ]


def _title_block_cluster() -> LabelCluster:
    return LabelCluster.from_members(
        [
            _hit(LabelType.NUMBER, 2600, 1800, text="SHEET NO."),
            _hit(LabelType.TITLE, 2600, 1850, text="SHEET TITLE"),
        ]
    )


class TestAnchoredRegions(unittest.TestCase):
    def test_region_geometry_scales_with_label(self) -> None:
        label = _hit(LabelType.NUMBER, 1000, 500, w=100, h=20)
        self.assertEqual(right_of_region(label), PixelBox(x=1125, y=490, w=600, h=80))
        self.assertEqual(below_region(label), PixelBox(x=975, y=528, w=1000, h=140))
        self.assertEqual(below_region(label, is_title=True), PixelBox(x=975, y=528, w=1000, h=200))

    def test_region_geometry_is_clamped_for_large_labels(self) -> None:
        label = _hit(LabelType.TITLE, 0, 0, w=400, h=100)
        self.assertEqual(right_of_region(label), PixelBox(x=430, y=-40, w=900, h=220))
        self.assertEqual(below_region(label, is_title=True), PixelBox(x=-40, y=125, w=1400, h=650))
        self.assertEqual(below_region(label), PixelBox(x=-40, y=125, w=1400, h=500))

    def test_clip_to_render(self) -> None:
        self.assertEqual(clip_to_render(PixelBox(x=-40, y=-40, w=100, h=100), 50, 50), PixelBox(x=0, y=0, w=50, h=50))
        self.assertEqual(clip_to_render(PixelBox(x=3100, y=10, w=300, h=80), 3000, 2000), PixelBox(x=3000, y=10, w=0, h=80))

    def test_text_in_region_uses_centers_and_reading_order(self) -> None:
        items = [
            _item("  ROOF   PLAN ", 10, 60, 80),
            _item("A-501", 10, 10, 40),
            _item("HALF OUT", 90, 10, 40),
            _item("  ", 10, 30, 40),
        ]
        self.assertEqual(text_in_region(items, PixelBox(x=0, y=0, w=100, h=100)), ["A-501", "ROOF PLAN"])


class TestAnchoredReads(unittest.TestCase):
    def test_values_beside_cluster_labels(self) -> None:
        values = read_anchored_values(_title_block_cluster(), _title_block_items(), render_w=3000, render_h=2000)

        self.assertEqual(values.number.validation.value, "A101")
        self.assertEqual(values.number.region.region_type, AnchoredRegionType.RIGHT_OF)
        self.assertEqual(values.title.validation.value, "FIRST FLOOR PLAN")

        regions = values.regions()
        self.assertEqual(
            [(r.label_type, r.region_type) for r in regions],
            [
                (LabelType.NUMBER, AnchoredRegionType.RIGHT_OF),
                (LabelType.NUMBER, AnchoredRegionType.BELOW),
                (LabelType.TITLE, AnchoredRegionType.RIGHT_OF),
                (LabelType.TITLE, AnchoredRegionType.BELOW),
            ],
        )
        number_below = regions[1]
        self.assertEqual(number_below.candidates, ["SHEET TITLE", "FIRST FLOOR PLAN"])
        self.assertFalse(number_below.passed)
        self.assertEqual(number_below.rejection_reason, RejectionReason.INVALID_NUMBER_PATTERN)
        # Regions are clipped to the render.
        self.assertEqual(regions[0].bbox, PixelBox(x=2725, y=1785, w=275, h=80))
        self.assertEqual(regions[3].to_dict()["pass"], False)
        self.assertEqual(regions[3].candidates, [])

    def test_nothing_to_anchor_on(self) -> None:
        for cluster, items in ((None, _title_block_items()), (_title_block_cluster(), None)):
            values = read_anchored_values(cluster, items, render_w=3000, render_h=2000)
            self.assertFalse(values.number.found)
            self.assertFalse(values.title.found)
            self.assertEqual(values.regions(), [])

    def test_number_prefers_priority_then_shorter_value(self) -> None:
        labels = [
            _hit(LabelType.NUMBER, 100, 100, text="SHEET NO."),
            _hit(LabelType.NUMBER, 100, 1000, text="DWG NO."),
            _hit(LabelType.NUMBER, 100, 1600, text="SHT NO."),
        ]
        items = [
            _item("M2-01", 230, 100, 60),
            _item("A-1011", 230, 1000, 60),
            _item("A-101", 230, 1600, 60),
        ]
        read = read_anchored_number(labels, items, render_w=3000, render_h=2000)
        self.assertEqual(read.validation.value, "A101")
        self.assertEqual(read.region.label_used, "SHT NO.")
        self.assertEqual([r.chosen for r in read.regions if r.passed], ["M201", "A1011", "A101"])

    def test_labeled_number_is_never_an_anchored_title(self) -> None:
        labels = [_hit(LabelType.TITLE, 100, 100, text="SHEET TITLE")]
        items = [_item("SHEET #A101", 230, 100, 150)]
        read = read_anchored_title(labels, items, render_w=3000, render_h=2000)
        self.assertFalse(read.found)
        self.assertEqual(read.regions[0].candidates, ["SHEET #A101"])
        self.assertIsNone(read.regions[0].rejection_reason)

    def test_title_below_label_uses_taller_window(self) -> None:
        labels = [_hit(LabelType.TITLE, 100, 100, w=100, h=20, text="TITLE:")]
        # Below window for a title spans y 128..328; a number window would stop at 268.
        items = [_item("NOT TO SCALE", 100, 140, 150), _item("ENLARGED STAIR SECTIONS", 100, 290, 300)]
        read = read_anchored_title(labels, items, render_w=3000, render_h=2000)
        self.assertEqual(read.validation.value, "ENLARGED STAIR SECTIONS")
        self.assertEqual(read.region.region_type, AnchoredRegionType.BELOW)
        self.assertEqual(read.region.candidates, ["NOT TO SCALE", "ENLARGED STAIR SECTIONS"])


class TestAnchoredIdentification(unittest.TestCase):
    def _payload(self, text_items: list[TextItem], candidates: dict) -> dict:
        return {
            "page_num": 1,
            "render_w": 3000,
            "render_h": 2000,
            "extraction_source": "vector_text",
            "hits": [m.to_dict() for m in _title_block_cluster().members],
            "text_items": [{"text": it.text, "bbox": it.bbox.to_dict()} for it in text_items],
            "candidates": candidates,
        }

    def test_anchored_values_skip_the_crop_plan(self) -> None:
        r = identify_sheet_payload(self._payload(_title_block_items(), {}))
        self.assertTrue(r.ok)
        self.assertEqual(r.entry.sheet_id, "A101")
        self.assertEqual(r.entry.sheet_title, "FIRST FLOOR PLAN")
        # vector_anchored 0.95 + bonuses, clamped.
        self.assertEqual(r.entry.confidence, 1.0)
        self.assertEqual(r.entry.evidence_snip_ref, "p001_anchored_right_of")
        self.assertEqual(r.meta["confidence"]["breakdown"][0], "base(vector_anchored)=0.95")
        self.assertEqual(r.meta["counts"]["anchored_regions"], 4)
        self.assertEqual(r.meta["counts"]["crop_attempts"], 0)

    def test_missing_anchored_title_comes_from_crops(self) -> None:
        items = [it for it in _title_block_items() if it.text != "FIRST FLOOR PLAN"]
        candidates = {"vector_label": {"number_candidates": [], "title_candidates": ["ROOF PLAN"]}}
        r = identify_sheet_payload(self._payload(items, candidates))
        self.assertTrue(r.ok)
        self.assertEqual(r.entry.sheet_id, "A101")
        self.assertEqual(r.entry.sheet_title, "ROOF PLAN")
        self.assertEqual(r.meta["chosen_attempt"], "anchored_right_of")
        self.assertEqual(r.meta["counts"]["crop_attempts"], 3)
        self.assertEqual(r.entry.confidence, 1.0)

    def test_crop_number_is_heuristic(self) -> None:
        items = [it for it in _title_block_items() if it.text != "A-101"]
        candidates = {"vector_label": {"number_candidates": ["A-101"], "title_candidates": []}}
        r = identify_sheet_payload(self._payload(items, candidates))
        self.assertTrue(r.ok)
        self.assertEqual(r.entry.sheet_title, "FIRST FLOOR PLAN")
        self.assertEqual(r.meta["chosen_attempt"], "vector_label")
        self.assertEqual(r.meta["confidence"]["breakdown"][0], "base(vector_heuristic)=0.80")
        self.assertEqual(r.entry.confidence, 0.88)

    def test_anchored_rejection_reported_without_crop_candidates(self) -> None:
        items = [it for it in _title_block_items() if it.text != "A-101"]
        r = identify_sheet_payload(self._payload(items, {}))
        self.assertFalse(r.ok)
        self.assertEqual(r.rejection_reason, RejectionReason.INVALID_NUMBER_PATTERN)
        self.assertEqual(r.meta["state"], "VALIDATED")


if __name__ == "__main__":
    unittest.main()
