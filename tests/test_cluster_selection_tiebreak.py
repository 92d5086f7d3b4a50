from __future__ import annotations

import unittest

from clustering.selection import rank_clusters, select_best_cluster, selected_cluster_index
from contracts.geometry import PixelBox
from contracts.labels import LabelCluster, LabelHit, LabelType


def _hit(x: float, y: float, label_type: LabelType, *, weight: float = 3.0, w: float = 100.0, h: float = 30.0) -> LabelHit:
    return LabelHit(bbox=PixelBox(x=x, y=y, w=w, h=h), label_type=label_type, weight=weight)


def _cluster(*hits: LabelHit, tightness_k: float = 3.0) -> LabelCluster:
    return LabelCluster.from_members(list(hits), tightness_k=tightness_k)


class TestClusterSelectionTiebreak(unittest.TestCase):
    def test_empty_input_selects_nothing(self) -> None:
        self.assertIsNone(select_best_cluster([]))
        self.assertIsNone(selected_cluster_index([]))

    def test_single_cluster_is_only_candidate(self) -> None:
        c = _cluster(_hit(0, 0, LabelType.NUMBER), _hit(0, 40, LabelType.TITLE))
        best = select_best_cluster([c])
        self.assertIsNotNone(best)
        self.assertIn("decided_by=only_candidate", best.why_selected)
        self.assertIn("has_both_labels", best.why_selected)

    def test_both_labels_beats_higher_score(self) -> None:
        heavy = _cluster(
            _hit(2000, 2000, LabelType.NUMBER, weight=10.0),
            _hit(2000, 2040, LabelType.NUMBER, weight=10.0),
            _hit(2000, 2080, LabelType.NUMBER, weight=10.0),
        )
        paired = _cluster(_hit(0, 0, LabelType.NUMBER), _hit(0, 40, LabelType.TITLE))
        self.assertGreater(heavy.score, paired.score)

        best = select_best_cluster([heavy, paired])
        self.assertEqual(selected_cluster_index([heavy, paired]), 1)
        self.assertTrue(best.has_both_labels())
        self.assertIn("decided_by=both_labels", best.why_selected)

    def test_higher_score_wins_without_label_pair(self) -> None:
        low = _cluster(_hit(0, 0, LabelType.NUMBER), _hit(0, 40, LabelType.NUMBER))
        high = _cluster(
            _hit(500, 500, LabelType.NUMBER),
            _hit(500, 540, LabelType.NUMBER),
            _hit(500, 580, LabelType.NUMBER),
        )
        self.assertEqual(selected_cluster_index([low, high]), 1)
        self.assertIn("decided_by=score", select_best_cluster([low, high]).why_selected)

    def test_smaller_area_wins_on_equal_score(self) -> None:
        wide = _cluster(_hit(0, 0, LabelType.NUMBER), _hit(300, 0, LabelType.TITLE), tightness_k=0.0)
        tight = _cluster(_hit(0, 500, LabelType.NUMBER), _hit(50, 500, LabelType.TITLE), tightness_k=0.0)
        self.assertEqual(wide.score, tight.score)

        self.assertEqual(selected_cluster_index([wide, tight]), 1)
        self.assertIn("decided_by=area", select_best_cluster([wide, tight]).why_selected)

    def test_bottom_right_bias_breaks_full_geometry_tie(self) -> None:
        top_left = _cluster(_hit(0, 0, LabelType.NUMBER), _hit(0, 40, LabelType.TITLE))
        bottom_right = _cluster(_hit(2000, 1500, LabelType.NUMBER), _hit(2000, 1540, LabelType.TITLE))
        self.assertEqual(top_left.score, bottom_right.score)

        self.assertEqual(selected_cluster_index([top_left, bottom_right]), 1)
        best = select_best_cluster([top_left, bottom_right])
        self.assertEqual(best.bbox, bottom_right.bbox)
        self.assertIn("decided_by=bottom_right_bias", best.why_selected)

    def test_identical_clusters_fall_back_to_input_order(self) -> None:
        a = _cluster(_hit(0, 0, LabelType.NUMBER), _hit(0, 40, LabelType.TITLE))
        b = _cluster(_hit(0, 0, LabelType.NUMBER), _hit(0, 40, LabelType.TITLE))
        self.assertEqual(rank_clusters([a, b]), [0, 1])
        self.assertEqual(selected_cluster_index([a, b]), 0)
        self.assertIn("decided_by=input_order", select_best_cluster([a, b]).why_selected)

    def test_selection_is_deterministic_and_does_not_mutate_input(self) -> None:
        clusters = [
            _cluster(_hit(0, 0, LabelType.NUMBER), _hit(0, 40, LabelType.NUMBER)),
            _cluster(_hit(900, 900, LabelType.NUMBER), _hit(900, 940, LabelType.TITLE)),
            _cluster(_hit(1800, 1800, LabelType.TITLE), _hit(1800, 1840, LabelType.TITLE)),
        ]
        first = select_best_cluster(clusters)
        second = select_best_cluster(clusters)
        self.assertEqual(first, second)
        self.assertTrue(all(c.why_selected is None for c in clusters))


if __name__ == "__main__":
    unittest.main()
