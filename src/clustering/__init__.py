"""
Deterministic title-block localization.

- label lexicon detection (text items -> weighted label hits)
- scale-normalized single-linkage clustering of label hits
- tie-break ladder selection of one winning cluster
- proportional crop expansion and the fallback crop plan

Geometry only: no OCR, no text correction, no ML.
"""

from .config import ClusteringConfig, LabelDetectionConfig, RegionExpansionConfig
from .label_clusters import build_clusters, compute_eps, median_label_height
from .label_detection import classify_label_text, detect_label_hits
from .region import build_crop_plan, clamp_to_render, expand_cluster_bbox
from .selection import rank_clusters, select_best_cluster, selected_cluster_index

__all__ = [
    "ClusteringConfig",
    "LabelDetectionConfig",
    "RegionExpansionConfig",
    "build_clusters",
    "compute_eps",
    "median_label_height",
    "classify_label_text",
    "detect_label_hits",
    "build_crop_plan",
    "clamp_to_render",
    "expand_cluster_bbox",
    "rank_clusters",
    "select_best_cluster",
    "selected_cluster_index",
]
