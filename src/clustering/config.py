from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ClusteringConfig:
    """
    Deterministic label clustering parameters.

    Defaults are explicit constants (no time/randomness).
    eps = clamp(eps_k * median_label_height, eps_min, eps_max)
    """

    eps_k: float = 2.5
    eps_min: float = 80.0
    eps_max: float = 400.0

    min_cluster_size: int = 2
    min_eligible_weight: float = 6.0  # eligible without both label types

    both_labels_bonus: float = 10.0
    tightness_k: float = 3.0

    def validate(self) -> None:
        if self.eps_k <= 0:
            raise ValueError("eps_k must be > 0")
        if self.eps_min < 0:
            raise ValueError("eps_min must be >= 0")
        if self.eps_max < self.eps_min:
            raise ValueError("eps_max must be >= eps_min")
        if self.min_cluster_size < 2:
            raise ValueError("min_cluster_size must be >= 2")
        if self.min_eligible_weight < 0:
            raise ValueError("min_eligible_weight must be >= 0")
        if self.both_labels_bonus < 0 or self.tightness_k < 0:
            raise ValueError("score weights must be >= 0")


@dataclass(frozen=True, slots=True)
class RegionExpansionConfig:
    """
    Padding applied around the winning cluster to build the re-extraction crop.

    pad_x = clamp(pad_x_k * median_member_width, pad_x_min, pad_x_max)
    pad_y = clamp(pad_y_k * median_member_height, pad_y_min, pad_y_max)
    """

    pad_x_k: float = 6.0
    pad_x_min: float = 250.0
    pad_x_max: float = 1000.0

    pad_y_k: float = 5.0
    pad_y_min: float = 200.0
    pad_y_max: float = 800.0

    # Used only when a cluster has no members.
    default_member_w: float = 100.0
    default_member_h: float = 30.0

    def validate(self) -> None:
        if self.pad_x_k < 0 or self.pad_y_k < 0:
            raise ValueError("pad_x_k and pad_y_k must be >= 0")
        if not (0 <= self.pad_x_min <= self.pad_x_max):
            raise ValueError("pad_x bounds must satisfy 0 <= pad_x_min <= pad_x_max")
        if not (0 <= self.pad_y_min <= self.pad_y_max):
            raise ValueError("pad_y bounds must satisfy 0 <= pad_y_min <= pad_y_max")
        if self.default_member_w < 0 or self.default_member_h < 0:
            raise ValueError("default member dimensions must be >= 0")


@dataclass(frozen=True, slots=True)
class LabelDetectionConfig:
    # Label boxes are widened to at least this size before clustering.
    min_label_w: float = 50.0
    min_label_h: float = 20.0

    strong_label_weight: float = 3.0
    moderate_label_weight: float = 2.0

    def validate(self) -> None:
        if self.min_label_w < 0 or self.min_label_h < 0:
            raise ValueError("minimum label dimensions must be >= 0")
        if self.strong_label_weight < 0 or self.moderate_label_weight < 0:
            raise ValueError("label weights must be >= 0")
