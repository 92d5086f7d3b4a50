from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from clustering.config import ClusteringConfig, LabelDetectionConfig, RegionExpansionConfig


@dataclass(frozen=True, slots=True)
class SheetIdConfig:
    """
    Per-page sheet identification configuration.

    All values are passed explicitly; nothing here reads the environment.
    """

    clustering: ClusteringConfig = field(default_factory=ClusteringConfig)
    region: RegionExpansionConfig = field(default_factory=RegionExpansionConfig)
    label_detection: LabelDetectionConfig = field(default_factory=LabelDetectionConfig)

    # When False only the first crop attempt (cluster or bottom-right 50%) is tried.
    enable_fallback_crops: bool = True

    # Document index: entries below this confidence are left out.
    min_index_confidence: float = 0.5

    def validate(self) -> None:
        self.clustering.validate()
        self.region.validate()
        self.label_detection.validate()
        if not (0.0 <= self.min_index_confidence <= 1.0):
            raise ValueError("min_index_confidence must be within [0, 1]")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
