from __future__ import annotations

from abc import ABC, abstractmethod

from contracts.labels import TextItem
from contracts.sheet_index import CropAttempt, ExtractionSource, RawCandidates


class RegionTextEngine(ABC):
    """
    Re-extraction capability for a title-block crop.

    Engines must:
    - Return literal candidate strings for the requested region
    - Be deterministic for a given input+params
    - Perform NO validation, normalization, or candidate ranking
    """

    @abstractmethod
    def backend_id(self) -> str:
        raise NotImplementedError

    def backend_version(self) -> str | None:
        return None

    @abstractmethod
    def extraction_source(self) -> ExtractionSource:
        raise NotImplementedError

    @abstractmethod
    def extract_region(self, *, page_num: int, attempt: CropAttempt) -> RawCandidates:
        raise NotImplementedError

    def page_text_items(self, page_num: int) -> list[TextItem] | None:
        """
        Positioned page text in render pixels, used for label-anchored reads.

        None when the engine only knows crop-level candidates.
        """

        return None
