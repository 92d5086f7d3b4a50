from __future__ import annotations

from typing import Any, Mapping

from contracts.labels import TextItem
from contracts.sheet_index import CropAttempt, ExtractionSource, RawCandidates

from .base import RegionTextEngine

DEFAULT_KEY = "default"


class RecordedCandidatesEngine(RegionTextEngine):
    """
    Replays candidates captured by an earlier extraction pass.

    Lookup order per attempt: attempt label ("fallback_br_60"), then strategy
    ("fallback_br"), then "default". Anything else reads as empty. Recorded
    positioned text, when present, is served for every page.
    """

    def __init__(
        self,
        recorded: Mapping[str, RawCandidates],
        *,
        source: ExtractionSource = ExtractionSource.UNKNOWN,
        text_items: list[TextItem] | None = None,
    ) -> None:
        self._recorded = dict(recorded)
        self._source = source
        self._text_items = None if text_items is None else list(text_items)

    def backend_id(self) -> str:
        return "recorded"

    def extraction_source(self) -> ExtractionSource:
        return self._source

    def page_text_items(self, page_num: int) -> list[TextItem] | None:
        return None if self._text_items is None else list(self._text_items)

    def extract_region(self, *, page_num: int, attempt: CropAttempt) -> RawCandidates:
        for key in (attempt.label, attempt.strategy.value, DEFAULT_KEY):
            if key in self._recorded:
                return self._recorded[key]
        return RawCandidates()

    @staticmethod
    def from_dict(
        d: Mapping[str, Any],
        *,
        source: ExtractionSource = ExtractionSource.UNKNOWN,
        text_items: Any = None,
    ) -> "RecordedCandidatesEngine":
        recorded: dict[str, RawCandidates] = {}
        for key in sorted(d):
            value = d[key]
            if not isinstance(value, Mapping):
                raise TypeError(f"recorded candidates for {key!r} must be an object")
            recorded[str(key)] = RawCandidates.from_dict(dict(value))
        items: list[TextItem] | None = None
        if text_items is not None:
            if not isinstance(text_items, list):
                raise TypeError("recorded text_items must be a list")
            items = [TextItem.from_dict(dict(it)) for it in text_items]
        return RecordedCandidatesEngine(recorded, source=source, text_items=items)
