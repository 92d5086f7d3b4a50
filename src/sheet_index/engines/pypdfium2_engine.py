from __future__ import annotations

from pathlib import Path

from contracts.geometry import PixelBox
from contracts.labels import TextItem
from contracts.sheet_index import CropAttempt, ExtractionSource, RawCandidates

from .base import RegionTextEngine


class Pypdfium2TextEngine(RegionTextEngine):
    """
    Vector PDF text via pdfium text pages.

    Coordinates are reported in render pixels at `dpi` with a top-left origin,
    the same space the label clustering and crop plan work in. Page rotation
    is not applied.
    """

    def __init__(self, *, pdf_file: Path, dpi: int = 150) -> None:
        if dpi <= 0:
            raise ValueError("dpi must be a positive integer")
        self._pdf_file = pdf_file
        self._dpi = dpi
        self._items_by_page: dict[int, list[TextItem]] = {}

    @property
    def scale(self) -> float:
        return self._dpi / 72.0  # PDF points are 1/72 inch

    def backend_id(self) -> str:
        return "pypdfium2"

    def backend_version(self) -> str | None:
        try:
            import pypdfium2 as pdfium  # type: ignore

            return getattr(pdfium, "__version__", None)
        except ImportError:
            return None

    def extraction_source(self) -> ExtractionSource:
        return ExtractionSource.VECTOR_TEXT

    def _require_pdfium(self):
        try:
            import pypdfium2 as pdfium  # type: ignore

            return pdfium
        except ImportError as e:
            raise RuntimeError(
                "Missing dependency: pypdfium2 is required for vector text extraction."
            ) from e

    def get_page_count(self) -> int:
        pdfium = self._require_pdfium()
        doc = pdfium.PdfDocument(str(self._pdf_file))
        try:
            return len(doc)
        finally:
            doc.close()

    def _check_page(self, page_num: int, page_count: int) -> None:
        if page_num < 1 or page_num > page_count:
            raise ValueError(f"Page out of range: {page_num} (1..{page_count})")

    def page_render_size(self, page_num: int) -> tuple[float, float]:
        pdfium = self._require_pdfium()
        doc = pdfium.PdfDocument(str(self._pdf_file))
        try:
            self._check_page(page_num, len(doc))
            page = doc[page_num - 1]
            try:
                width_pt, height_pt = page.get_size()
            finally:
                page.close()
        finally:
            doc.close()
        return width_pt * self.scale, height_pt * self.scale

    def page_text_items(self, page_num: int) -> list[TextItem]:
        """
        One item per pdfium text rectangle, in the engine's native order.

        Read once per page and cached for the engine's lifetime.
        """

        if page_num not in self._items_by_page:
            self._items_by_page[page_num] = self._read_text_items(page_num)
        return list(self._items_by_page[page_num])

    def _read_text_items(self, page_num: int) -> list[TextItem]:
        pdfium = self._require_pdfium()
        doc = pdfium.PdfDocument(str(self._pdf_file))
        try:
            self._check_page(page_num, len(doc))
            page = doc[page_num - 1]
            try:
                _width_pt, height_pt = page.get_size()
                textpage = page.get_textpage()
                try:
                    items: list[TextItem] = []
                    for i in range(textpage.count_rects()):
                        left, bottom, right, top = textpage.get_rect(i)
                        text = textpage.get_text_bounded(left=left, bottom=bottom, right=right, top=top)
                        if not text or not text.strip():
                            continue
                        # PDF y grows upwards; render y grows downwards.
                        bbox = PixelBox(
                            x=left * self.scale,
                            y=(height_pt - top) * self.scale,
                            w=max(0.0, right - left) * self.scale,
                            h=max(0.0, top - bottom) * self.scale,
                        )
                        items.append(TextItem(text=text, bbox=bbox))
                    return items
                finally:
                    textpage.close()
            finally:
                page.close()
        finally:
            doc.close()

    def extract_region(self, *, page_num: int, attempt: CropAttempt) -> RawCandidates:
        inside = [
            it for it in self.page_text_items(page_num) if attempt.region.contains_point(it.center())
        ]
        # Reading order: top-to-bottom, then left-to-right.
        inside.sort(key=lambda it: (it.bbox.y, it.bbox.x, it.text))
        texts = [it.text for it in inside]
        return RawCandidates(
            number_candidates=list(texts),
            title_candidates=list(texts),
            evidence_ref=f"p{page_num:03d}_{attempt.label}",
        )
