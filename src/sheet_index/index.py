from __future__ import annotations

from typing import Iterable

from contracts.sheet_index import SheetIdentificationResult, SheetIndexEntry, SheetIndexSummary

INDEXED_CONFIDENCE = 0.85
VALID_SUCCESS_RATE = 0.9

BOILERPLATE_MIN_TITLE_LENGTH = 30
BOILERPLATE_MIN_REPEATS = 8


def _in_page_order(results: Iterable[SheetIdentificationResult]) -> list[SheetIdentificationResult]:
    # Results without a page number (malformed payloads) sort last, input order kept.
    indexed = list(enumerate(results))
    indexed.sort(key=lambda t: (t[1].page_num is None, t[1].page_num or 0, t[0]))
    return [r for _, r in indexed]


def build_sheet_index(
    results: Iterable[SheetIdentificationResult],
    *,
    min_confidence: float = 0.5,
) -> list[SheetIndexEntry]:
    """Entries of successful pages at or above `min_confidence`, in page order."""
    return [
        r.entry
        for r in _in_page_order(results)
        if r.ok and r.entry is not None and r.entry.confidence >= min_confidence
    ]


def detect_boilerplate_titles(results: Iterable[SheetIdentificationResult]) -> list[int]:
    """
    Page numbers whose (long) title repeats across many pages.

    A title longer than 30 characters seen on more than 8 pages is a title-block
    template string rather than a sheet title.
    """

    pages_by_title: dict[str, list[int]] = {}
    for r in results:
        if r.entry is None or r.page_num is None or not r.entry.sheet_title:
            continue
        title = r.entry.sheet_title.strip().lower()
        if len(title) <= BOILERPLATE_MIN_TITLE_LENGTH:
            continue
        pages_by_title.setdefault(title, []).append(r.page_num)

    pages: set[int] = set()
    for page_nums in pages_by_title.values():
        if len(page_nums) > BOILERPLATE_MIN_REPEATS:
            pages.update(page_nums)
    return sorted(pages)


def summarize_sheet_index(
    results: Iterable[SheetIdentificationResult],
    *,
    total_pages: int | None = None,
    min_confidence: float = 0.5,
) -> SheetIndexSummary:
    results = list(results)
    if total_pages is None:
        total_pages = len(results)
    if total_pages < 0:
        raise ValueError("total_pages must be >= 0")

    index = build_sheet_index(results, min_confidence=min_confidence)
    indexed = [e for e in index if e.confidence >= INDEXED_CONFIDENCE]

    success_rate = len(indexed) / total_pages if total_pages > 0 else 0.0
    avg_confidence = sum(e.confidence for e in index) / len(index) if index else 0.0

    rejection_counts: dict[str, int] = {}
    for r in results:
        if r.rejection_reason is not None:
            key = r.rejection_reason.value
            rejection_counts[key] = rejection_counts.get(key, 0) + 1

    return SheetIndexSummary(
        valid=success_rate >= VALID_SUCCESS_RATE,
        success_rate=round(success_rate, 4),
        avg_confidence=round(avg_confidence, 4),
        unindexed_count=total_pages - len(indexed),
        rejection_counts=dict(sorted(rejection_counts.items())),
        boilerplate_pages=detect_boilerplate_titles(results),
    )
