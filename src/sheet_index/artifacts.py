from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from contracts.sheet_index import SheetIdentificationResult, SheetIndexSummary

from .index import build_sheet_index


def _dumps(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, indent=2) + "\n"


def serialize_identification_result(result: SheetIdentificationResult) -> str:
    return _dumps(result.to_dict())


def write_identification_json(*, result: SheetIdentificationResult, out_file: Path) -> None:
    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text(serialize_identification_result(result), encoding="utf-8")


def sheet_index_payload(
    *,
    doc_id: str | None,
    results: list[SheetIdentificationResult],
    summary: SheetIndexSummary,
    min_confidence: float = 0.5,
) -> dict[str, Any]:
    return {
        "doc_id": doc_id,
        "pages": [r.to_dict() for r in results],
        "sheet_index": [e.to_dict() for e in build_sheet_index(results, min_confidence=min_confidence)],
        "summary": summary.to_dict(),
    }


def write_sheet_index_json(
    *,
    doc_id: str | None,
    results: list[SheetIdentificationResult],
    summary: SheetIndexSummary,
    out_file: Path,
    min_confidence: float = 0.5,
) -> None:
    out_file.parent.mkdir(parents=True, exist_ok=True)
    payload = sheet_index_payload(doc_id=doc_id, results=results, summary=summary, min_confidence=min_confidence)
    out_file.write_text(_dumps(payload), encoding="utf-8")
