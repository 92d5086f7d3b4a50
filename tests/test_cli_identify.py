from __future__ import annotations

import contextlib
import io
import json
import shutil
import unittest
from pathlib import Path

from contracts.sheet_index import SheetIndexEntry
from sheet_index.artifacts import serialize_identification_result, write_identification_json
from sheet_index.cli import main
from sheet_index.module import identify_sheet_payload


def _page(page_num: int, number: str, title: str) -> dict:
    return {
        "page_num": page_num,
        "render_w": 3000,
        "render_h": 2000,
        "extraction_source": "vector_text",
        "hits": [
            {"bbox": {"x": 2600, "y": 1800, "w": 100, "h": 30}, "label_type": "number", "weight": 3, "text": "SHEET NO."},
            {"bbox": {"x": 2600, "y": 1850, "w": 100, "h": 30}, "label_type": "title", "weight": 3, "text": "SHEET TITLE"},
        ],
        "candidates": {"vector_label": {"number_candidates": [number], "title_candidates": [title]}},
    }


def _run(argv: list[str]) -> tuple[int, dict]:
    buf = io.StringIO()
    with contextlib.redirect_stdout(buf):
        code = main(argv)
    return code, json.loads(buf.getvalue().strip().splitlines()[-1])


class TestCliIdentify(unittest.TestCase):
    def setUp(self) -> None:
        repo_root = Path(__file__).resolve().parents[1]
        self.root = repo_root / "artifacts" / "_test_cli_identify"
        if self.root.exists():
            shutil.rmtree(self.root)
        self.root.mkdir(parents=True, exist_ok=True)

    def test_all_pages_identified_exits_zero(self) -> None:
        doc = {"doc_id": "demo", "pages": [_page(1, "A-101", "FIRST FLOOR PLAN"), _page(2, "A-201", "EXTERIOR ELEVATIONS")]}
        inp = self.root / "doc.json"
        out = self.root / "out" / "sheet_index.json"
        inp.write_text(json.dumps(doc), encoding="utf-8")

        code, summary = _run(["--input", str(inp), "--output", str(out)])
        self.assertEqual(code, 0)
        self.assertEqual(summary, {"identified": 2, "ok": True, "pages": 2, "rejected": 0, "valid_index": True})

        written = json.loads(out.read_text(encoding="utf-8"))
        self.assertEqual(written["doc_id"], "demo")
        self.assertEqual([e["sheet_id"] for e in written["sheet_index"]], ["A101", "A201"])
        self.assertEqual(written["summary"]["unindexed_count"], 0)
        self.assertEqual(len(written["pages"]), 2)

    def test_output_bytes_are_stable(self) -> None:
        doc = {"doc_id": "demo", "pages": [_page(1, "A-101", "FIRST FLOOR PLAN")]}
        inp = self.root / "doc.json"
        inp.write_text(json.dumps(doc), encoding="utf-8")

        out1 = self.root / "a.json"
        out2 = self.root / "b.json"
        _run(["--input", str(inp), "--output", str(out1)])
        _run(["--input", str(inp), "--output", str(out2)])
        self.assertEqual(out1.read_bytes(), out2.read_bytes())
        self.assertTrue(out1.read_text(encoding="utf-8").endswith("\n"))

    def test_rejected_page_exits_two(self) -> None:
        doc = {"doc_id": "demo", "pages": [_page(1, "A-101", "FIRST FLOOR PLAN"), _page(2, "NOT A NUMBER", "NOT TO SCALE")]}
        inp = self.root / "doc.json"
        out = self.root / "rejected.json"
        inp.write_text(json.dumps(doc), encoding="utf-8")

        code, summary = _run(["--input", str(inp), "--output", str(out)])
        self.assertEqual(code, 2)
        self.assertFalse(summary["ok"])
        self.assertEqual(summary["rejected"], 1)

        written = json.loads(out.read_text(encoding="utf-8"))
        self.assertEqual(written["pages"][1]["rejection_reason"], "invalid_number_pattern")
        self.assertEqual(written["summary"]["rejection_counts"], {"invalid_number_pattern": 1})

    def test_single_result_artifact_round_trips_entry(self) -> None:
        result = identify_sheet_payload(_page(1, "E-501", "LIGHTING DETAILS"))
        out = self.root / "page_001.sheet_id.json"
        write_identification_json(result=result, out_file=out)

        text = out.read_text(encoding="utf-8")
        self.assertEqual(text, serialize_identification_result(result))
        written = json.loads(text)
        self.assertTrue(written["ok"])
        self.assertEqual(written["sheet_kind"], "detail")
        self.assertEqual(SheetIndexEntry.from_dict(written["entry"]), result.entry)

    def test_disable_fallback_crops_flag(self) -> None:
        page = _page(1, "A-101", "FIRST FLOOR PLAN")
        page["hits"] = []
        page["candidates"] = {"fallback_br_60": {"number_candidates": ["A-101"], "title_candidates": []}}
        inp = self.root / "doc.json"
        inp.write_text(json.dumps({"doc_id": "demo", "pages": [page]}), encoding="utf-8")

        code, _ = _run(["--input", str(inp), "--output", str(self.root / "with.json")])
        self.assertEqual(code, 0)
        code, _ = _run(["--input", str(inp), "--output", str(self.root / "without.json"), "--disable-fallback-crops"])
        self.assertEqual(code, 2)


if __name__ == "__main__":
    unittest.main()
