from __future__ import annotations

import argparse
import importlib
import json
import logging
from pathlib import Path
from typing import Any

from clustering.config import ClusteringConfig
from clustering.label_detection import detect_label_hits
from contracts.sheet_index import PageInput, SheetIdentificationResult

from .artifacts import write_sheet_index_json
from .config import SheetIdConfig
from .engines.pypdfium2_engine import Pypdfium2TextEngine
from .index import summarize_sheet_index
from .module import identify_sheet, identify_sheet_payload, internal_error_result

logger = logging.getLogger(__name__)


def _assert_local_imports() -> None:
    """
    Guardrail: ensure the local canonical implementations under repo/src/ are imported,
    not a globally installed `contracts` or `validation` package with the same name.
    """

    src_root = Path(__file__).resolve().parents[1]
    for name in ("contracts.sheet_index", "clustering.label_clusters", "validation.sheet_number"):
        mod = importlib.import_module(name)
        f = Path(getattr(mod, "__file__", "")).resolve()
        if not str(f).startswith(str(src_root)):
            raise RuntimeError(f"Imported {mod.__name__} from unexpected path: {f}")


def _build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="sheetid-identify",
        description="Identify sheet number/title per page (label clusters -> crop -> validated candidates).",
    )
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--input", type=Path, help="Path to a JSON document of pages with label hits and candidates.")
    src.add_argument("--pdf", type=Path, help="Path to a vector PDF; label hits and candidates come from its text layer.")
    p.add_argument("--dpi", type=int, default=150, help="Render space resolution used with --pdf.")
    p.add_argument("--output", required=True, type=Path, help="Path to write the sheet index JSON artifact.")
    p.add_argument("--eps-k", type=float, default=2.5)
    p.add_argument("--eps-min", type=float, default=80.0)
    p.add_argument("--eps-max", type=float, default=400.0)
    p.add_argument("--min-cluster-size", type=int, default=2)
    p.add_argument("--min-eligible-weight", type=float, default=6.0)
    p.add_argument("--min-index-confidence", type=float, default=0.5)
    # Fallback crops are enabled by default; provide a single explicit opt-out flag.
    p.add_argument("--disable-fallback-crops", action="store_false", dest="enable_fallback_crops", default=True)
    p.add_argument("--verbose", action="store_true", default=False)
    return p


def _config_from_args(args: argparse.Namespace) -> SheetIdConfig:
    cfg = SheetIdConfig(
        clustering=ClusteringConfig(
            eps_k=args.eps_k,
            eps_min=args.eps_min,
            eps_max=args.eps_max,
            min_cluster_size=args.min_cluster_size,
            min_eligible_weight=args.min_eligible_weight,
        ),
        enable_fallback_crops=args.enable_fallback_crops,
        min_index_confidence=args.min_index_confidence,
    )
    cfg.validate()
    return cfg


def _identify_json_document(raw: dict[str, Any], cfg: SheetIdConfig) -> list[SheetIdentificationResult]:
    pages = raw.get("pages")
    if not isinstance(pages, list):
        raise ValueError("Input document must contain a 'pages' list")
    return [identify_sheet_payload(p if isinstance(p, dict) else {}, config=cfg) for p in pages]


def _identify_pdf_page(engine: Pypdfium2TextEngine, page_num: int, cfg: SheetIdConfig) -> SheetIdentificationResult:
    render_w, render_h = engine.page_render_size(page_num)
    hits = detect_label_hits(engine.page_text_items(page_num), cfg.label_detection)
    logger.info("page %d: %d label hits", page_num, len(hits))
    page = PageInput(page_num=page_num, render_w=render_w, render_h=render_h, hits=hits)
    return identify_sheet(page=page, engine=engine, config=cfg)


def _identify_pdf(pdf_file: Path, dpi: int, cfg: SheetIdConfig) -> list[SheetIdentificationResult]:
    engine = Pypdfium2TextEngine(pdf_file=pdf_file, dpi=dpi)
    results: list[SheetIdentificationResult] = []
    for page_num in range(1, engine.get_page_count() + 1):
        try:
            results.append(_identify_pdf_page(engine, page_num, cfg))
        except Exception as e:
            logger.exception("could not read page %d of %s", page_num, pdf_file)
            results.append(internal_error_result(page_num, e))
    return results


def main(argv: list[str] | None = None) -> int:
    _assert_local_imports()
    args = _build_arg_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    cfg = _config_from_args(args)

    if args.input is not None:
        raw = json.loads(args.input.read_text(encoding="utf-8"))
        doc_id = raw.get("doc_id")
        results = _identify_json_document(raw, cfg)
    else:
        doc_id = args.pdf.stem
        results = _identify_pdf(args.pdf, args.dpi, cfg)

    summary = summarize_sheet_index(results, min_confidence=cfg.min_index_confidence)
    write_sheet_index_json(
        doc_id=None if doc_id is None else str(doc_id),
        results=results,
        summary=summary,
        out_file=args.output,
        min_confidence=cfg.min_index_confidence,
    )

    all_ok = all(r.ok for r in results)
    out = {
        "ok": all_ok,
        "pages": len(results),
        "identified": sum(1 for r in results if r.ok),
        "rejected": sum(1 for r in results if not r.ok),
        "valid_index": summary.valid,
    }
    print(json.dumps(out, sort_keys=True, separators=(",", ":"), ensure_ascii=False))

    return 0 if all_ok else 2


if __name__ == "__main__":
    raise SystemExit(main())
