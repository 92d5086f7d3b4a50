from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from clustering.label_clusters import build_clusters, compute_eps, median_label_height
from clustering.region import build_crop_plan
from clustering.selection import select_best_cluster, selected_cluster_index
from contracts.labels import LabelHit
from contracts.sheet_index import (
    CropAttempt,
    ExtractionSource,
    NumberValidation,
    PageInput,
    PipelineState,
    RawCandidates,
    RejectionReason,
    SheetIdentificationResult,
    SheetIdError,
    SheetIndexEntry,
    SheetKind,
    TitleBlockLocation,
    TitleValidation,
)
from validation.choose import choose_best_candidate
from validation.discipline import infer_discipline, infer_sheet_kind
from validation.normalize import is_labeled_number
from validation.patterns import TOP_TIER_NUMBER_PRIORITY
from validation.sheet_number import validate_sheet_number
from validation.sheet_title import validate_sheet_title

from .anchored import AnchoredValues, read_anchored_values
from .confidence import ConfidenceParams, calculate_confidence
from .config import SheetIdConfig
from .engines.base import RegionTextEngine
from .engines.recorded import RecordedCandidatesEngine

logger = logging.getLogger(__name__)

SHEET_ID_VERSION = "sheet_id_v1"


@dataclass(frozen=True, slots=True)
class _AttemptNumber:
    attempt_index: int
    validation: NumberValidation

    @property
    def valid(self) -> bool:
        return self.validation.valid

    @property
    def score(self) -> int:
        return self.validation.score


@dataclass(frozen=True, slots=True)
class _AttemptTitle:
    attempt_index: int
    validation: TitleValidation

    @property
    def valid(self) -> bool:
        return self.validation.valid

    @property
    def score(self) -> int:
        return self.validation.score


@dataclass(frozen=True, slots=True)
class CandidateResolution:
    numbers: list[_AttemptNumber]
    titles: list[_AttemptTitle]
    best_number: _AttemptNumber | None
    best_title: _AttemptTitle | None
    candidate_count: int

    def first_number_rejection(self) -> RejectionReason:
        for n in self.numbers:
            if n.validation.rejection_reason is not None:
                return n.validation.rejection_reason
        # No candidate text at all reads as an empty candidate.
        return RejectionReason.TOO_SHORT


def resolve_candidates(collected: list[tuple[CropAttempt, RawCandidates]]) -> CandidateResolution:
    """
    Validate every number/title candidate across the attempts made so far and
    choose the best of each. Labeled number fields ("SHEET NO. A-101") never
    compete as titles.
    """

    numbers: list[_AttemptNumber] = []
    titles: list[_AttemptTitle] = []
    count = 0
    for idx, (_attempt, raw) in enumerate(collected):
        for text in raw.number_candidates:
            count += 1
            numbers.append(_AttemptNumber(idx, validate_sheet_number(text)))
        for text in raw.title_candidates:
            count += 1
            if is_labeled_number(text):
                continue
            titles.append(_AttemptTitle(idx, validate_sheet_title(text)))

    return CandidateResolution(
        numbers=numbers,
        titles=titles,
        best_number=choose_best_candidate(numbers),
        best_title=choose_best_candidate(titles),
        candidate_count=count,
    )


def locate_title_block(
    hits: list[LabelHit],
    *,
    render_w: float,
    render_h: float,
    config: SheetIdConfig | None = None,
) -> TitleBlockLocation:
    if config is None:
        config = SheetIdConfig()
    config.validate()

    eps = compute_eps(median_label_height(hits), config.clustering) if len(hits) >= 2 else None
    clusters = build_clusters(hits, config.clustering)
    index = selected_cluster_index(clusters)
    selected = select_best_cluster(clusters)
    plan = build_crop_plan(
        selected,
        render_w,
        render_h,
        config.region,
        include_fallbacks=config.enable_fallback_crops,
    )
    return TitleBlockLocation(
        eps=eps,
        clusters=clusters,
        selected=selected,
        selected_index=index,
        crop_plan=plan,
    )


def _canonicalize_meta(meta: dict[str, Any]) -> None:
    warnings = meta.get("warnings")
    if isinstance(warnings, list):
        meta["warnings"] = sorted(
            warnings,
            key=lambda w: (
                str(w.get("code", "")),
                json.dumps(w.get("detail") or {}, sort_keys=True, separators=(",", ":"), ensure_ascii=False),
            ),
        )


def _base_meta(config: SheetIdConfig, engine: RegionTextEngine) -> dict[str, Any]:
    return {
        "stage": "sheet_id",
        "version": SHEET_ID_VERSION,
        "config": config.to_dict(),
        "engine": {"backend": engine.backend_id(), "backend_version": engine.backend_version()},
        "state": PipelineState.RAW_HITS.value,
        "counts": {},
        "warnings": [],
    }


def _choose_number(
    page: PageInput,
    anchored: AnchoredValues,
    resolution: CandidateResolution,
    collected: list[tuple[CropAttempt, RawCandidates]],
) -> tuple[NumberValidation | None, str | None, str | None]:
    """Anchored value first, then the best crop candidate. Returns (validation, chosen attempt, evidence ref)."""
    if anchored.number.found and anchored.number.region is not None:
        chosen = f"anchored_{anchored.number.region.region_type.value}"
        return anchored.number.validation, chosen, f"p{page.page_num:03d}_{chosen}"
    best = resolution.best_number
    if best is None:
        return None, None, None
    attempt, raw = collected[best.attempt_index]
    return best.validation, attempt.label, raw.evidence_ref or f"p{page.page_num:03d}_{attempt.label}"


def _first_rejection(anchored: AnchoredValues, resolution: CandidateResolution) -> RejectionReason:
    if not resolution.numbers:
        for region in anchored.number.regions:
            if region.rejection_reason is not None:
                return region.rejection_reason
    return resolution.first_number_rejection()


def _identify_sheet(page: PageInput, engine: RegionTextEngine, config: SheetIdConfig) -> SheetIdentificationResult:
    config.validate()
    meta = _base_meta(config, engine)

    location = locate_title_block(page.hits, render_w=page.render_w, render_h=page.render_h, config=config)
    meta["state"] = PipelineState.CLUSTERED.value
    meta["eps"] = location.eps
    meta["clusters"] = [
        {"bbox": c.bbox.to_dict(), "score": c.score, "members": [m.text for m in c.members]}
        for c in location.clusters
    ]
    meta["selected_cluster_index"] = location.selected_index
    meta["why_selected"] = None if location.selected is None else location.selected.why_selected

    if location.selected is None:
        meta["warnings"].append(
            {
                "code": "TITLE_BLOCK_NOT_DETECTED",
                "message": "No eligible label cluster; falling back to conventional title-block crops.",
                "detail": {"hits": len(page.hits)},
            }
        )
    meta["state"] = PipelineState.SELECTED_REGION.value

    anchored = read_anchored_values(
        location.selected,
        engine.page_text_items(page.page_num) if location.selected is not None else None,
        render_w=page.render_w,
        render_h=page.render_h,
    )
    meta["anchored_regions"] = [r.to_dict() for r in anchored.regions()]

    # Crops are only read for what the anchored regions did not supply.
    collected: list[tuple[CropAttempt, RawCandidates]] = []
    resolution = resolve_candidates(collected)
    if not (anchored.number.found and anchored.title.found):
        for attempt in location.crop_plan:
            raw = engine.extract_region(page_num=page.page_num, attempt=attempt)
            collected.append((attempt, raw))
            resolution = resolve_candidates(collected)
            if resolution.best_number is not None:
                break

    anchored_candidates = sum(len(r.candidates) for r in anchored.regions())
    meta["crop_attempts"] = [
        {**a.to_dict(), "candidates": r.to_dict()} for a, r in collected
    ]
    meta["counts"] = {
        "hits": len(page.hits),
        "clusters": len(location.clusters),
        "anchored_regions": len(meta["anchored_regions"]),
        "crop_attempts": len(collected),
        "candidates": resolution.candidate_count + anchored_candidates,
    }
    meta["number_attempts"] = [
        {"attempt": n.attempt_index, **n.validation.to_dict()} for n in resolution.numbers
    ]
    meta["title_attempts"] = [
        {"attempt": t.attempt_index, **t.validation.to_dict()} for t in resolution.titles
    ]
    if meta["counts"]["candidates"]:
        meta["state"] = PipelineState.VALIDATED.value
    else:
        meta["state"] = PipelineState.RAW_CANDIDATES.value

    number, chosen_attempt, evidence_ref = _choose_number(page, anchored, resolution, collected)
    if number is None or number.value is None:
        reason = _first_rejection(anchored, resolution)
        _canonicalize_meta(meta)
        return SheetIdentificationResult(
            ok=False,
            page_num=page.page_num,
            entry=None,
            rejection_reason=reason,
            sheet_kind=SheetKind.UNKNOWN,
            routing=None,
            errors=[
                SheetIdError(
                    code="SHEET_ID_NO_VALID_NUMBER",
                    message="No candidate produced a valid sheet number.",
                    detail={"rejection_reason": reason.value, "crop_attempts": len(collected)},
                )
            ],
            meta=meta,
        )

    if anchored.title.found:
        title = anchored.title.validation
    else:
        title = None if resolution.best_title is None else resolution.best_title.validation
    truncated = bool(title is not None and title.truncation_suspected)
    if truncated:
        meta["warnings"].append(
            {
                "code": "TITLE_TRUNCATION_SUSPECTED",
                "message": "Chosen sheet title ends in a dangling word.",
                "detail": {"sheet_title": title.value},
            }
        )

    conf = calculate_confidence(
        ConfidenceParams(
            extraction_source=engine.extraction_source(),
            anchored_extraction=anchored.number.found,
            has_sheet_number=True,
            has_sheet_title=title is not None,
            has_both_labels_in_cluster=bool(location.selected is not None and location.selected.has_both_labels()),
            top_tier_number_pattern=number.priority == TOP_TIER_NUMBER_PRIORITY,
            title_passes_clean_checks=title is not None,
            truncation_suspected=truncated,
        )
    )
    meta["confidence"] = conf.to_dict()
    meta["chosen_attempt"] = chosen_attempt

    sheet_id = number.value
    sheet_title = None if title is None else title.value

    entry = SheetIndexEntry(
        sheet_id=sheet_id,
        sheet_title=sheet_title,
        discipline=infer_discipline(sheet_id),
        confidence=conf.confidence,
        evidence_snip_ref=evidence_ref,
    )
    meta["state"] = PipelineState.CHOSEN.value
    _canonicalize_meta(meta)

    logger.debug("page %s -> %s (%s)", page.page_num, sheet_id, conf.routing.value)

    return SheetIdentificationResult(
        ok=True,
        page_num=page.page_num,
        entry=entry,
        rejection_reason=None,
        sheet_kind=infer_sheet_kind(sheet_title),
        routing=conf.routing,
        errors=[],
        meta=meta,
    )


def internal_error_result(page_num: int | None, exc: BaseException) -> SheetIdentificationResult:
    return SheetIdentificationResult(
        ok=False,
        page_num=page_num,
        entry=None,
        rejection_reason=RejectionReason.INTERNAL_ERROR,
        sheet_kind=SheetKind.UNKNOWN,
        routing=None,
        errors=[
            SheetIdError(
                code="SHEET_ID_INTERNAL_ERROR",
                message="Unexpected failure while identifying the sheet.",
                detail={"exception": type(exc).__name__, "message": str(exc)},
            )
        ],
        meta={"stage": "sheet_id", "version": SHEET_ID_VERSION, "warnings": []},
    )


def identify_sheet(
    *,
    page: PageInput,
    engine: RegionTextEngine,
    config: SheetIdConfig | None = None,
) -> SheetIdentificationResult:
    """
    Orchestration boundary for one page.

    Always returns a result: an entry, a specific rejection reason, or
    `internal_error` for malformed input / unexpected faults.
    """

    page_num = getattr(page, "page_num", None)
    try:
        return _identify_sheet(page, engine, config if config is not None else SheetIdConfig())
    except Exception as e:
        logger.exception("sheet identification failed for page %s", page_num)
        return internal_error_result(page_num if isinstance(page_num, int) else None, e)


def identify_sheet_payload(
    payload: Mapping[str, Any],
    *,
    engine: RegionTextEngine | None = None,
    config: SheetIdConfig | None = None,
) -> SheetIdentificationResult:
    """
    Parse a JSON page payload and identify it inside the same boundary.

    Without an explicit engine, the payload's "candidates" object is replayed,
    together with its optional positioned "text_items".
    """

    raw_page_num = payload.get("page_num") if isinstance(payload, Mapping) else None
    try:
        page = PageInput.from_dict(dict(payload))
        if engine is None:
            source = ExtractionSource(str(payload.get("extraction_source", ExtractionSource.UNKNOWN.value)))
            engine = RecordedCandidatesEngine.from_dict(
                payload.get("candidates") or {},
                source=source,
                text_items=payload.get("text_items"),
            )
    except Exception as e:
        logger.exception("malformed page payload (page_num=%r)", raw_page_num)
        page_num = raw_page_num if isinstance(raw_page_num, int) else None
        return internal_error_result(page_num, e)

    return identify_sheet(page=page, engine=engine, config=config)
