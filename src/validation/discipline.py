from __future__ import annotations

from contracts.sheet_index import SheetKind

from .patterns import DISCIPLINES, UNKNOWN_DISCIPLINE


def infer_discipline(sheet_id: str | None) -> str:
    """Discipline from the first two, then first, letters of a validated sheet id."""
    if not sheet_id:
        return UNKNOWN_DISCIPLINE
    upper = sheet_id.upper()
    for n in (2, 1):
        prefix = upper[:n]
        if len(prefix) == n and prefix in DISCIPLINES:
            return DISCIPLINES[prefix]
    return UNKNOWN_DISCIPLINE


def infer_sheet_kind(sheet_title: str | None) -> SheetKind:
    if not sheet_title:
        return SheetKind.UNKNOWN

    upper = sheet_title.upper()
    if "SCHEDULE" in upper:
        return SheetKind.SCHEDULE
    if "RCP" in upper or "REFLECTED CEILING" in upper:
        return SheetKind.RCP
    if "DETAIL" in upper:
        return SheetKind.DETAIL
    if "LEGEND" in upper or "ABBREVIATION" in upper or "SYMBOL" in upper:
        return SheetKind.LEGEND
    if "SECTION" in upper or "ELEVATION" in upper:
        return SheetKind.GENERAL
    if "PLAN" in upper or "FLOOR" in upper or "ROOF" in upper or "SITE" in upper:
        return SheetKind.PLAN
    return SheetKind.GENERAL
