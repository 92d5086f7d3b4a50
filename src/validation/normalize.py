from __future__ import annotations

import re
from dataclasses import dataclass

from .patterns import NUMBER_PREFIX_RE, TITLE_PREFIX_RE

_WHITESPACE_RE = re.compile(r"\s+")

# Stripped from both ends, together with any whitespace the strip exposes.
_EDGE_CHARS = ":-.,; "


@dataclass(frozen=True, slots=True)
class PrefixStrip:
    stripped: str
    had_prefix: bool


def normalize_candidate(raw: str | None) -> str:
    """
    Collapse whitespace runs to single spaces, trim, and drop edge punctuation.

    Idempotent: normalize_candidate(normalize_candidate(s)) == normalize_candidate(s).
    """

    if not raw:
        return ""
    collapsed = _WHITESPACE_RE.sub(" ", raw).strip()
    return collapsed.strip(_EDGE_CHARS)


def _strip_prefix(candidate: str, prefix_re: re.Pattern[str]) -> PrefixStrip:
    m = prefix_re.match(candidate)
    if m is None or m.end() == 0:
        return PrefixStrip(stripped=candidate.strip(), had_prefix=False)
    return PrefixStrip(stripped=candidate[m.end():].strip(), had_prefix=True)


def strip_title_prefix(candidate: str) -> PrefixStrip:
    # e.g. "SHEET TITLE:", "DRAWING TITLE", "TITLE."
    return _strip_prefix(candidate, TITLE_PREFIX_RE)


def strip_number_prefix(candidate: str) -> PrefixStrip:
    # e.g. "SHEET NO.", "SHEET #", "DWG NO.", "SHT NUMBER"
    return _strip_prefix(candidate, NUMBER_PREFIX_RE)


def is_labeled_number(raw: str | None) -> bool:
    """True for a number field read together with its label ("SHEET NO. A-101")."""
    return strip_number_prefix(normalize_candidate(raw)).had_prefix
