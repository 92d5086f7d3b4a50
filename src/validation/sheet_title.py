from __future__ import annotations

from contracts.sheet_index import RejectionReason, TitleValidation

from .normalize import normalize_candidate, strip_title_prefix
from .patterns import (
    ASCII_LETTER_RE,
    DOMAIN_TITLE_KEYWORDS,
    LABEL_REMNANT_RE,
    MAX_TITLE_LENGTH,
    MIN_TITLE_LENGTH,
    MIN_TITLE_LETTERS,
    SCALE_JUNK_RE,
    STAMP_JUNK_RE,
    TRUNCATION_ENDINGS,
)

TITLE_VALID_BASE = 5
TITLE_NO_PREFIX_BONUS = 2
TITLE_COMPLETE_BONUS = 2
TITLE_KEYWORD_BONUS = 3


def _reject(reason: RejectionReason, *, had_prefix: bool) -> TitleValidation:
    return TitleValidation(valid=False, value=None, score=0, rejection_reason=reason, had_prefix=had_prefix)


def _rejection_reason(stripped: str, had_prefix: bool) -> RejectionReason | None:
    # Order matters: the first matching rule names the rejection.
    if not stripped:
        return RejectionReason.LABEL_PREFIX_ONLY if had_prefix else RejectionReason.TOO_SHORT
    if len(stripped) < MIN_TITLE_LENGTH:
        return RejectionReason.TOO_SHORT
    if len(stripped) > MAX_TITLE_LENGTH:
        return RejectionReason.TOO_LONG
    if SCALE_JUNK_RE.search(stripped):
        return RejectionReason.SCALE_JUNK
    if STAMP_JUNK_RE.search(stripped):
        return RejectionReason.STAMP_JUNK
    if LABEL_REMNANT_RE.search(stripped):
        return RejectionReason.LABEL_PREFIX_ONLY
    if len(ASCII_LETTER_RE.findall(stripped)) < MIN_TITLE_LETTERS:
        return RejectionReason.INSUFFICIENT_LETTERS
    return None


def is_truncation_suspected(title: str) -> bool:
    words = title.upper().split()
    return bool(words) and words[-1] in TRUNCATION_ENDINGS


def has_domain_keyword(title: str) -> bool:
    upper = title.upper()
    return any(kw in upper for kw in DOMAIN_TITLE_KEYWORDS)


def validate_sheet_title(candidate: str | None) -> TitleValidation:
    """
    Strip-then-validate a sheet title candidate.

    A stripped label prefix never rejects on its own; it only costs the
    no-prefix bonus.
    """

    normalized = normalize_candidate(candidate)
    prefix = strip_title_prefix(normalized)
    stripped = prefix.stripped

    reason = _rejection_reason(stripped, prefix.had_prefix)
    if reason is not None:
        return _reject(reason, had_prefix=prefix.had_prefix)

    truncated = is_truncation_suspected(stripped)

    score = TITLE_VALID_BASE
    if not prefix.had_prefix:
        score += TITLE_NO_PREFIX_BONUS
    if not truncated:
        score += TITLE_COMPLETE_BONUS
    if has_domain_keyword(stripped):
        score += TITLE_KEYWORD_BONUS

    return TitleValidation(
        valid=True,
        value=stripped,
        score=score,
        truncation_suspected=truncated,
        had_prefix=prefix.had_prefix,
    )
