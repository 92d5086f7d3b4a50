from __future__ import annotations

from contracts.sheet_index import NumberValidation, RejectionReason

from .normalize import normalize_candidate, strip_number_prefix
from .patterns import MIN_NUMBER_LENGTH, NUMBER_SEPARATORS_RE, SHEET_NUMBER_PATTERNS


def canonical_sheet_id(groups: tuple[str | None, ...]) -> str:
    joined = "".join(g for g in groups if g)
    return NUMBER_SEPARATORS_RE.sub("", joined.upper())


def validate_sheet_number(candidate: str | None) -> NumberValidation:
    """
    Normalize, strip a number label, then match the ordered pattern ladder.

    "A-101" -> valid, value "A101", priority 3.
    """

    normalized = normalize_candidate(candidate)
    prefix = strip_number_prefix(normalized)
    stripped = prefix.stripped

    if len(stripped) < MIN_NUMBER_LENGTH:
        return NumberValidation(
            valid=False,
            value=None,
            priority=0,
            rejection_reason=RejectionReason.TOO_SHORT,
            had_prefix=prefix.had_prefix,
        )

    for entry in SHEET_NUMBER_PATTERNS:
        m = entry.pattern.search(stripped)
        if m is None:
            continue
        return NumberValidation(
            valid=True,
            value=canonical_sheet_id(m.groups()),
            priority=entry.priority,
            had_prefix=prefix.had_prefix,
        )

    return NumberValidation(
        valid=False,
        value=None,
        priority=0,
        rejection_reason=RejectionReason.INVALID_NUMBER_PATTERN,
        had_prefix=prefix.had_prefix,
    )
