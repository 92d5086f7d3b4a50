"""
Fixed lexicon tables for candidate validation.

Everything here is read-only process-wide data, built once at import.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True, slots=True)
class SheetNumberPattern:
    name: str
    pattern: re.Pattern[str]
    priority: int  # 3 = canonical letter+digits ... 1 = loose single-letter


# Tried strictly in declared order; the first match wins.
SHEET_NUMBER_PATTERNS: tuple[SheetNumberPattern, ...] = (
    SheetNumberPattern(
        "letters_digits",
        re.compile(r"\b([A-Z]{1,2})(\d{3,4}(?:\.\d{1,2})?)\b", re.IGNORECASE),
        3,
    ),
    SheetNumberPattern(
        "letters_separator_digits",
        re.compile(r"\b([A-Z]{1,2})[-.](\d{2,4}(?:\.\d{1,2})?)\b", re.IGNORECASE),
        3,
    ),
    SheetNumberPattern(
        "letters_digit_subnumber",
        re.compile(r"\b([A-Z]{1,2})(\d)[-.](\d{2,3})\b", re.IGNORECASE),
        2,
    ),
    SheetNumberPattern(
        "two_letter_discipline",
        re.compile(r"\b(FP|FA|FS|ID|LP|EL)[-.]?(\d{2,4})\b", re.IGNORECASE),
        2,
    ),
    SheetNumberPattern(
        "single_letter_loose",
        re.compile(r"\b([A-Z])[-.]?(\d{2,4})\b", re.IGNORECASE),
        1,
    ),
)

TOP_TIER_NUMBER_PRIORITY = 3

# Separators dropped when rebuilding the canonical sheet id.
NUMBER_SEPARATORS_RE = re.compile(r"[-.]")

# Label phrases stripped from the start of a candidate (at most one).
TITLE_PREFIX_RE = re.compile(
    r"^(?:SHEET\s*(?:TITLE|NAME)|DRAWING\s*TITLE|TITLE)(?![A-Z])\s*[:.]?\s*",
    re.IGNORECASE,
)
NUMBER_PREFIX_RE = re.compile(
    r"^(?:SHEET\s*(?:(?:NO\.?|NUMBER)(?![A-Z])|#)"
    r"|(?:DRAWING|DWG\.?|SHT\.?)\s*(?:NO\.?|NUMBER)(?![A-Z]))"
    r"\s*[:.]?\s*",
    re.IGNORECASE,
)

# Junk checks run on the stripped candidate.
SCALE_JUNK_RE = re.compile(
    r"^(?:NOT\s*TO\s*SCALE|SCALE(?:\s*[:.].*)?|SCALE\s+(?:AS\s+NOTED|\d.*))$",
    re.IGNORECASE,
)
STAMP_JUNK_RE = re.compile(
    r"^(?:ISSUED\s*FOR\b.*|NOT\s*FOR\s*CONSTRUCTION|PRELIMINARY|BID\s*SET|REVIEW\s*SET|FOR\s*REVIEW)$",
    re.IGNORECASE,
)
LABEL_REMNANT_RE = re.compile(r"^(?:SHEET|DRAWING|DWG|SHT|TITLE)\b[:.]?$", re.IGNORECASE)

ASCII_LETTER_RE = re.compile(r"[A-Za-z]")

MIN_TITLE_LENGTH = 4
MAX_TITLE_LENGTH = 120
MIN_TITLE_LETTERS = 4
MIN_NUMBER_LENGTH = 2

# Last word of a title that suggests the OCR text was cut off mid-phrase.
TRUNCATION_ENDINGS: frozenset[str] = frozenset(
    {"AND", "PROJECT", "INFORMATION", "THE", "TO", "FOR", "OF", "IN", "AT", "WITH"}
)

DOMAIN_TITLE_KEYWORDS: tuple[str, ...] = (
    "PLAN",
    "FLOOR",
    "ROOF",
    "RCP",
    "REFLECTED",
    "CEILING",
    "SCHEDULE",
    "DETAIL",
    "SECTION",
    "ELEVATION",
    "LEGEND",
    "MECHANICAL",
    "ELECTRICAL",
    "PLUMBING",
    "STRUCTURAL",
    "LEVEL",
    "SITE",
    "BASEMENT",
    "GROUND",
    "TYPICAL",
)

DISCIPLINES: MappingProxyType[str, str] = MappingProxyType(
    {
        "A": "Architectural",
        "S": "Structural",
        "M": "Mechanical",
        "P": "Plumbing",
        "E": "Electrical",
        "F": "Fire Protection",
        "C": "Civil",
        "L": "Landscape",
        "I": "Interior",
        "G": "General",
        "T": "Telecommunications",
        "D": "Demo",
        "X": "Existing Conditions",
    }
)
UNKNOWN_DISCIPLINE = "Unknown"
