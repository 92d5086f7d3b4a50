from __future__ import annotations

import unittest

from contracts.sheet_index import RejectionReason
from validation.sheet_title import has_domain_keyword, is_truncation_suspected, validate_sheet_title


class TestSheetTitleValidation(unittest.TestCase):
    def test_prefixed_title_is_stripped_and_scored(self) -> None:
        r = validate_sheet_title("SHEET TITLE: FIRST FLOOR PLAN")
        self.assertTrue(r.valid)
        self.assertEqual(r.value, "FIRST FLOOR PLAN")
        self.assertTrue(r.had_prefix)
        self.assertFalse(r.truncation_suspected)
        # 5 base + 2 complete + 3 keyword; no-prefix bonus withheld.
        self.assertEqual(r.score, 10)

    def test_unprefixed_title_gets_full_score(self) -> None:
        r = validate_sheet_title("FIRST FLOOR PLAN")
        self.assertTrue(r.valid)
        self.assertEqual(r.score, 12)

    def test_title_without_domain_keyword(self) -> None:
        r = validate_sheet_title("COVER SHEET")
        self.assertTrue(r.valid)
        self.assertEqual(r.score, 9)

    def test_truncation_is_flagged_not_rejected(self) -> None:
        r = validate_sheet_title("GENERAL NOTES AND")
        self.assertTrue(r.valid)
        self.assertTrue(r.truncation_suspected)
        self.assertEqual(r.score, 7)

    def test_rejection_ladder(self) -> None:
        cases = [
            ("NOT TO SCALE", RejectionReason.SCALE_JUNK),
            ("SCALE: 1/8\" = 1'-0\"", RejectionReason.SCALE_JUNK),
            ("ISSUED FOR REVIEW", RejectionReason.STAMP_JUNK),
            ("NOT FOR CONSTRUCTION", RejectionReason.STAMP_JUNK),
            ("PRELIMINARY", RejectionReason.STAMP_JUNK),
            ("SHEET TITLE:", RejectionReason.LABEL_PREFIX_ONLY),
            ("SHEET", RejectionReason.LABEL_PREFIX_ONLY),
            ("AB", RejectionReason.TOO_SHORT),
            ("", RejectionReason.TOO_SHORT),
            ("X" * 121, RejectionReason.TOO_LONG),
            ("1234 5678", RejectionReason.INSUFFICIENT_LETTERS),
            ("A-101", RejectionReason.INSUFFICIENT_LETTERS),
        ]
        for raw, reason in cases:
            r = validate_sheet_title(raw)
            self.assertFalse(r.valid, msg=raw)
            self.assertIsNone(r.value, msg=raw)
            self.assertEqual(r.rejection_reason, reason, msg=raw)

    def test_length_check_runs_before_junk_checks(self) -> None:
        r = validate_sheet_title("NOT TO SCALE " + "X" * 120)
        self.assertEqual(r.rejection_reason, RejectionReason.TOO_LONG)

    def test_helpers(self) -> None:
        self.assertTrue(is_truncation_suspected("PLAN OF THE"))
        self.assertFalse(is_truncation_suspected("SITE PLAN"))
        self.assertFalse(is_truncation_suspected(""))
        self.assertTrue(has_domain_keyword("enlarged restroom details"))
        self.assertFalse(has_domain_keyword("COVER SHEET"))


if __name__ == "__main__":
    unittest.main()
