"""
Unit tests for candidate conflict detection.

Conflict rules:
- same weekday (or same single date when neither has a weekday)
- overlapping clock spans (touching spans do not conflict)
- overlapping date spans
"""

import unittest

from tkbscan.conflicts import find_conflicts
from tkbscan.model import CandidateEvent


def _cand(title, p_from, p_to, weekday=2, start="2025-11-10", end="2025-12-29"):
    return CandidateEvent(
        title=title, period_from=p_from, period_to=p_to, weekday=weekday, start_date=start, end_date=end
    )


class TestConflicts(unittest.TestCase):
    def test_overlap_same_weekday(self) -> None:
        a = _cand("A", 1, 3)
        b = _cand("B", 2, 4, start="2025-11-17", end="2026-01-05")
        confs = find_conflicts([a, b])
        self.assertEqual(len(confs), 1)
        self.assertEqual((confs[0][0].title, confs[0][1].title), ("A", "B"))

    def test_different_weekday_no_conflict(self) -> None:
        self.assertEqual(find_conflicts([_cand("A", 1, 3), _cand("B", 1, 3, weekday=3)]), [])

    def test_adjacent_periods_no_conflict(self) -> None:
        self.assertEqual(find_conflicts([_cand("A", 1, 3), _cand("B", 4, 6)]), [])

    def test_disjoint_date_spans_no_conflict(self) -> None:
        a = _cand("A", 1, 3)
        b = _cand("B", 1, 3, start="2026-02-02", end="2026-03-30")
        self.assertEqual(find_conflicts([a, b]), [])

    def test_afternoon_alias_periods_overlap(self) -> None:
        # 10-11 reads 13:20-15:00, 11-12 reads 14:10-16:00
        self.assertEqual(len(find_conflicts([_cand("A", 10, 11), _cand("B", 11, 12)])), 1)

    def test_single_dates_without_weekday(self) -> None:
        a = _cand("A", 13, 14, weekday=None, start="2025-11-20", end=None)
        b = _cand("B", 14, 15, weekday=None, start="2025-11-20", end=None)
        c = _cand("C", 14, 15, weekday=None, start="2025-11-21", end=None)
        self.assertEqual(len(find_conflicts([a, b, c])), 1)


if __name__ == "__main__":
    unittest.main()
