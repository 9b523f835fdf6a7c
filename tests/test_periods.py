"""
Unit tests for the period table.

Table contract:
- 16 periods, strictly increasing and non-overlapping
- periods 9..12 are an alias of 7..10
- out-of-range periods are clamped, reversed ranges swapped
"""

import unittest

from tkbscan.periods import (
    PERIOD_TIME,
    normalize_period,
    order_periods,
    period_end_nearest,
    period_range_times,
    period_start_nearest,
    to_slot,
    to_time,
)


SLOT_ORDER = {"morning": 0, "afternoon": 1, "evening": 2}


class TestPeriodTable(unittest.TestCase):
    def test_table_is_increasing_and_non_overlapping(self) -> None:
        self.assertEqual(len(PERIOD_TIME), 16)
        for prev, cur in zip(PERIOD_TIME, PERIOD_TIME[1:]):
            self.assertEqual(cur.index, prev.index + 1)
            self.assertLess(prev.start, prev.end)
            self.assertLessEqual(prev.end, cur.start)

    def test_afternoon_alias_is_exact(self) -> None:
        for p in range(9, 13):
            canonical = PERIOD_TIME[p - 3]
            self.assertEqual(to_time(p), (canonical.start, canonical.end))
        self.assertEqual(normalize_period(11), 9)
        self.assertEqual(normalize_period(13), 13)

    def test_out_of_range_is_clamped(self) -> None:
        self.assertEqual(to_time(0), to_time(1))
        self.assertEqual(to_time(-3), ("06:30", "07:20"))
        self.assertEqual(to_time(40), to_time(16))

    def test_reversed_range_is_swapped(self) -> None:
        self.assertEqual(order_periods(5, 2), (2, 5))
        self.assertEqual(period_range_times(3, 1), ("06:30", "09:00"))

    def test_slot_is_monotonic_in_last_period(self) -> None:
        slots = [SLOT_ORDER[to_slot(1, to)] for to in range(1, 17)]
        self.assertEqual(slots, sorted(slots))
        self.assertEqual(to_slot(1, 3), "morning")
        self.assertEqual(to_slot(7, 9), "afternoon")
        self.assertEqual(to_slot(10, 12), "afternoon")
        self.assertEqual(to_slot(13, 15), "evening")

    def test_range_times_non_decreasing_in_canonical_numbering(self) -> None:
        canonical = [p for p in range(1, 17) if not 9 <= p <= 12]
        starts = [to_time(p)[0] for p in canonical]
        ends = [to_time(p)[1] for p in canonical]
        self.assertEqual(starts, sorted(starts))
        self.assertEqual(ends, sorted(ends))

    def test_period_end_nearest(self) -> None:
        self.assertEqual(period_end_nearest("21:00"), 16)
        self.assertEqual(period_end_nearest("09:00"), 3)
        self.assertEqual(period_end_nearest("06:00"), 1)
        # later than any period end -> last period
        self.assertEqual(period_end_nearest("23:30"), 16)

    def test_period_start_nearest(self) -> None:
        self.assertEqual(period_start_nearest("12:45"), 9)
        self.assertEqual(period_start_nearest("14:10"), 11)
        self.assertEqual(period_start_nearest("22:00"), 16)
        # earlier than any period start -> first period
        self.assertEqual(period_start_nearest("05:00"), 1)

    def test_nearest_periods_follow_to_time(self) -> None:
        # periods 10 and 11 read the 13:20 and 14:10 rows
        self.assertEqual(period_start_nearest("13:30"), 10)
        self.assertEqual(to_time(10)[0], "13:20")
        self.assertEqual(period_end_nearest("15:00"), 11)
        self.assertEqual(to_time(11)[1], "15:00")

    def test_nearest_periods_give_positive_spans(self) -> None:
        for minutes in range(6 * 60, 22 * 60, 10):
            hhmm = f"{minutes // 60:02d}:{minutes % 60:02d}"
            start = period_start_nearest(hhmm)
            end = period_end_nearest(hhmm)
            self.assertLess(*period_range_times(start, min(16, start + 1)), hhmm)
            self.assertLess(*period_range_times(max(1, end - 1), end), hhmm)


if __name__ == "__main__":
    unittest.main()
