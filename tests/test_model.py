"""
Unit tests for the candidate event model.
"""

import unittest

from tkbscan.model import DEFAULT_TITLE, CandidateEvent


class TestCandidateEvent(unittest.TestCase):
    def test_periods_clamped_and_ordered(self) -> None:
        c = CandidateEvent(title="  ", period_from=20, period_to=0)
        self.assertEqual((c.period_from, c.period_to), (1, 16))
        self.assertEqual(c.title, DEFAULT_TITLE)

    def test_derived_times(self) -> None:
        c = CandidateEvent(title="Lab", period_from=10, period_to=12)
        # 9..12 is an alias of 7..10
        self.assertEqual((c.start_time, c.end_time), ("13:20", "16:00"))
        self.assertEqual(c.slot, "afternoon")

    def test_event_form_repeats_weekly_over_date_span(self) -> None:
        c = CandidateEvent(
            title="Toán cao cấp",
            period_from=1,
            period_to=3,
            weekday=2,
            start_date="2025-11-10",
            end_date="2025-12-29",
            location="B302",
        )
        form = c.to_event_form()
        self.assertEqual(form["date"], "2025-11-10")
        self.assertEqual((form["startTime"], form["endTime"]), ("06:30", "09:00"))
        self.assertEqual(form["repeat"], {"frequency": "weekly", "endMode": "onDate", "endDate": "2025-12-29"})

        single = CandidateEvent(title="Thi", period_from=1, period_to=2, start_date="2025-12-01")
        self.assertNotIn("repeat", single.to_event_form())


class TestFromDict(unittest.TestCase):
    def test_camel_case_and_periods_object(self) -> None:
        c = CandidateEvent.from_dict(
            {
                "title": "Toán",
                "weekday": "Thứ 3",
                "periods": {"from": 4, "to": 6},
                "startDate": "10/11/2025",
                "room": "B302",
            }
        )
        self.assertEqual(c.weekday, 3)
        self.assertEqual((c.period_from, c.period_to), (4, 6))
        self.assertEqual(c.start_date, "2025-11-10")
        self.assertEqual(c.location, "B302")

    def test_clock_times_mapped_to_periods(self) -> None:
        c = CandidateEvent.from_dict({"title": "Họp", "startTime": "07:30", "endTime": "09:00"})
        self.assertEqual((c.period_from, c.period_to), (2, 3))

    def test_reversed_string_periods(self) -> None:
        c = CandidateEvent.from_dict({"title": "A", "period_from": "5", "period_to": "2"})
        self.assertEqual((c.period_from, c.period_to), (2, 5))

    def test_unresolvable_records(self) -> None:
        self.assertIsNone(CandidateEvent.from_dict({"title": "no time"}))
        self.assertIsNone(CandidateEvent.from_dict({"title": "bad", "startTime": "later"}))
        self.assertIsNone(CandidateEvent.from_dict("not a dict"))

    def test_to_dict_roundtrip(self) -> None:
        c = CandidateEvent(title="Vật lý", period_from=7, period_to=9, weekday=4, code="4203003260", mode="Thực hành")
        self.assertEqual(CandidateEvent.from_dict(c.to_dict()), c)


if __name__ == "__main__":
    unittest.main()
