"""
Tests for the end-to-end extraction pipeline.

Pipeline contract:
- strategies run in a fixed order, the first non-empty result wins
- parser output precedes AI candidates, so parser records win dedup
- the same input always gives the same output
"""

import unittest
from datetime import date

from tkbscan.model import CandidateEvent
from tkbscan.pipeline import (
    build_strategies,
    dedup_candidates,
    extract_candidates,
)


ROW_A = "\n".join(
    [
        "Toán cao cấp",
        "Thứ 2",
        "Tiết 1 - 3",
        "Bắt đầu 10/11/2025",
        "Kết thúc 29/12/2025",
        "Phòng B302",
    ]
)

NOW = date(2025, 11, 3)


class TestStrategies(unittest.TestCase):
    def test_order(self) -> None:
        self.assertEqual(
            [s.name for s in build_strategies("pdf")],
            ["progress-table", "credit-schedule", "credit-dense", "credit-pairs", "weekly-blocks", "direct"],
        )
        self.assertEqual([s.name for s in build_strategies("image")], ["weekly-blocks", "progress-table", "direct"])

    def test_unknown_source(self) -> None:
        with self.assertRaises(ValueError):
            build_strategies("scanner")

    def test_attempt_returns_none_when_empty(self) -> None:
        self.assertIsNone(build_strategies("pdf")[0].attempt("xin chào"))


class TestExtractCandidates(unittest.TestCase):
    def test_progress_table(self) -> None:
        result = extract_candidates(ROW_A, now=NOW)
        self.assertEqual(result.strategy, "progress-table")
        self.assertEqual(len(result.candidates), 1)
        self.assertEqual(result.candidates[0].title, "Toán cao cấp")
        self.assertIsNone(result.resolution)

    def test_duplicate_ocr_pass_collapses(self) -> None:
        result = extract_candidates(ROW_A + "\n" + ROW_A, now=NOW)
        self.assertEqual(len(result.candidates), 1)

    def test_deterministic(self) -> None:
        a = extract_candidates(ROW_A, prompt="Nộp bài lúc 21:00", now=NOW).to_dict()
        b = extract_candidates(ROW_A, prompt="Nộp bài lúc 21:00", now=NOW).to_dict()
        self.assertEqual(a, b)

    def test_credit_schedule_fallback(self) -> None:
        text = "4203003260 Cấu trúc dữ liệu\nTiết 7-9 Phòng học: C1.02\nBắt đầu: 12/11/2025 Kết thúc: 31/12/2025"
        result = extract_candidates(text, now=NOW)
        self.assertEqual(result.strategy, "credit-schedule")
        self.assertEqual(result.candidates[0].code, "4203003260")

    def test_dense_fallback(self) -> None:
        text = "4203003259 Anh văn 1 1-3 Lý thuyết A1.01 10/11/2025 29/12/2025"
        result = extract_candidates(text, now=NOW)
        self.assertEqual(result.strategy, "credit-dense")
        self.assertEqual(result.candidates[0].title, "Anh văn 1")

    def test_direct_fallback(self) -> None:
        result = extract_candidates("Họp khoa\n15/11/2025 08:00 - 10:00", now=NOW)
        self.assertEqual(result.strategy, "direct")
        self.assertEqual(result.candidates[0].start_date, "2025-11-15")

    def test_image_source_prefers_day_blocks(self) -> None:
        text = "Thứ 2 10/02/2025\nToán cao cấp\nTiết 1 - 3\nThứ 4 12/02/2025\nCơ sở dữ liệu\nTiết 4 - 6"
        result = extract_candidates(text, source="image", now=NOW)
        self.assertEqual(result.strategy, "weekly-blocks")
        self.assertEqual([c.weekday for c in result.candidates], [2, 4])

    def test_parser_wins_over_ai_duplicate(self) -> None:
        ai = [
            {
                "title": "Toán cao cấp",
                "weekday": 2,
                "periods": {"from": 1, "to": 3},
                "startDate": "2025-11-10",
                "endDate": "2025-12-29",
                "location": "B302",
                "lecturer": "AI lecturer",
            }
        ]
        result = extract_candidates(ROW_A, ai_candidates=ai, now=NOW)
        self.assertEqual(len(result.candidates), 1)
        self.assertIsNone(result.candidates[0].lecturer)

    def test_ai_only_and_invalid_records(self) -> None:
        ai = [
            {"title": "Seminar", "startTime": "13:30", "endTime": "15:00", "date": "20/11/2025"},
            {"title": "no time"},
        ]
        result = extract_candidates("", ai_candidates=ai, now=NOW)
        self.assertIsNone(result.strategy)
        self.assertEqual(len(result.candidates), 1)
        self.assertEqual(result.candidates[0].title, "Seminar")
        self.assertEqual(result.candidates[0].start_date, "2025-11-20")

    def test_prompt_overlay_on_ai_candidate(self) -> None:
        result = extract_candidates(
            "",
            ai_candidates=[CandidateEvent(title="Báo cáo", period_from=1, period_to=1)],
            prompt="Nộp báo cáo lúc 21:00 ngày 10/11/2025",
            now=NOW,
        )
        c = result.candidates[0]
        self.assertEqual((c.period_from, c.period_to), (15, 16))
        self.assertEqual(c.start_date, "2025-11-10")
        self.assertEqual(result.resolution.mode, "due")

    def test_empty_input(self) -> None:
        result = extract_candidates("", now=NOW)
        self.assertEqual(result.candidates, [])
        self.assertIsNone(result.strategy)


class TestDedup(unittest.TestCase):
    def test_idempotent_and_order_preserving(self) -> None:
        a = CandidateEvent(title="A", period_from=1, period_to=3, weekday=2)
        b = CandidateEvent(title="B", period_from=4, period_to=6, weekday=2)
        a_other_notes = CandidateEvent(title="A", period_from=1, period_to=3, weekday=2, notes="x")
        once = dedup_candidates([a, b, a_other_notes])
        self.assertEqual(once, [a, b])
        self.assertEqual(dedup_candidates(once), once)


if __name__ == "__main__":
    unittest.main()
