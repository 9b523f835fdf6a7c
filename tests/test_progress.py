"""
Unit tests for the progress-table parser ("Lịch học theo tiến độ").

Row contract:
- a candidate needs a weekday AND a "Tiết a-b" range
- fields spread over several OCR lines are collected into one candidate
- the most recent title line names the row
"""

import unittest

from tkbscan.model import DEFAULT_TITLE
from tkbscan.progress import parse_progress_table


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

ROW_B = "\n".join(
    [
        "Vật lý đại cương",
        "Thứ 4",
        "Tiết 7 - 9",
        "Bắt đầu 12/11/2025",
        "Kết thúc 31/12/2025",
        "Phòng C2.04",
    ]
)


class TestProgressTable(unittest.TestCase):
    def test_single_row_split_over_lines(self) -> None:
        cands = parse_progress_table(ROW_A)
        self.assertEqual(len(cands), 1)
        c = cands[0]
        self.assertEqual(c.title, "Toán cao cấp")
        self.assertEqual(c.weekday, 2)
        self.assertEqual((c.period_from, c.period_to), (1, 3))
        self.assertEqual((c.start_time, c.end_time), ("06:30", "09:00"))
        self.assertEqual(c.slot, "morning")
        self.assertEqual(c.location, "B302")
        self.assertEqual(c.start_date, "2025-11-10")
        self.assertEqual(c.end_date, "2025-12-29")

    def test_rows_do_not_bleed_into_each_other(self) -> None:
        cands = parse_progress_table(ROW_A + "\n" + ROW_B)
        self.assertEqual([c.title for c in cands], ["Toán cao cấp", "Vật lý đại cương"])

        second = cands[1]
        self.assertEqual(second.weekday, 4)
        self.assertEqual((second.period_from, second.period_to), (7, 9))
        self.assertEqual(second.slot, "afternoon")
        self.assertEqual(second.location, "C2.04")
        self.assertEqual(second.start_date, "2025-11-12")
        self.assertEqual(second.end_date, "2025-12-31")

    def test_repeated_row_is_emitted_once(self) -> None:
        cands = parse_progress_table(ROW_A + "\n" + ROW_A)
        self.assertEqual(len(cands), 1)

    def test_missing_title_uses_default(self) -> None:
        cands = parse_progress_table("Thứ 3\nTiết 5 - 2")
        self.assertEqual(len(cands), 1)
        self.assertEqual(cands[0].title, DEFAULT_TITLE)
        # reversed range is swapped
        self.assertEqual((cands[0].period_from, cands[0].period_to), (2, 5))
        self.assertIsNone(cands[0].start_date)

    def test_weekday_without_period_is_ignored(self) -> None:
        self.assertEqual(parse_progress_table("Toán cao cấp\nThứ 2\nPhòng B302"), [])

    def test_course_names_starting_with_cell_labels(self) -> None:
        row = ROW_A.replace("Toán cao cấp", "Thực hành mạng máy tính")
        row_b = ROW_B.replace("Vật lý đại cương", "Lý thuyết đồ thị")
        cands = parse_progress_table(row + "\n" + row_b)
        self.assertEqual([c.title for c in cands], ["Thực hành mạng máy tính", "Lý thuyết đồ thị"])
        self.assertEqual([c.weekday for c in cands], [2, 4])

    def test_label_only_lines_are_not_titles(self) -> None:
        cands = parse_progress_table("Toán cao cấp\nLý thuyết\nThứ 2\nTiết 1 - 3\nTuần 1")
        self.assertEqual(len(cands), 1)
        self.assertEqual(cands[0].title, "Toán cao cấp")

    def test_one_line_row_takes_title_from_first_cell(self) -> None:
        line = "Toán cao cấp | Thứ 2 | Tiết 1-3 | Bắt đầu 10/11/2025 | Kết thúc 29/12/2025 | Phòng B302"
        cands = parse_progress_table(line)
        self.assertEqual(len(cands), 1)
        c = cands[0]
        self.assertEqual(c.title, "Toán cao cấp")
        self.assertEqual(c.weekday, 2)
        self.assertEqual((c.period_from, c.period_to), (1, 3))
        self.assertEqual(c.location, "B302")
        self.assertEqual(c.start_date, "2025-11-10")
        self.assertEqual(c.end_date, "2025-12-29")

    def test_empty_text(self) -> None:
        self.assertEqual(parse_progress_table(""), [])


if __name__ == "__main__":
    unittest.main()
