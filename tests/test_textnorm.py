import unittest

from tkbscan.textnorm import fold, fold_aligned, split_lines, strip_diacritics


class TestTextNorm(unittest.TestCase):
    def test_fold(self) -> None:
        self.assertEqual(fold("  Thứ   Hai "), "thu hai")
        self.assertEqual(strip_diacritics("Đà Nẵng"), "Da Nang")

    def test_fold_aligned_keeps_offsets(self) -> None:
        text = "Phòng học: Đ1.01  Bắt đầu"
        folded = fold_aligned(text)
        self.assertEqual(len(folded), len(text))
        pos = folded.index("d1.01")
        self.assertEqual(text[pos:pos + 5], "Đ1.01")

    def test_split_lines(self) -> None:
        self.assertEqual(split_lines("  a  b \n\n\t c\n"), ["a b", "c"])


if __name__ == "__main__":
    unittest.main()
