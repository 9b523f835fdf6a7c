"""
Token matchers shared by the table parsers.

All matchers run on text produced by textnorm.fold_aligned(), so a match
span can be used to slice the original (diacritic-bearing) text.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from tkbscan.dates import RE_DMY, parse_weekday_token
from tkbscan.periods import FIRST_PERIOD, LAST_PERIOD
from tkbscan.textnorm import count_digits, count_letters, fold, fold_aligned


RE_TIET_RANGE = re.compile(r"\btiet\s*(?:hoc)?\s*[:.]?\s*(\d{1,2})\s*(?:-|–|—|den|->)\s*(\d{1,2})(?!\d)")
RE_BARE_RANGE = re.compile(r"(?<![\d/.:\-])(\d{1,2})\s*(?:-|–|—)\s*(\d{1,2})(?![\d/.:\-])")
RE_CLOCK_RANGE = re.compile(r"(?<!\d)(\d{1,2})\s*[:hg]\s*(\d{2})\s*(?:-|–|—|den)\s*(\d{1,2})\s*[:hg]\s*(\d{2})(?!\d)")

ROOM_PATTERNS = (
    re.compile(r"\bphong(?:\s*hoc)?\s*[:\-]?\s*([a-z]{1,2}\d{0,2}[.\-]?\d{2,3}[a-z]?)\b"),
    re.compile(r"\b([a-z]\d{1,2}[.\-]\d{2,3})\b"),
    re.compile(r"\b([a-z]{1,2}\d{3}[a-z]?)\b"),
    re.compile(r"\b(truc tuyen|online)\b"),
)

# Folded prefixes of table header lines; never course titles.
HEADER_KEYWORDS = (
    "lich hoc",
    "lich thi",
    "thoi khoa bieu",
    "stt",
    "ma hp",
    "ma mon",
    "ma lop",
    "ten hoc phan",
    "ten mon",
    "so tc",
    "so tin chi",
    "bat dau",
    "ket thuc",
    "giang vien",
    "gv",
    "ghi chu",
    "thoi gian",
    "dia diem",
    "hoc ky",
    "nam hoc",
)

# Cell labels that also start real course names ("Lý thuyết đồ thị"):
# a header only when the rest of the line carries no words.
LABEL_KEYWORDS = (
    "ly thuyet",
    "thuc hanh",
    "truc tuyen",
    "tin chi",
    "thu",
    "tiet",
    "phong",
    "ngay",
    "tuan",
)


def valid_period_pair(a: int, b: int) -> Optional[Tuple[int, int]]:
    if not (FIRST_PERIOD <= a <= LAST_PERIOD and FIRST_PERIOD <= b <= LAST_PERIOD):
        return None
    return (a, b) if a <= b else (b, a)


def find_period_range(folded: str, start: int = 0, allow_bare: bool = True) -> Optional[Tuple[int, int, int]]:
    """
    First "Tiết a-b" range at or after `start` (or a bare "a-b" pair when allowed).

    Returns (from, to, position) with from <= to, or None.
    """
    for m in RE_TIET_RANGE.finditer(folded, start):
        pair = valid_period_pair(int(m.group(1)), int(m.group(2)))
        if pair:
            return pair[0], pair[1], m.start()
    if allow_bare:
        for m in RE_BARE_RANGE.finditer(folded, start):
            pair = valid_period_pair(int(m.group(1)), int(m.group(2)))
            if pair:
                return pair[0], pair[1], m.start()
    return None


def iter_period_ranges(folded: str) -> List[Tuple[int, int, int]]:
    """
    Every valid "Tiết a-b" range as (from, to, position); bare "a-b" pairs
    only when the text has no "Tiết" range at all.
    """
    found: List[Tuple[int, int, int]] = []
    for pattern in (RE_TIET_RANGE, RE_BARE_RANGE):
        for m in pattern.finditer(folded):
            pair = valid_period_pair(int(m.group(1)), int(m.group(2)))
            if pair:
                found.append((pair[0], pair[1], m.start()))
        if found:
            break
    return found


def find_clock_range(folded: str) -> Optional[Tuple[str, str, int]]:
    """
    First "HH:MM - HH:MM" (or 7h30-9h00) range as (start, end, position),
    clock strings zero-padded.
    """
    for m in RE_CLOCK_RANGE.finditer(folded):
        h1, m1, h2, m2 = (int(g) for g in m.groups())
        if 0 <= h1 <= 23 and 0 <= h2 <= 23 and m1 <= 59 and m2 <= 59:
            return f"{h1:02d}:{m1:02d}", f"{h2:02d}:{m2:02d}", m.start()
    return None


def find_room(original: str, folded: Optional[str] = None, start: int = 0) -> Optional[str]:
    """
    Room code like B302, C2.04, A1-203, or "Trực tuyến", sliced from the original text.
    """
    f = folded if folded is not None else fold_aligned(original)
    for pattern in ROOM_PATTERNS:
        m = pattern.search(f, start)
        if m:
            return original[m.start(1):m.end(1)].strip()
    return None


def has_weekday(line: str) -> bool:
    return parse_weekday_token(line) is not None


def is_header_line(line: str) -> bool:
    t = fold(line)
    for kw in HEADER_KEYWORDS:
        if t == kw or t.startswith(kw + " ") or t.startswith(kw + ":"):
            return True
    for kw in LABEL_KEYWORDS:
        if t == kw or t.startswith(kw + ":"):
            return True
        if t.startswith(kw + " ") and count_letters(t[len(kw):]) == 0:
            return True
    return False


def is_title_line(line: str) -> bool:
    """
    A course-title-looking line: at least 3 letters, more letters than digits,
    not a header/label, and not carrying weekday, period, date or room data.
    """
    letters = count_letters(line)
    if letters < 3 or letters <= count_digits(line):
        return False
    if is_header_line(line) or has_weekday(line):
        return False
    f = fold_aligned(line)
    if RE_TIET_RANGE.search(f) or RE_DMY.search(line):
        return False
    if ROOM_PATTERNS[0].search(f) or ROOM_PATTERNS[3].search(f):
        return False
    return True
