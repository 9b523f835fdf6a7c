"""
Parser for "Lịch học theo tiến độ" tables.

Each logical row carries a course title, a weekday, a "Tiết a-b" range,
start/end dates and a room. OCR often splits one row across several lines,
so every line opens a forward window of up to 12 lines.

Rules:
- a candidate needs a weekday AND a period range
- title: the cell before the weekday on a one-line row, else the most recent title line, else a title-looking line up to 5 lines back, else "Lich hoc"
- after a match the cursor advances by 2 lines
"""

from __future__ import annotations

import re
from typing import List, Optional, Set

from tkbscan.dates import RE_ANY_WEEKDAY, find_dates, parse_weekday_token
from tkbscan.model import DEFAULT_TITLE, CandidateEvent
from tkbscan.textnorm import count_digits, count_letters, fold_aligned, split_lines
from tkbscan.tokens import find_period_range, find_room, has_weekday, is_title_line


WINDOW_SIZE = 12
TITLE_LOOKBACK = 5
SEPARATOR = " | "

RE_START_KW = re.compile(r"\bbat\s*dau\b|\btu\s*ngay\b")
RE_END_KW = re.compile(r"\bket\s*thuc\b|\bden\s*ngay\b")
# cell boundary just before the weekday
RE_CELL_END = re.compile(r"(?:[|,;\t]|\s{2})\s*$")


def _build_window(lines: List[str], i: int) -> List[str]:
    """
    Lines i.. up to WINDOW_SIZE, cut before the next title line or before a
    second weekday line (both mean the next logical row has started).
    """
    window = [lines[i]]
    seen_weekday = has_weekday(lines[i])
    for j in range(i + 1, min(len(lines), i + WINDOW_SIZE)):
        line = lines[j]
        if is_title_line(line):
            break
        if has_weekday(line):
            if seen_weekday:
                break
            seen_weekday = True
        window.append(line)
    return window


def _date_after_keyword(folded: str, keyword: re.Pattern, start: int) -> Optional[str]:
    m = keyword.search(folded, start)
    if not m:
        return None
    dates = find_dates(folded[m.end():m.end() + 40])
    return dates[0] if dates else None


def _find_dates(folded: str, start: int) -> tuple[Optional[str], Optional[str]]:
    start_date = _date_after_keyword(folded, RE_START_KW, start)
    end_date = _date_after_keyword(folded, RE_END_KW, start)
    if start_date is None:
        dates = find_dates(folded[start:]) or find_dates(folded)
        if dates:
            start_date = dates[0]
            if end_date is None and len(dates) > 1 and dates[1] != dates[0]:
                end_date = dates[1]
    return start_date, end_date


def _backward_title(lines: List[str], i: int) -> Optional[str]:
    for j in range(i - 1, max(-1, i - 1 - TITLE_LOOKBACK), -1):
        line = lines[j]
        if count_letters(line) >= 3 and count_letters(line) > count_digits(line) and not has_weekday(line):
            return line
    return None


def parse_progress_table(text: str) -> List[CandidateEvent]:
    """
    Parse progress-table text into candidates (empty list when nothing matches).
    """
    lines = split_lines(text)
    out: List[CandidateEvent] = []
    seen: Set[tuple] = set()

    last_title: Optional[str] = None
    tracked = 0
    i = 0
    while i < len(lines):
        # Title tracking also covers lines skipped by the 2-line advance.
        while tracked <= i:
            if is_title_line(lines[tracked]):
                last_title = lines[tracked]
            tracked += 1

        window = _build_window(lines, i)
        window_text = SEPARATOR.join(window)
        folded = fold_aligned(window_text)

        wd = parse_weekday_token(folded)
        if wd is None:
            i += 1
            continue

        # Fields are looked up after the weekday first: the weekday opens the row.
        wd_pos = _weekday_position(folded)
        period = find_period_range(folded, wd_pos) or find_period_range(folded)
        if period is None:
            i += 1
            continue

        start_date, end_date = _find_dates(folded, wd_pos)
        location = find_room(window_text, folded, wd_pos) or find_room(window_text, folded)
        title = _inline_title(window, wd_pos) or last_title or _backward_title(lines, i) or DEFAULT_TITLE

        cand = CandidateEvent(
            title=title,
            weekday=wd[0],
            period_from=period[0],
            period_to=period[1],
            start_date=start_date,
            end_date=end_date,
            location=location,
        )
        key = cand.dedup_key()
        if key not in seen:
            seen.add(key)
            out.append(cand)
        i += 2

    return out


def _weekday_position(folded: str) -> int:
    m = RE_ANY_WEEKDAY.search(folded)
    return m.start() if m else 0


def _inline_title(window: List[str], pos: int) -> Optional[str]:
    """
    Text in front of the weekday on its own line, for one-line rows like
    "Toán cao cấp | Thứ 2 | Tiết 1-3".
    """
    offset = 0
    for line in window:
        end = offset + len(line)
        if pos < end:
            head = line[:pos - offset]
            if not RE_CELL_END.search(head):
                return None
            prefix = head.strip(" |,;:-\t")
            return prefix if prefix and is_title_line(prefix) else None
        offset = end + len(SEPARATOR)
    return None
