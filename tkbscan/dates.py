"""
Weekday and date token parsing.

Weekdays use the Vietnamese "Thứ" numbering: Thứ 2 (Monday) -> 2 ... Thứ 7
(Saturday) -> 7. "Chủ nhật" / "CN" also map to 7 (known overlap with Saturday;
parse_weekday_token() returns the label so callers can tell them apart).

Dates are returned as ISO strings (YYYY-MM-DD). Short dates (DD/MM) assume
the current year.
"""

from __future__ import annotations

import re
from datetime import date
from typing import List, Optional, Tuple

from tkbscan.textnorm import fold


SPELLED_WEEKDAYS = {
    "hai": 2,
    "ba": 3,
    "tu": 4,
    "nam": 5,
    "sau": 6,
    "bay": 7,
}

SUNDAY_LABEL = "Chủ nhật"

# "CN" counts as Sunday only as a cell of its own ("CN", "CN 16/02", "CN tuần sau");
# inside a name it abbreviates "công nghệ".
SUNDAY_PATTERN = r"\bchu\s*nhat\b|\bcn\b(?=\s*(?:$|[\d|,.:;()/\-]|tiet\b|tuan\b))"
WEEKDAY_PATTERN = r"\bthu\s*(?:[2-7]|hai|ba|tu|nam|sau|bay)\b|" + SUNDAY_PATTERN

RE_THU_NUM = re.compile(r"\bthu\s*([2-7])\b")
RE_THU_NAME = re.compile(r"\bthu\s*(hai|ba|tu|nam|sau|bay)\b")
RE_SUNDAY = re.compile(SUNDAY_PATTERN)
RE_ANY_WEEKDAY = re.compile(WEEKDAY_PATTERN)

RE_DMY = re.compile(r"(?<!\d)(\d{1,2})\s*[/.\-]\s*(\d{1,2})\s*[/.\-]\s*(\d{4})(?!\d)")
RE_YMD = re.compile(r"(?<!\d)(\d{4})-(\d{1,2})-(\d{1,2})(?!\d)")
RE_DM = re.compile(r"(?<![\d/])(\d{1,2})/(\d{1,2})(?![\d/])")


def weekday_label(weekday: int, sunday: bool = False) -> str:
    if sunday:
        return SUNDAY_LABEL
    return f"Thứ {weekday}"


def parse_weekday_token(text: str | None) -> Optional[Tuple[int, str]]:
    """
    Return (weekday, label) for the first weekday token, or None.

    Order: numeric "Thứ N", spelled-out "Thứ Hai".."Thứ Bảy", then "Chủ nhật"/"CN".
    """
    t = fold(text)
    if not t:
        return None

    m = RE_THU_NUM.search(t)
    if m:
        n = int(m.group(1))
        return n, weekday_label(n)

    m = RE_THU_NAME.search(t)
    if m:
        n = SPELLED_WEEKDAYS[m.group(1)]
        return n, weekday_label(n)

    if RE_SUNDAY.search(t):
        return 7, SUNDAY_LABEL

    return None


def parse_weekday(text: str | None) -> Optional[int]:
    """
    Parse a Vietnamese weekday token. Returns 2..7 or None (never raises).
    """
    found = parse_weekday_token(text)
    return found[0] if found else None


def to_iso(year: int, month: int, day: int) -> Optional[str]:
    """
    Zero-padded ISO date, or None when the date does not exist.
    """
    try:
        return date(int(year), int(month), int(day)).isoformat()
    except ValueError:
        return None


def parse_date(text: str | None, today: Optional[date] = None) -> Optional[str]:
    """
    Parse the first date in text.

    Tried in order: DD/MM/YYYY, YYYY-MM-DD, DD/MM (current year).
    """
    t = text or ""

    for m in RE_DMY.finditer(t):
        iso = to_iso(int(m.group(3)), int(m.group(2)), int(m.group(1)))
        if iso:
            return iso

    for m in RE_YMD.finditer(t):
        iso = to_iso(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        if iso:
            return iso

    year = (today or date.today()).year
    for m in RE_DM.finditer(t):
        iso = to_iso(year, int(m.group(2)), int(m.group(1)))
        if iso:
            return iso

    return None


def find_dates(text: str | None) -> List[str]:
    """
    All full dates (DD/MM/YYYY or YYYY-MM-DD) in order of appearance.
    """
    t = text or ""
    found: List[Tuple[int, str]] = []

    for m in RE_DMY.finditer(t):
        iso = to_iso(int(m.group(3)), int(m.group(2)), int(m.group(1)))
        if iso:
            found.append((m.start(), iso))

    for m in RE_YMD.finditer(t):
        iso = to_iso(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        if iso:
            found.append((m.start(), iso))

    found.sort(key=lambda x: x[0])
    return [iso for _, iso in found]
