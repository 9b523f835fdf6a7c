"""
Relative day / week phrases -> absolute ISO date.

Supported:
- "hôm nay" (0), "ngày mai" (+1), "ngày kia" / "ngày mốt" (+2)
- "<weekday> [tuần này | tuần sau]", e.g. "thứ 7 tuần sau"

Returns None when no relative marker is present; callers treat that as
"no override".
"""

from __future__ import annotations

import re
from datetime import date, timedelta
from typing import Optional

from tkbscan.dates import RE_SUNDAY, SPELLED_WEEKDAYS
from tkbscan.textnorm import fold


DAY_SHIFTS = (
    (re.compile(r"\b(?:hom\s*nay|today)\b"), 0),
    (re.compile(r"\b(?:ngay\s*mai|tomorrow)\b"), 1),
    (re.compile(r"\bngay\s*(?:kia|mot)\b"), 2),
)

RE_THU = re.compile(r"\bthu\s*([2-7]|hai|ba|tu|nam|sau|bay)\b")
RE_NEXT_WEEK = re.compile(r"\btuan\s*(?:sau|toi)\b")
RE_THIS_WEEK = re.compile(r"\btuan\s*nay\b")


def _target_iso_weekday(t: str) -> Optional[int]:
    """
    ISO weekday (Mon=1 .. Sun=7) named in the text; "Thứ N" is ISO N-1.
    """
    m = RE_THU.search(t)
    if m:
        token = m.group(1)
        n = int(token) if token.isdigit() else SPELLED_WEEKDAYS[token]
        return n - 1
    if RE_SUNDAY.search(t):
        return 7
    return None


def resolve_relative_date(text: str | None, now: Optional[date] = None) -> Optional[str]:
    t = fold(text)
    if not t:
        return None
    base = now or date.today()

    for pattern, shift in DAY_SHIFTS:
        if pattern.search(t):
            return (base + timedelta(days=shift)).isoformat()

    target = _target_iso_weekday(t)
    if target is None:
        return None

    delta = (target - base.isoweekday() + 7) % 7
    if RE_NEXT_WEEK.search(t):
        delta += 7
    # "tuần này" on the same weekday stays today (delta == 0).
    return (base + timedelta(days=delta)).isoformat()
