"""
Lesson periods ("tiết") and their clock times.

A school day is split into 16 periods of 50 minutes. Some universities print
the afternoon block as periods 9-12 instead of 7-10; those are folded onto
the canonical numbering before any lookup.

Rules:
- periods outside 1..16 are clamped, never rejected
- reversed ranges are swapped
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class PeriodTime:
    """
    One row of the period table.
    """

    index: int
    start: str
    end: str


PERIOD_TIME: Tuple[PeriodTime, ...] = (
    PeriodTime(1, "06:30", "07:20"),
    PeriodTime(2, "07:20", "08:10"),
    PeriodTime(3, "08:10", "09:00"),
    PeriodTime(4, "09:10", "10:00"),
    PeriodTime(5, "10:00", "10:50"),
    PeriodTime(6, "10:50", "11:40"),
    PeriodTime(7, "12:30", "13:20"),
    PeriodTime(8, "13:20", "14:10"),
    PeriodTime(9, "14:10", "15:00"),
    PeriodTime(10, "15:10", "16:00"),
    PeriodTime(11, "16:00", "16:50"),
    PeriodTime(12, "16:50", "17:40"),
    PeriodTime(13, "18:00", "18:50"),
    PeriodTime(14, "18:50", "19:40"),
    PeriodTime(15, "19:40", "20:30"),
    PeriodTime(16, "20:30", "21:20"),
)

FIRST_PERIOD = 1
LAST_PERIOD = 16


def clamp_period(period: int) -> int:
    return max(FIRST_PERIOD, min(LAST_PERIOD, int(period)))


def normalize_period(period: int) -> int:
    """
    Fold the alternate afternoon numbering (9..12) onto 7..10.
    Out-of-range input is clamped first.
    """
    p = clamp_period(period)
    if 9 <= p <= 12:
        return p - 2
    return p


def order_periods(a: int, b: int) -> Tuple[int, int]:
    """
    Clamp both ends and return them as (from, to) with from <= to.
    """
    lo, hi = clamp_period(a), clamp_period(b)
    if lo > hi:
        lo, hi = hi, lo
    return lo, hi


def to_time(period: int) -> Tuple[str, str]:
    """
    Return (start, end) clock times of one period.
    """
    entry = PERIOD_TIME[normalize_period(period) - 1]
    return entry.start, entry.end


def period_range_times(period_from: int, period_to: int) -> Tuple[str, str]:
    """
    Clock span of a period range: start of the first, end of the last.
    """
    lo, hi = order_periods(period_from, period_to)
    return to_time(lo)[0], to_time(hi)[1]


def to_slot(period_from: int, period_to: int) -> str:
    """
    morning / afternoon / evening, decided by the (normalized) last period.
    """
    _, hi = order_periods(period_from, period_to)
    to = normalize_period(hi)
    if to <= 6:
        return "morning"
    if to <= 12:
        return "afternoon"
    return "evening"


def to_minutes(hhmm: str) -> int:
    h, m = hhmm.strip().split(":")
    return int(h) * 60 + int(m)


def period_end_nearest(hhmm: str) -> int:
    """
    Smallest period whose end, as to_time() reports it, is at or after the
    given time. Falls back to the last period.
    """
    target = to_minutes(hhmm)
    for period in range(FIRST_PERIOD, LAST_PERIOD + 1):
        if to_minutes(to_time(period)[1]) >= target:
            return period
    return LAST_PERIOD


def period_start_nearest(hhmm: str) -> int:
    """
    Largest period whose start, as to_time() reports it, is at or before the
    given time. Falls back to the first period.
    """
    target = to_minutes(hhmm)
    for period in range(LAST_PERIOD, FIRST_PERIOD - 1, -1):
        if to_minutes(to_time(period)[0]) <= target:
            return period
    return FIRST_PERIOD
