"""
Conflict detection.

Given extracted candidates, detect pairs that would overlap once confirmed.
Two candidates conflict when:
- they fall on the same day (same weekday, or same single date when neither has a weekday)
- their clock spans overlap: start < other_end AND end > other_start
- their date spans overlap (a missing date is treated as open-ended)
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from tkbscan.model import CandidateEvent
from tkbscan.periods import to_minutes


def _overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    return a_start < b_end and a_end > b_start


def _same_day(a: CandidateEvent, b: CandidateEvent) -> bool:
    if a.weekday is not None and b.weekday is not None:
        return a.weekday == b.weekday
    if a.weekday is None and b.weekday is None:
        return a.start_date is not None and a.start_date == b.start_date
    return False


def _span(c: CandidateEvent) -> Tuple[Optional[str], Optional[str]]:
    return c.start_date, c.end_date or c.start_date


def _dates_overlap(a: CandidateEvent, b: CandidateEvent) -> bool:
    a_start, a_end = _span(a)
    b_start, b_end = _span(b)
    if a_start and b_end and a_start > b_end:
        return False
    if b_start and a_end and b_start > a_end:
        return False
    return True


def find_conflicts(candidates: List[CandidateEvent]) -> List[Tuple[CandidateEvent, CandidateEvent]]:
    """
    Find overlapping candidate pairs (A,B), each pair appears once (i<j).
    """
    conflicts: List[Tuple[CandidateEvent, CandidateEvent]] = []

    parsed = [(c, to_minutes(c.start_time), to_minutes(c.end_time)) for c in candidates]

    # O(n^2) is fine for one student's timetable
    for i in range(len(parsed)):
        c1, s1, e1 = parsed[i]
        for j in range(i + 1, len(parsed)):
            c2, s2, e2 = parsed[j]
            if not _same_day(c1, c2):
                continue
            if _overlaps(s1, e1, s2, e2) and _dates_overlap(c1, c2):
                conflicts.append((c1, c2))

    return conflicts
