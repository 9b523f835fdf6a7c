"""
Direct extraction: last-resort line scanner.

Used when no table parser recognized anything. Any short run of lines
(up to 3) holding a time range (period range or clock range) together with
a date or a weekday becomes a candidate.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Set

from tkbscan.dates import parse_date, parse_weekday_token
from tkbscan.model import DEFAULT_TITLE, CandidateEvent
from tkbscan.periods import period_end_nearest, period_start_nearest
from tkbscan.textnorm import fold_aligned, split_lines
from tkbscan.tokens import find_clock_range, find_period_range, find_room, is_title_line


WINDOW_SIZE = 3
TITLE_LOOKBACK = 3
SEPARATOR = " | "


def _title_for(lines: List[str], i: int, last: int) -> str:
    for j in range(i, last + 1):
        if is_title_line(lines[j]):
            return lines[j]
    for j in range(i - 1, max(-1, i - 1 - TITLE_LOOKBACK), -1):
        if is_title_line(lines[j]):
            return lines[j]
    return DEFAULT_TITLE


def parse_direct(text: str, today: Optional[date] = None) -> List[CandidateEvent]:
    lines = split_lines(text)
    out: List[CandidateEvent] = []
    seen: Set[tuple] = set()

    i = 0
    while i < len(lines):
        chunk = lines[i:i + WINDOW_SIZE]
        window = SEPARATOR.join(chunk)
        folded = fold_aligned(window)

        notes = None
        anchor = 0
        period = find_period_range(folded)
        if period is not None:
            p_from, p_to, anchor = period
        else:
            clock = find_clock_range(folded)
            if clock is None:
                i += 1
                continue
            start_clock, end_clock, anchor = clock
            p_from, p_to = period_start_nearest(start_clock), period_end_nearest(end_clock)
            notes = f"{start_clock}-{end_clock}"

        day = parse_date(window, today=today)
        wd = parse_weekday_token(folded)
        if day is None and wd is None:
            i += 1
            continue

        # The line carrying the time range closes this match.
        range_line = i + folded[:max(anchor, 0)].count(SEPARATOR)
        cand = CandidateEvent(
            title=_title_for(lines, i, range_line),
            weekday=wd[0] if wd else None,
            period_from=p_from,
            period_to=p_to,
            start_date=day,
            location=find_room(window, folded),
            notes=notes,
        )
        key = cand.dedup_key()
        if key not in seen:
            seen.add(key)
            out.append(cand)
        i = range_line + 1

    return out
