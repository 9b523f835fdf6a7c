"""
Weekly block assembler for photographed timetables.

Image OCR of a week view yields day headers ("Thứ 2 10/02/2025") followed by
loosely ordered event lines. Lines are buffered per day; every line starting
with a period marker ("Tiết 1 - 3") opens an event whose title is picked by
scoring the surrounding lines.

Without any day header the whole text becomes one block labelled "Tất cả".
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from tkbscan.dates import RE_ANY_WEEKDAY, find_dates, parse_weekday_token
from tkbscan.model import CandidateEvent, WeekdayBlock
from tkbscan.textnorm import count_digits, count_letters, fold, fold_aligned, split_lines
from tkbscan.tokens import RE_TIET_RANGE, valid_period_pair


ALL_DAYS_LABEL = "Tất cả"
FALLBACK_TITLE = "Môn học"
HEADER_DATE_LOOKAHEAD = 2

RE_META = re.compile(r"^(?:tiet|phong|gv|giang vien|ghi chu)\b")
RE_PERIOD_PAIR = re.compile(r"(\d{1,2})\s*(?:-|–|—)\s*(\d{1,2})")
RE_CODEY = re.compile(r"^[A-Z0-9\-]{6,}$")
RE_LONG_DIGITS = re.compile(r"^\d{6,}")

LABEL_PREFIXES = {
    "location": re.compile(r"^phong(?:\s*hoc)?\s*:?\s*"),
    "lecturer": re.compile(r"^(?:gv|giang vien)\s*:?\s*"),
    "notes": re.compile(r"^ghi chu\s*:?\s*"),
}


@dataclass
class _Day:
    weekday: int
    label: str
    date: Optional[str]
    lines: List[str] = field(default_factory=list)


def _is_meta(line: str) -> bool:
    return RE_META.match(fold(line)) is not None


def _is_codey(line: str) -> bool:
    t = line.strip()
    if RE_CODEY.match(t) or RE_LONG_DIGITS.match(t):
        return True
    return count_digits(t) > count_letters(t) * 1.5


def choose_title(lines: List[str]) -> str:
    """
    Prefer natural-language course names over codes: skip label lines and
    code-looking lines, then take the line with the best letters-minus-digits score.
    """
    candidates = [s for s in lines if s and not _is_meta(s) and not _is_codey(s)]
    if not candidates:
        fallback = next((s for s in lines if s and not _is_meta(s)), None)
        return fallback.strip() if fallback else FALLBACK_TITLE
    best = max(candidates, key=lambda s: count_letters(s) - count_digits(s))
    return best.strip()


def _day_header(lines: List[str], i: int) -> Optional[_Day]:
    line = lines[i]
    if RE_TIET_RANGE.search(fold_aligned(line)):
        return None
    # a day header opens with its weekday
    if not RE_ANY_WEEKDAY.match(fold(line)):
        return None
    found = parse_weekday_token(line)
    if found is None:
        return None
    weekday, label = found

    dates = find_dates(line)
    if not dates:
        for k in range(1, HEADER_DATE_LOOKAHEAD + 1):
            if i + k < len(lines):
                dates = find_dates(lines[i + k])
                if dates:
                    break
    return _Day(weekday=weekday, label=label, date=dates[0] if dates else None)


def _periods(line: str) -> Optional[Tuple[int, int]]:
    f = fold(line)
    if not f.startswith("tiet"):
        return None
    m = RE_PERIOD_PAIR.search(f)
    if not m:
        return None
    return valid_period_pair(int(m.group(1)), int(m.group(2)))


def _labelled(seg: List[str], kind: str) -> Optional[str]:
    prefix = LABEL_PREFIXES[kind]
    for line in seg:
        m = prefix.match(fold_aligned(line))
        if m:
            value = line[m.end():].strip()
            return value or None
    return None


def _events_in(buf: List[str], weekday: Optional[int], day_date: Optional[str]) -> List[CandidateEvent]:
    tiet = [(i, p) for i, p in ((i, _periods(line)) for i, line in enumerate(buf)) if p]

    # Each block starts at the title line above its "Tiết" line.
    starts: List[int] = []
    for ti, _ in tiet:
        title_idx = ti - 1
        while title_idx >= 0 and _is_meta(buf[title_idx]):
            title_idx -= 1
        if title_idx < 0:
            title_idx = ti - 1
        starts.append(max(0, title_idx))

    events: List[CandidateEvent] = []
    for k, (ti, period) in enumerate(tiet):
        start = starts[k]
        end = max(ti, starts[k + 1] - 1) if k + 1 < len(tiet) else len(buf) - 1
        seg = buf[start:end + 1]

        seg_dates = find_dates(" ".join(buf[j] for j in range(start, end + 1) if j != ti))
        seg_weekday = weekday
        if seg_weekday is None:
            found = parse_weekday_token(" ".join(seg))
            seg_weekday = found[0] if found else None

        events.append(
            CandidateEvent(
                title=choose_title(seg),
                weekday=seg_weekday,
                period_from=period[0],
                period_to=period[1],
                start_date=seg_dates[0] if seg_dates else day_date,
                location=_labelled(seg, "location"),
                lecturer=_labelled(seg, "lecturer"),
                notes=_labelled(seg, "notes"),
            )
        )
    return events


def parse_weekly_blocks(text: str) -> List[WeekdayBlock]:
    """
    Group "Tiết a-b" events under their day headers.
    """
    lines = split_lines(text)
    days: List[_Day] = []
    current: Optional[_Day] = None

    for i, line in enumerate(lines):
        header = _day_header(lines, i)
        if header is not None:
            current = header
            days.append(current)
            continue
        if current is None:
            continue
        # The header's own date line, read by _day_header() already.
        if not current.lines and current.date and count_letters(line) == 0 and current.date in find_dates(line):
            continue
        current.lines.append(line)

    blocks = [
        WeekdayBlock(weekday=d.weekday, label=d.label, date=d.date, events=_events_in(d.lines, d.weekday, d.date))
        for d in days
    ]

    if not blocks or not any(b.events for b in blocks):
        # 0 = not tied to a single day
        return [WeekdayBlock(weekday=0, label=ALL_DAYS_LABEL, date=None, events=_events_in(lines, None, None))]

    return blocks


def blocks_to_candidates(blocks: List[WeekdayBlock]) -> List[CandidateEvent]:
    out: List[CandidateEvent] = []
    for block in blocks:
        out.extend(block.events)
    return out


def parse_weekly(text: str) -> List[CandidateEvent]:
    return blocks_to_candidates(parse_weekly_blocks(text))
