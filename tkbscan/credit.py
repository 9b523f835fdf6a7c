"""
Parser for credit-schedule PDF exports ("lịch học tín chỉ").

A row holds course code (6+ digits), course name, credit count, mode
(Lý thuyết / Thực hành), weekday, "Tiết a-b", room, a start/end date pair
and the lecturer. PDF text extraction splits rows unpredictably, so:

1. parse_credit_schedule(): line pass. Course headers are recognized with
   four patterns (STT CODE NAME, CODE NAME CREDITS, CODE NAME, standalone
   CODE); every "Tiết a-b" line is an anchor whose fields are collected
   from a small window of neighbouring lines.
2. parse_credit_dense(): one regex over the flattened text, for extractors
   that drop every line break.
3. parse_credit_pairs(): pairs date pairs with the nearest period range
   by character position.

Known limitations:
- a trailing number after a course name stays in the name ("Anh văn 1")
  unless a second number follows it or it is marked "(3)" / "3 TC"
- a glued "CODE+NAME" token keeps the whole leading digit run as code
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Set, Tuple, TypeVar

from tkbscan.dates import find_dates, parse_weekday_token
from tkbscan.model import DEFAULT_TITLE, CandidateEvent
from tkbscan.textnorm import collapse_ws, count_letters, fold_aligned, split_lines
from tkbscan.tokens import find_period_range, find_room, iter_period_ranges, valid_period_pair


T = TypeVar("T")

# Where a course name ends: schedule keywords, a bare period range, or a date.
# "thi", "tiết" and "phòng" also start ordinary words ("Thí nghiệm", "Tiết kiệm
# năng lượng"), so they need a label colon or a value after them.
RE_MARKER = re.compile(
    r"\b(?:(?P<mode>ly\s*thuyet|thuc\s*hanh)|lich\s*thi|thu\s*[2-7]|thu\s*(?:hai|ba|tu|nam|sau|bay)"
    r"|chu\s*nhat|bat\s*dau|ket\s*thuc|giang\s*vien|gv)\b"
    r"|\b(?:thi|tiet(?:\s*hoc)?|phong(?:\s*hoc)?)\s*:"
    r"|\bphong\s+[a-z]{0,2}\d"
    r"|\btiet\s*(?:hoc)?\s*[.]?\s*\d"
    r"|(?<![\d/])\d{1,2}\s*-\s*\d{1,2}(?![\d/])"
    r"|\d{1,2}/\d{1,2}/\d{4}"
)

RE_STT_CODE = re.compile(r"^(\d{1,3})[.)]?\s+(\d{6,})\s*(?=[^\W\d_])")
RE_CODE_NAME = re.compile(r"(?<![\d/.])(\d{6,})\s*(?=[^\W\d_])")
RE_CODE_ALONE = re.compile(r"^(?:\d{1,3}[.)]?\s+)?(\d{6,})(?![\d/.])")

RE_CREDITS_PAREN = re.compile(r"\s*\((\d{1,2})\)\s*$")
RE_CREDITS_TC = re.compile(r"\s+(\d{1,2})\s*(?:tc|tin\s*chi)\s*$")
RE_CREDITS_TWO = re.compile(r"(\s\d{1,2})\s+(\d{1,2})$")

RE_START_KW = re.compile(r"\bbat\s*dau\b")
RE_END_KW = re.compile(r"\bket\s*thuc\b")
RE_ROOM_LABEL = re.compile(r"\bphong(?:\s*hoc)?\s*:?\s*([^\s|,;]+)")
RE_LECTURER = re.compile(r"\b(?:giang\s*vien|gv)\s*:?\s*")
RE_MODE = re.compile(r"\b(ly\s*thuyet|thuc\s*hanh)\b")

MODE_LABELS = {"ly thuyet": "Lý thuyết", "thuc hanh": "Thực hành"}

CONTINUATION_LINES = 3
BACK_WINDOW = 2
FORWARD_WINDOW = 4
NEIGHBORHOOD = 2


@dataclass(frozen=True)
class CourseHeader:
    code: Optional[str]
    name: str
    credits: Optional[int]


# ---------------------------------------------------------------------------
# Course code / name segmentation
# ---------------------------------------------------------------------------


def _segment(original: str, folded: str, start: int) -> Tuple[str, bool]:
    """
    Text from `start` up to the first marker. Second value: whether a marker was hit.

    A mode word opening the segment is part of the name when more words
    follow before the next marker ("Lý thuyết đồ thị", "Thực hành mạng máy tính").
    """
    pos = start
    while True:
        m = RE_MARKER.search(folded, pos)
        if m is None:
            return original[start:], False
        if m.group("mode") and not folded[start:m.start()].strip():
            nxt = RE_MARKER.search(folded, m.end())
            if count_letters(folded[m.end():nxt.start() if nxt else len(folded)]):
                pos = m.end()
                continue
        return original[start:m.start()], True


def split_credits(name: str) -> Tuple[str, Optional[int]]:
    """
    Separate a trailing credit count from a course name.

    "Anh văn 1 3" -> ("Anh văn 1", 3); "Anh văn 1" -> ("Anh văn 1", None)
    """
    name = collapse_ws(name).strip(" ,.;:-|")
    f = fold_aligned(name)
    for pattern in (RE_CREDITS_PAREN, RE_CREDITS_TC):
        m = pattern.search(f)
        if m:
            return name[:m.start()].strip(" ,.;:-|"), int(m.group(1))
    m = RE_CREDITS_TWO.search(f)
    if m:
        return name[:m.end(1)].strip(" ,.;:-|"), int(m.group(2))
    return name, None


def split_code_name(text: str) -> Optional[Tuple[str, str, Optional[int]]]:
    """
    Recover (code, name, credits) from a single line, including codes glued to
    the name ("1422001525570Anh văn 1").
    """
    line = collapse_ws(text)
    f = fold_aligned(line)
    m = RE_CODE_NAME.search(f)
    if not m:
        return None
    seg, _ = _segment(line, f, m.end())
    name, credits = split_credits(seg)
    if count_letters(name) < 2:
        return None
    return m.group(1), name, credits


def _continue_name(lines: List[str], folded: List[str], i: int, name: str) -> str:
    for j in range(i + 1, min(len(lines), i + 1 + CONTINUATION_LINES)):
        if RE_CODE_ALONE.search(folded[j]) or RE_CODE_NAME.search(folded[j]):
            break
        seg, hit = _segment(lines[j], folded[j], 0)
        seg = seg.strip()
        if seg:
            name = f"{name} {seg}"
        if hit or not seg:
            break
    return name


def _course_at(lines: List[str], folded: List[str], i: int) -> Optional[CourseHeader]:
    """
    Try the four course-header patterns on line i, top-down.
    """
    line, f = lines[i], folded[i]

    # 1. STT CODE NAME [CREDITS] at line start, 2./3. CODE NAME [CREDITS] anywhere
    for m in (RE_STT_CODE.match(f), RE_CODE_NAME.search(f)):
        if not m:
            continue
        seg, hit = _segment(line, f, m.end())
        if not hit:
            seg = _continue_name(lines, folded, i, seg)
        name, credits = split_credits(seg)
        if count_letters(name) >= 2:
            return CourseHeader(m.group(m.lastindex), name, credits)

    # 4. standalone code; the name follows on the next lines
    m = RE_CODE_ALONE.match(f)
    if m:
        seg, hit = _segment(line, f, m.end())
        if not hit:
            seg = _continue_name(lines, folded, i, seg)
        name, credits = split_credits(seg)
        if count_letters(name) >= 2:
            return CourseHeader(m.group(1), name, credits)

    return None


# ---------------------------------------------------------------------------
# Row fields
# ---------------------------------------------------------------------------


def _window_order(i: int, n: int) -> List[int]:
    """
    Anchor line first, then neighbours by distance (up to 2 back, 4 forward).
    """
    order = [i]
    for d in range(1, FORWARD_WINDOW + 1):
        if d <= BACK_WINDOW and i - d >= 0:
            order.append(i - d)
        if i + d < n:
            order.append(i + d)
    return order


def _first(indices: Iterable[int], fn: Callable[[int], Optional[T]]) -> Tuple[Optional[T], Optional[int]]:
    for idx in indices:
        value = fn(idx)
        if value is not None:
            return value, idx
    return None, None


def _date_after(folded: str, keyword: re.Pattern) -> Optional[str]:
    m = keyword.search(folded)
    if not m:
        return None
    dates = find_dates(folded[m.end():m.end() + 40])
    return dates[0] if dates else None


def _room(line: str, folded: str) -> Optional[str]:
    m = RE_ROOM_LABEL.search(folded)
    if m:
        room = line[m.start(1):m.end(1)].strip(" .")
        if room:
            return room
    return None


def _lecturer(line: str, folded: str) -> Optional[str]:
    m = RE_LECTURER.search(folded)
    if not m:
        return None
    stop = RE_MARKER.search(folded, m.end())
    name = line[m.end():stop.start() if stop else len(line)].strip(" ,.;:-|")
    return name if count_letters(name) >= 2 else None


def _mode(folded: str) -> Optional[str]:
    m = RE_MODE.search(folded)
    if not m:
        return None
    return MODE_LABELS[re.sub(r"\s+", " ", m.group(1))]


def _course_near(lines: List[str], folded: List[str], idx: int) -> Optional[CourseHeader]:
    """
    Neighbourhood re-scan (±2 lines) for a course header around a resolved start date.
    """
    order = [idx]
    for d in range(1, NEIGHBORHOOD + 1):
        order.extend(j for j in (idx - d, idx + d) if 0 <= j < len(lines))
    course, _ = _first(order, lambda j: _course_at(lines, folded, j))
    return course


def _notes(course: Optional[CourseHeader]) -> Optional[str]:
    if course is None or course.credits is None:
        return None
    return f"{course.credits} tín chỉ"


def parse_credit_schedule(text: str) -> List[CandidateEvent]:
    """
    Line-oriented pass over a credit-schedule export.

    A candidate is emitted only when a start date and a period range are both
    resolved; the weekday may be missing.
    """
    lines = split_lines(text)
    folded = [fold_aligned(line) for line in lines]
    n = len(lines)

    out: List[CandidateEvent] = []
    seen: Set[tuple] = set()
    current: Optional[CourseHeader] = None

    for i in range(n):
        course = _course_at(lines, folded, i)
        if course is not None:
            current = course

        period = find_period_range(folded[i], allow_bare=False)
        if period is None:
            continue

        order = _window_order(i, n)

        start_date, date_idx = _first(order, lambda j: _date_after(folded[j], RE_START_KW))
        if start_date is None:
            dated, date_idx = _first(order, lambda j: find_dates(folded[j]) or None)
            if dated is None:
                continue
            start_date = dated[0]
            end_date = dated[1] if len(dated) > 1 else None
        else:
            end_date = None
        if end_date is None:
            end_date, _ = _first(order, lambda j: _date_after(folded[j], RE_END_KW))

        wd, _ = _first(order, lambda j: parse_weekday_token(folded[j]))
        room, _ = _first(order, lambda j: _room(lines[j], folded[j]))
        if room is None:
            room = find_room(lines[i], folded[i])
        lecturer, _ = _first(order, lambda j: _lecturer(lines[j], folded[j]))
        mode, _ = _first(order, lambda j: _mode(folded[j]))

        header = current
        if header is None or not header.name or not header.code:
            header = _course_near(lines, folded, date_idx) or header

        cand = CandidateEvent(
            title=header.name if header else DEFAULT_TITLE,
            code=header.code if header else None,
            weekday=wd[0] if wd else None,
            period_from=period[0],
            period_to=period[1],
            start_date=start_date,
            end_date=end_date,
            location=room,
            lecturer=lecturer,
            mode=mode,
            notes=_notes(header),
        )
        key = cand.dedup_key()
        if key not in seen:
            seen.add(key)
            out.append(cand)

    return out


# ---------------------------------------------------------------------------
# Dense fallbacks
# ---------------------------------------------------------------------------

RE_DENSE = re.compile(
    r"(?:(?P<code>\d{6,})\s*)?"
    r"(?P<name>[a-z][a-z ,.&()'\-]{2,80}?(?:\s\d{1,2})?)"
    r"(?:\s+(?P<wd>thu\s*[2-7]|chu\s*nhat))?\s+"
    r"(?:tiet\s*[:.]?\s*)?(?P<p1>\d{1,2})\s*-\s*(?P<p2>\d{1,2})\s+"
    r"(?:(?P<mode>ly\s*thuyet|thuc\s*hanh)\s+)?"
    r"(?:(?:phong(?:\s*hoc)?\s*:?\s*)?(?P<room>[a-z]{1,2}\d{0,2}[.\-]?\d{2,3}[a-z]?|truc\s*tuyen)\s+)?"
    r"(?:bat\s*dau\s*:?\s*)?(?P<d1>\d{1,2}/\d{1,2}/\d{4})"
    r"(?:\s*(?:-|–|den|ket\s*thuc\s*:?)?\s*(?P<d2>\d{1,2}/\d{1,2}/\d{4}))?"
)

RE_DATE_TOKEN = re.compile(r"(?<!\d)\d{1,2}/\d{1,2}/\d{4}(?!\d)")
RE_ANY_CODE = re.compile(r"(?<![\d/.])\d{6,}(?![\d/.])")

PAIR_GAP = 30
PAIR_DISTANCE = 200
TITLE_LOOKBACK_CHARS = 120


def _flatten(text: str) -> Tuple[str, str]:
    flat = " ".join(split_lines(text))
    return flat, fold_aligned(flat)


def _clean_name(name: str) -> str:
    return collapse_ws(name).strip(" ,.;:-|()")


def parse_credit_dense(text: str) -> List[CandidateEvent]:
    """
    Single-regex pass: [code]? name period-range mode? room? date [date]?
    """
    flat, folded = _flatten(text)
    out: List[CandidateEvent] = []
    seen: Set[tuple] = set()

    for m in RE_DENSE.finditer(folded):
        pair = valid_period_pair(int(m.group("p1")), int(m.group("p2")))
        if pair is None:
            continue
        dates = find_dates(m.group("d1"))
        if not dates:
            continue
        end_dates = find_dates(m.group("d2") or "")
        name = _clean_name(flat[m.start("name"):m.end("name")])
        room = flat[m.start("room"):m.end("room")] if m.group("room") else None
        wd = parse_weekday_token(m.group("wd") or "")
        mode = _mode(m.group("mode") or "")

        cand = CandidateEvent(
            title=name,
            code=m.group("code"),
            weekday=wd[0] if wd else None,
            period_from=pair[0],
            period_to=pair[1],
            start_date=dates[0],
            end_date=end_dates[0] if end_dates else None,
            location=room,
            mode=mode,
        )
        key = cand.dedup_key()
        if key not in seen:
            seen.add(key)
            out.append(cand)

    return out


def _title_before(flat: str, folded: str, pos: int) -> str:
    """
    Marker-bounded name after the closest course code preceding `pos`.
    """
    lo = max(0, pos - TITLE_LOOKBACK_CHARS)
    codes = list(RE_ANY_CODE.finditer(folded, lo, pos))
    if not codes:
        return DEFAULT_TITLE
    seg, _ = _segment(flat, folded, codes[-1].end())
    name, _ = split_credits(seg)
    return name if count_letters(name) >= 2 else DEFAULT_TITLE


def parse_credit_pairs(text: str) -> List[CandidateEvent]:
    """
    Positional heuristic: each start/end date pair takes the nearest period range.
    """
    flat, folded = _flatten(text)

    date_tokens = list(RE_DATE_TOKEN.finditer(folded))
    pairs: List[Tuple[int, str, Optional[str]]] = []
    k = 0
    while k < len(date_tokens):
        first = date_tokens[k]
        start = find_dates(first.group(0))
        if not start:
            k += 1
            continue
        end: Optional[str] = None
        if k + 1 < len(date_tokens) and date_tokens[k + 1].start() - first.end() <= PAIR_GAP:
            found = find_dates(date_tokens[k + 1].group(0))
            end = found[0] if found else None
            k += 1
        pairs.append((first.start(), start[0], end))
        k += 1

    ranges = iter_period_ranges(folded)

    out: List[CandidateEvent] = []
    seen: Set[tuple] = set()
    for date_pos, start_date, end_date in pairs:
        if not ranges:
            break
        p_from, p_to, range_pos = min(ranges, key=lambda r: (abs(r[2] - date_pos), r[2]))
        if abs(range_pos - date_pos) > PAIR_DISTANCE:
            continue
        lo, hi = sorted((range_pos, date_pos))
        wd = parse_weekday_token(folded[max(0, lo - 40):hi])
        cand = CandidateEvent(
            title=_title_before(flat, folded, lo),
            weekday=wd[0] if wd else None,
            period_from=p_from,
            period_to=p_to,
            start_date=start_date,
            end_date=end_date,
        )
        key = cand.dedup_key()
        if key not in seen:
            seen.add(key)
            out.append(cand)

    return out
