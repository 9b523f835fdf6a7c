"""
Semantic overlay driven by a free-text user prompt.

A prompt such as "Nộp báo cáo lúc 21:00 ngày 10/11/2025" says whether its
clock time marks the deadline (due) or the beginning (start) of the event.
The resolution is computed once per prompt and applied to every candidate:

- due:   to = period ending at/after the time, from = to - 1
- start: from = period starting at/before the time, to = from + 1
- a prompt date only fills a blank start date

Applying the same resolution twice gives the same candidate.
"""

from __future__ import annotations

import re
from dataclasses import replace
from datetime import date
from typing import Optional, Tuple

from tkbscan.dates import parse_date
from tkbscan.model import CandidateEvent, SemanticResolution
from tkbscan.periods import FIRST_PERIOD, LAST_PERIOD, period_end_nearest, period_start_nearest
from tkbscan.relative import resolve_relative_date
from tkbscan.textnorm import collapse_ws, fold


DUE_KEYWORDS: Tuple[str, ...] = ("hạn chót", "đến hạn", "hạn", "deadline", "trước", "nộp", "phải xong")
START_KEYWORDS: Tuple[str, ...] = ("bắt đầu", "khởi động", "start")

RE_HHMM = re.compile(r"(?<![\d/:])(\d{1,2}):(\d{2})(?!\d)")
RE_HH_H = re.compile(r"(?<![\d/])(\d{1,2})\s*h\s*(\d{2})?(?![\d\w])")


def _keyword_re(keywords: Tuple[str, ...]) -> re.Pattern:
    return re.compile(r"(?<!\w)(?:" + "|".join(re.escape(k) for k in keywords) + r")(?!\w)")


RE_DUE = _keyword_re(DUE_KEYWORDS)
RE_START = _keyword_re(START_KEYWORDS)
RE_DUE_FOLDED = _keyword_re(tuple(fold(k) for k in DUE_KEYWORDS))
RE_START_FOLDED = _keyword_re(tuple(fold(k) for k in START_KEYWORDS))
# "han" also folds from "Hàn"; prompts with diacritics must spell "hạn" out.
AMBIGUOUS_FOLDED: Tuple[str, ...] = ("han", "den han")
RE_DUE_FOLDED_SAFE = _keyword_re(tuple(fold(k) for k in DUE_KEYWORDS if fold(k) not in AMBIGUOUS_FOLDED))


def classify_mode(prompt: str | None) -> str:
    """
    "due", "start" or "none".

    Accented keywords are matched on the lowercased prompt first. The folded
    prompt is tried next, for prompts typed partly or wholly without
    diacritics ("nop bao cao truoc 21h ngày mai"); once the prompt carries
    diacritics a bare "han" no longer counts, so "Hàn" does not pass for "hạn".
    """
    text = collapse_ws(prompt).lower()
    if not text:
        return "none"
    if RE_DUE.search(text):
        return "due"
    if RE_START.search(text):
        return "start"
    folded = fold(text)
    due_folded = RE_DUE_FOLDED if text.isascii() else RE_DUE_FOLDED_SAFE
    if due_folded.search(folded):
        return "due"
    if RE_START_FOLDED.search(folded):
        return "start"
    return "none"


def extract_clock_time(text: str | None) -> Optional[str]:
    """
    First HH:MM or HHhMM ("21h", "7h30") clock time, zero-padded.
    """
    t = fold(text)
    for pattern in (RE_HHMM, RE_HH_H):
        for m in pattern.finditer(t):
            h = int(m.group(1))
            mi = int(m.group(2) or 0)
            if 0 <= h <= 23 and 0 <= mi <= 59:
                return f"{h:02d}:{mi:02d}"
    return None


def extract_prompt_date(text: str | None, now: Optional[date] = None) -> Optional[str]:
    """
    Absolute date first (DD/MM/YYYY, YYYY-MM-DD, DD/MM), then relative phrases.
    """
    return parse_date(text, today=now) or resolve_relative_date(text, now=now)


def resolve_prompt(prompt: str | None, now: Optional[date] = None) -> SemanticResolution:
    return SemanticResolution(
        mode=classify_mode(prompt),
        date=extract_prompt_date(prompt, now=now),
        time=extract_clock_time(prompt),
    )


def apply_resolution(
    candidate: CandidateEvent,
    resolution: SemanticResolution,
    strict_mode: bool = False,
) -> CandidateEvent:
    """
    Overlay one resolution on one candidate.

    strict_mode only fills genuinely blank fields; periods always hold a
    value, so they are shifted only when strict_mode is off.
    """
    updates = {}

    if resolution.date and not candidate.start_date and not candidate.end_date:
        updates["start_date"] = resolution.date

    if not strict_mode and resolution.time:
        if resolution.mode == "due":
            to = period_end_nearest(resolution.time)
            updates["period_to"] = to
            updates["period_from"] = max(FIRST_PERIOD, to - 1)
        elif resolution.mode == "start":
            start = period_start_nearest(resolution.time)
            updates["period_from"] = start
            updates["period_to"] = min(LAST_PERIOD, start + 1)

    return replace(candidate, **updates) if updates else candidate
