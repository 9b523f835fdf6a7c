"""
Central data model definitions used across the project.

This module defines the canonical structure of candidate events so that:
- every parsing strategy produces the same record type
- the dedup stage and the semantic overlay work on one shape
- JSON output and AI-supplied JSON share the same field names
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from tkbscan.dates import parse_date, parse_weekday
from tkbscan.periods import (
    PeriodTime,
    order_periods,
    period_end_nearest,
    period_range_times,
    period_start_nearest,
    to_slot,
)


__all__ = [
    "PeriodTime",
    "CandidateEvent",
    "WeekdayBlock",
    "SemanticResolution",
    "DEFAULT_TITLE",
]

DEFAULT_TITLE = "Lich hoc"

DedupKey = Tuple[str, Optional[int], int, int, Optional[str], Optional[str], Optional[str]]


@dataclass(frozen=True)
class CandidateEvent:
    """
    One unconfirmed timetable entry produced by a parsing strategy.

    period_from/period_to are clamped to 1..16 and swapped if reversed on creation.
    start_time, end_time and slot are derived from the period table.
    """

    title: str
    period_from: int
    period_to: int
    weekday: Optional[int] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    location: Optional[str] = None
    lecturer: Optional[str] = None
    notes: Optional[str] = None
    code: Optional[str] = None
    mode: Optional[str] = None

    def __post_init__(self) -> None:
        lo, hi = order_periods(self.period_from, self.period_to)
        object.__setattr__(self, "period_from", lo)
        object.__setattr__(self, "period_to", hi)
        object.__setattr__(self, "title", (self.title or "").strip() or DEFAULT_TITLE)

    @property
    def start_time(self) -> str:
        return period_range_times(self.period_from, self.period_to)[0]

    @property
    def end_time(self) -> str:
        return period_range_times(self.period_from, self.period_to)[1]

    @property
    def slot(self) -> str:
        return to_slot(self.period_from, self.period_to)

    def dedup_key(self) -> DedupKey:
        return (
            self.title,
            self.weekday,
            self.period_from,
            self.period_to,
            self.start_date,
            self.end_date,
            self.location,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "code": self.code,
            "weekday": self.weekday,
            "period_from": self.period_from,
            "period_to": self.period_to,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "slot": self.slot,
            "location": self.location,
            "lecturer": self.lecturer,
            "mode": self.mode,
            "notes": self.notes,
        }

    def to_event_form(self) -> Dict[str, Any]:
        """
        Payload used when the user confirms the candidate as a calendar event.
        A date span becomes a weekly repetition ending on end_date.
        """
        form: Dict[str, Any] = {
            "title": self.title.strip() or "Lịch",
            "date": self.start_date,
            "endDate": self.end_date,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "location": self.location,
            "notes": self.notes,
        }
        if self.start_date and self.end_date and self.end_date > self.start_date:
            form["repeat"] = {"frequency": "weekly", "endMode": "onDate", "endDate": self.end_date}
        return form

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["CandidateEvent"]:
        """
        Build a candidate from loosely structured JSON (e.g. a generative model's output).

        Accepts snake_case or camelCase keys, a nested "periods": {"from", "to"} object,
        or only startTime/endTime (mapped onto the nearest periods).
        Returns None when no period range can be resolved.
        """
        if not isinstance(data, dict):
            return None

        def pick(*keys: str) -> Any:
            for k in keys:
                v = data.get(k)
                if v not in (None, ""):
                    return v
            return None

        p_from = pick("period_from", "periodFrom", "from")
        p_to = pick("period_to", "periodTo", "to")
        periods = data.get("periods")
        if isinstance(periods, dict):
            p_from = periods.get("from", p_from)
            p_to = periods.get("to", p_to)

        try:
            if p_from is not None and p_to is None:
                p_to = p_from
            if p_from is not None:
                p_from, p_to = int(p_from), int(p_to)
        except (TypeError, ValueError):
            p_from = p_to = None

        if p_from is None:
            start_time = _clock(pick("start_time", "startTime"))
            end_time = _clock(pick("end_time", "endTime"))
            if not start_time:
                return None
            p_from = period_start_nearest(start_time)
            p_to = period_end_nearest(end_time) if end_time else p_from

        weekday = pick("weekday")
        if isinstance(weekday, str):
            weekday = int(weekday) if weekday.strip().isdigit() else parse_weekday(weekday)
        if not isinstance(weekday, int) or not 1 <= weekday <= 7:
            weekday = None

        return cls(
            title=str(pick("title") or ""),
            period_from=p_from,
            period_to=p_to,
            weekday=weekday,
            start_date=_iso(pick("start_date", "startDate", "date")),
            end_date=_iso(pick("end_date", "endDate")),
            location=_opt_str(pick("location", "room")),
            lecturer=_opt_str(pick("lecturer")),
            notes=_opt_str(pick("notes", "note")),
            code=_opt_str(pick("code")),
            mode=_opt_str(pick("mode")),
        )


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _iso(value: Any) -> Optional[str]:
    s = _opt_str(value)
    return parse_date(s) if s else None


def _clock(value: Any) -> Optional[str]:
    s = _opt_str(value)
    if not s or ":" not in s:
        return None
    h, _, m = s.partition(":")
    if not (h.strip().isdigit() and m.strip()[:2].isdigit()):
        return None
    hh, mm = int(h), int(m.strip()[:2])
    if not (0 <= hh <= 23 and 0 <= mm <= 59):
        return None
    return f"{hh:02d}:{mm:02d}"


@dataclass
class WeekdayBlock:
    """
    Display grouping of events under an explicit day header (image OCR path).
    """

    weekday: int
    label: str
    date: Optional[str]
    events: List[CandidateEvent] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weekday": self.weekday,
            "label": self.label,
            "date": self.date,
            "events": [e.to_dict() for e in self.events],
        }


@dataclass(frozen=True)
class SemanticResolution:
    """
    What a free-text prompt says about timing: which end of the event the
    clock time anchors (due/start/none), plus optional date and time.
    """

    mode: str = "none"
    date: Optional[str] = None
    time: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"mode": self.mode, "date": self.date, "time": self.time}
