"""
iCalendar (.ics) export.

Candidates become weekly repeating events so the file can be imported into:
- Google Calendar
- Outlook
- Apple Calendar

A candidate with a start date and a later end date repeats every week until
the end date (RRULE). Candidates without any date are skipped.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, Optional

from tkbscan.model import CandidateEvent


def _ics_escape(text: str) -> str:
    """
    Escape text for ICS fields (very small subset, sufficient for our use).
    """
    return (
        text.replace("\\", "\\\\").replace("\r\n", "\\n").replace("\n", "\\n").replace(";", "\\;").replace(",", "\\,")
    )


def _dt_local(day: date, time_hh_mm: str) -> str:
    """
    Convert date + time to ICS local datetime string 'YYYYMMDDTHHMM00'.
    """
    dt = datetime.strptime(f"{day.isoformat()} {time_hh_mm}", "%Y-%m-%d %H:%M")
    return dt.strftime("%Y%m%dT%H%M00")


def first_occurrence(cand: CandidateEvent) -> Optional[date]:
    """
    First date on/after start_date that falls on the candidate's weekday.

    Weekday 7 covers both Saturday and Sunday ("Thứ 7" / "Chủ nhật"), so a
    start date on either of those days is kept as is.
    """
    if not cand.start_date:
        return None
    try:
        start = date.fromisoformat(cand.start_date)
    except ValueError:
        return None

    if cand.weekday is None or not 2 <= cand.weekday <= 7:
        return start
    if cand.weekday == 7 and start.isoweekday() in (6, 7):
        return start

    target = cand.weekday - 1  # "Thứ N" is ISO weekday N-1
    return start + timedelta(days=(target - start.isoweekday()) % 7)


def export_candidates_to_ics(candidates: Iterable[CandidateEvent], out_path: str | Path) -> int:
    """
    Export candidates to an .ics file. Returns number of exported events.
    """
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    lines: list[str] = []
    lines.append("BEGIN:VCALENDAR")
    lines.append("VERSION:2.0")
    lines.append("PRODID:-//tkbscan//VI")
    lines.append("CALSCALE:GREGORIAN")

    count = 0
    for cand in candidates:
        first = first_occurrence(cand)
        if first is None:
            continue

        dtstart = _dt_local(first, cand.start_time)
        dtend = _dt_local(first, cand.end_time)
        summary = f"{cand.code} {cand.title}".strip() if cand.code else cand.title
        uid = f"{cand.code or 'tkbscan'}-{dtstart}-{count}"

        lines.append("BEGIN:VEVENT")
        lines.append(f"UID:{_ics_escape(uid)}")
        dtstamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        lines.append(f"DTSTAMP:{dtstamp}")
        lines.append(f"DTSTART:{dtstart}")
        lines.append(f"DTEND:{dtend}")
        if cand.end_date and cand.end_date > first.isoformat():
            until = cand.end_date.replace("-", "")
            lines.append(f"RRULE:FREQ=WEEKLY;UNTIL={until}T235959")
        lines.append(f"SUMMARY:{_ics_escape(summary)}")
        if cand.location:
            lines.append(f"LOCATION:{_ics_escape(cand.location)}")

        description = [x for x in (cand.mode, cand.lecturer, cand.notes) if x]
        if description:
            lines.append(f"DESCRIPTION:{_ics_escape(' - '.join(description))}")
        lines.append("END:VEVENT")
        count += 1

    lines.append("END:VCALENDAR")

    # ICS standard uses CRLF
    out.write_text("\r\n".join(lines) + "\r\n", encoding="utf-8")
    return count
