"""
Input loading.

The OCR / PDF / AI collaborators hand over either plain text, an HTML page
saved from the student portal, or AI candidate JSON. This module turns those
files into what the pipeline expects:

- text files   -> str
- HTML files   -> line-oriented text (one table cell per line)
- JSON files   -> list of CandidateEvent (invalid records dropped)
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List

from bs4 import BeautifulSoup

from tkbscan.model import CandidateEvent


HTML_SUFFIXES = {".html", ".htm"}


def html_to_text(html: str) -> str:
    """
    Flatten an HTML timetable so that every cell / block element lands on its own line.
    """
    soup = BeautifulSoup(html, "html.parser")

    # Scripts and styles never carry timetable data
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    return soup.get_text("\n", strip=True)


def load_text(path: str | Path) -> str:
    """
    Read an input file as text. Raises OSError if the file cannot be read.
    """
    p = Path(path)
    text = p.read_text(encoding="utf-8", errors="replace")
    if p.suffix.lower() in HTML_SUFFIXES:
        return html_to_text(text)
    return text


def _records(data: Any) -> List[Any]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ("candidates", "items", "events"):
            value = data.get(key)
            if isinstance(value, list):
                return value
    return []


def load_ai_candidates(path: str | Path) -> List[CandidateEvent]:
    """
    Load AI candidate JSON (a list, or an object with "candidates"/"items"/"events").

    Returns an empty list if the file is missing or invalid.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError):
        return []

    out: List[CandidateEvent] = []
    for record in _records(data):
        cand = CandidateEvent.from_dict(record)
        if cand is not None:
            out.append(cand)
    return out
