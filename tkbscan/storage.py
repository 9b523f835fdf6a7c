"""
JSON persistence for extracted candidates.

Output schema:

    {"strategy": "...", "candidates": [ {...}, ... ]}

The file is written with ensure_ascii=False so Vietnamese titles stay readable.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Optional

from tkbscan.model import CandidateEvent


def save_candidates(
    candidates: Iterable[CandidateEvent],
    path: str | Path,
    strategy: Optional[str] = None,
) -> int:
    """
    Save candidates to a JSON file. Creates parent directories if needed.
    Returns the number of saved candidates.
    """
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    items = [c.to_dict() for c in candidates]
    payload = {"strategy": strategy, "candidates": items}

    out_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return len(items)


def load_candidates(path: str | Path) -> List[CandidateEvent]:
    """
    Load candidates written by save_candidates().

    Returns an empty list if the file does not exist or is invalid.
    """
    p = Path(path)
    if not p.exists():
        return []

    try:
        data = json.loads(p.read_text(encoding="utf-8"))
        items = data.get("candidates", [])
        if not isinstance(items, list):
            return []
    except (OSError, json.JSONDecodeError, UnicodeDecodeError, AttributeError):
        return []

    out: List[CandidateEvent] = []
    for item in items:
        cand = CandidateEvent.from_dict(item)
        if cand is not None:
            out.append(cand)
    return out
