"""
Extraction pipeline.

raw text -> ordered parsing strategies (first non-empty result wins)
         -> + AI candidates (appended after, so parser output wins dedup)
         -> optional semantic overlay from the user prompt
         -> dedup on (title, weekday, from, to, start_date, end_date, location)

Every strategy is an explicit object whose attempt() returns None when it
found nothing; the order is declared in build_strategies().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from tkbscan.credit import parse_credit_dense, parse_credit_pairs, parse_credit_schedule
from tkbscan.direct import parse_direct
from tkbscan.model import CandidateEvent, SemanticResolution
from tkbscan.progress import parse_progress_table
from tkbscan.semantic import apply_resolution, resolve_prompt
from tkbscan.weekly import parse_weekly


logger = logging.getLogger(__name__)

SOURCES = ("pdf", "image")

AiCandidate = Union[CandidateEvent, Dict[str, Any]]


@dataclass(frozen=True)
class Strategy:
    """
    One parsing strategy: a name plus a text -> candidates function.
    """

    name: str
    parse: Callable[[str], List[CandidateEvent]]

    def attempt(self, text: str) -> Optional[List[CandidateEvent]]:
        found = self.parse(text)
        return found if found else None


@dataclass
class ScanResult:
    candidates: List[CandidateEvent] = field(default_factory=list)
    strategy: Optional[str] = None
    resolution: Optional[SemanticResolution] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy,
            "resolution": self.resolution.to_dict() if self.resolution else None,
            "candidates": [c.to_dict() for c in self.candidates],
        }


def build_strategies(source: str = "pdf", now: Optional[date] = None) -> Tuple[Strategy, ...]:
    """
    Strategies in precedence order.

    "pdf": digitally extracted text, table parsers first.
    "image": photographed week view, day blocks first.
    """
    progress = Strategy("progress-table", parse_progress_table)
    weekly = Strategy("weekly-blocks", parse_weekly)
    direct = Strategy("direct", partial(parse_direct, today=now))

    if source == "image":
        return (weekly, progress, direct)
    if source != "pdf":
        raise ValueError(f"Unknown source: {source!r} (expected one of {SOURCES})")

    return (
        progress,
        Strategy("credit-schedule", parse_credit_schedule),
        Strategy("credit-dense", parse_credit_dense),
        Strategy("credit-pairs", parse_credit_pairs),
        weekly,
        direct,
    )


def run_strategies(text: str, strategies: Sequence[Strategy]) -> Tuple[Optional[str], List[CandidateEvent]]:
    """
    Try strategies in order; return (name, candidates) of the first non-empty one.
    """
    for strategy in strategies:
        found = strategy.attempt(text)
        if found is None:
            logger.debug("Strategy %s found nothing", strategy.name)
            continue
        logger.info("Strategy %s produced %d candidates", strategy.name, len(found))
        return strategy.name, found
    logger.info("No strategy produced candidates")
    return None, []


def dedup_candidates(candidates: Iterable[CandidateEvent]) -> List[CandidateEvent]:
    """
    Keep the first candidate for every dedup key, preserving order.
    """
    seen = set()
    out: List[CandidateEvent] = []
    for c in candidates:
        key = c.dedup_key()
        if key in seen:
            continue
        seen.add(key)
        out.append(c)
    return out


def coerce_candidates(items: Iterable[AiCandidate]) -> List[CandidateEvent]:
    """
    Accept CandidateEvent objects or raw dicts; drop records that cannot be resolved.
    """
    out: List[CandidateEvent] = []
    dropped = 0
    for item in items:
        cand = item if isinstance(item, CandidateEvent) else CandidateEvent.from_dict(item)
        if cand is None:
            dropped += 1
            continue
        out.append(cand)
    if dropped:
        logger.debug("Dropped %d AI candidates without a usable time range", dropped)
    return out


def merge_candidates(parsed: List[CandidateEvent], ai: List[CandidateEvent]) -> List[CandidateEvent]:
    return list(parsed) + list(ai)


def extract_candidates(
    raw_text: str,
    ai_candidates: Optional[Iterable[AiCandidate]] = None,
    prompt: Optional[str] = None,
    strict_mode: bool = False,
    now: Optional[date] = None,
    source: str = "pdf",
) -> ScanResult:
    """
    Run the full pipeline on one text.
    """
    name, parsed = run_strategies(raw_text or "", build_strategies(source=source, now=now))
    merged = merge_candidates(parsed, coerce_candidates(ai_candidates or []))

    resolution = None
    if prompt and prompt.strip():
        resolution = resolve_prompt(prompt, now=now)
        merged = [apply_resolution(c, resolution, strict_mode=strict_mode) for c in merged]

    result = dedup_candidates(merged)
    logger.info("Extraction finished: %d candidates (%d before dedup)", len(result), len(merged))
    return ScanResult(candidates=result, strategy=name, resolution=resolution)
