"""
CLI (Command Line Interface).

Quick terminal commands around the extraction pipeline, e.g.:

    tkbscan scan <file> [--ai ai.json] [--prompt TEXT] [--strict] [--json out.json] [--ics out.ics]
    tkbscan weekly <file>
    tkbscan --now 2025-11-03 resolve <prompt>
    tkbscan conflicts <file>

Input files are plain text (OCR / PDF extraction output) or saved HTML pages.
"""

from __future__ import annotations

import argparse
import json
import logging
from datetime import date
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tkbscan.conflicts import find_conflicts
from tkbscan.export_ics import export_candidates_to_ics
from tkbscan.loaders import load_ai_candidates, load_text
from tkbscan.model import CandidateEvent
from tkbscan.pipeline import SOURCES, ScanResult, extract_candidates
from tkbscan.semantic import resolve_prompt
from tkbscan.storage import save_candidates
from tkbscan.weekly import parse_weekly_blocks


console = Console()


def _parse_now(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date (expected YYYY-MM-DD): {value!r}")


def _read_input(path: str) -> Optional[str]:
    """
    Read the input file; print a message and return None if it cannot be read.
    """
    p = Path(path)
    if not p.is_file():
        print(f"Input file not found: {path}")
        return None
    try:
        return load_text(p)
    except OSError as exc:
        print(f"Cannot read {path}: {exc}")
        return None


def _candidate_table(candidates: List[CandidateEvent], title: str) -> Table:
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Day")
    table.add_column("Periods", justify="right")
    table.add_column("Time")
    table.add_column("Dates")
    table.add_column("Room")
    table.add_column("Lecturer")
    for i, c in enumerate(candidates, start=1):
        day = f"Thứ {c.weekday}" if c.weekday else "-"
        dates = c.start_date or "-"
        if c.end_date:
            dates = f"{dates} → {c.end_date}"
        table.add_row(
            str(i),
            f"[bold cyan]{c.code}[/] {escape(c.title)}" if c.code else escape(c.title),
            day,
            f"{c.period_from}-{c.period_to}",
            f"{c.start_time}-{c.end_time} ({c.slot})",
            dates,
            c.location or "-",
            c.lecturer or "-",
        )
    return table


def _run_pipeline(args: argparse.Namespace) -> Optional[ScanResult]:
    text = _read_input(args.file)
    if text is None:
        return None

    ai = load_ai_candidates(args.ai) if args.ai else []
    return extract_candidates(
        text,
        ai_candidates=ai,
        prompt=args.prompt,
        strict_mode=args.strict,
        now=args.now,
        source=args.source,
    )


def _cmd_scan(args: argparse.Namespace) -> int:
    """
    Run the pipeline, print the candidates and optionally write JSON / ICS.
    """
    result = _run_pipeline(args)
    if result is None:
        return 1

    if not result.candidates:
        print("No candidates found.")
        return 0

    console.print(_candidate_table(result.candidates, f"Candidates (strategy: {result.strategy or 'ai'})"))

    if args.json:
        n = save_candidates(result.candidates, args.json, strategy=result.strategy)
        print(f"Saved {n} candidates to: {args.json}")
    if args.ics:
        n = export_candidates_to_ics(result.candidates, args.ics)
        print(f"Exported {n} events to: {args.ics}")
    return 0


def _cmd_weekly(args: argparse.Namespace) -> int:
    """
    Print the day blocks found in a photographed week view.
    """
    text = _read_input(args.file)
    if text is None:
        return 1

    blocks = parse_weekly_blocks(text)
    if not any(b.events for b in blocks):
        print("No candidates found.")
        return 0

    for block in blocks:
        if not block.events:
            continue
        header = f"{block.label} {block.date}" if block.date else block.label
        console.print(_candidate_table(block.events, header))
    return 0


def _cmd_resolve(args: argparse.Namespace) -> int:
    """
    Print how a prompt is understood (mode, date, time) as JSON.
    """
    prompt = (args.prompt or "").strip()
    if not prompt:
        print("Please provide a prompt.")
        return 1

    resolution = resolve_prompt(prompt, now=args.now)
    print(json.dumps(resolution.to_dict(), ensure_ascii=False))
    return 0


def _cmd_conflicts(args: argparse.Namespace) -> int:
    """
    Print overlapping candidate pairs.
    """
    result = _run_pipeline(args)
    if result is None:
        return 1

    confs = find_conflicts(result.candidates)
    if not confs:
        print("No conflicts found.")
        return 0

    print(f"Conflicts found: {len(confs)}")
    for a, b in confs:
        print(
            f"- Thứ {a.weekday or '?'} {a.start_time}-{a.end_time} {a.title}"
            f"  <->  Thứ {b.weekday or '?'} {b.start_time}-{b.end_time} {b.title}"
        )
    return 0


def _add_pipeline_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("file", type=str, help="Input text or HTML file")
    p.add_argument("--ai", type=str, default=None, help="AI candidate JSON to merge (parser results win)")
    p.add_argument("--prompt", type=str, default=None, help="Free-text instruction (deadline / start time)")
    p.add_argument("--strict", action="store_true", help="Only fill blank fields from the prompt")
    p.add_argument("--source", choices=SOURCES, default="pdf", help="pdf = extracted text, image = OCR photo")


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="tkbscan", description="Vietnamese timetable extraction CLI")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-v info, -vv debug)")
    parser.add_argument("--now", type=_parse_now, default=None, help="Reference date YYYY-MM-DD (default: today)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_scan = sub.add_parser("scan", help="Extract candidate events from a file")
    _add_pipeline_args(p_scan)
    p_scan.add_argument("--json", type=str, default=None, help="Write candidates to this JSON file")
    p_scan.add_argument("--ics", type=str, default=None, help="Write candidates to this .ics file")

    p_weekly = sub.add_parser("weekly", help="Show day blocks of a photographed week view")
    p_weekly.add_argument("file", type=str, help="Input text file")

    p_resolve = sub.add_parser("resolve", help="Show how a prompt is understood")
    p_resolve.add_argument("prompt", type=str, help="Prompt text")

    p_conflicts = sub.add_parser("conflicts", help="Show overlapping candidates")
    _add_pipeline_args(p_conflicts)

    return parser


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if args.command == "scan":
        raise SystemExit(_cmd_scan(args))
    if args.command == "weekly":
        raise SystemExit(_cmd_weekly(args))
    if args.command == "resolve":
        raise SystemExit(_cmd_resolve(args))
    if args.command == "conflicts":
        raise SystemExit(_cmd_conflicts(args))

    raise SystemExit(2)
