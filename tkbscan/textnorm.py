"""
Text normalization shared by every parser.

OCR and PDF text arrive with mixed diacritics, odd whitespace and random
capitalization. Matching is done on a folded copy:
- Vietnamese diacritics stripped (including đ -> d)
- lowercase
- runs of whitespace collapsed to one space
"""

from __future__ import annotations

import re
import unicodedata
from typing import List


_WS_RE = re.compile(r"\s+")
_LETTER_RE = re.compile(r"[^\W\d_]", re.UNICODE)
_DIGIT_RE = re.compile(r"\d")


def collapse_ws(text: str | None) -> str:
    return _WS_RE.sub(" ", unicodedata.normalize("NFC", text or "")).strip()


def strip_diacritics(text: str | None) -> str:
    """
    Remove combining marks after NFD decomposition.

    'Thứ Hai' -> 'Thu Hai', 'Đà Nẵng' -> 'Da Nang'
    """
    decomposed = unicodedata.normalize("NFD", text or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.replace("đ", "d").replace("Đ", "D")


def fold(text: str | None) -> str:
    """
    Diacritic-free, lowercase, whitespace-collapsed form used for keyword matching.
    """
    return collapse_ws(strip_diacritics(text)).lower()


def fold_aligned(text: str | None) -> str:
    """
    Like fold(), but keeps a 1:1 character mapping with the NFC input
    (no whitespace collapsing), so match offsets can be used to slice
    the original text and keep its diacritics.
    """
    out: List[str] = []
    for ch in unicodedata.normalize("NFC", text or ""):
        base = unicodedata.normalize("NFD", ch)[0]
        if base in ("đ", "Đ"):
            base = "d"
        low = base.lower()
        out.append(low if len(low) == 1 else base)
    return "".join(out)


def count_letters(text: str) -> int:
    return len(_LETTER_RE.findall(text or ""))


def count_digits(text: str) -> int:
    return len(_DIGIT_RE.findall(text or ""))


def split_lines(text: str | None) -> List[str]:
    """
    Split into trimmed, non-empty lines with inner whitespace collapsed.
    """
    out: List[str] = []
    for raw in (text or "").splitlines():
        line = collapse_ws(raw)
        if line:
            out.append(line)
    return out
