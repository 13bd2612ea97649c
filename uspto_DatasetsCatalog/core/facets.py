# uspto_DatasetsCatalog/core/facets.py
from __future__ import annotations
from typing import Optional

from .model import Facet

FORMAT_SUFFIXES: tuple[str, ...] = ("DTA", "CSV")
_TRAILING_SEPARATORS = " \t\r\n\f\v_"
_DIGITS = frozenset("0123456789")

def find_year(text: str) -> tuple[int, int] | None:
    """
    Locate the first 20xx year in ``text``.

    A year is exactly four digits starting with "20"; digits directly before or
    after the run disqualify it (so "120190" holds no year).
    Returns (start, end) of the match or None.
    """
    n = len(text)
    i = 0
    while i < n:
        if text[i] not in _DIGITS:
            i += 1
            continue
        # measure the whole digit run starting at i
        j = i
        while j < n and text[j] in _DIGITS:
            j += 1
        if j - i == 4 and text[i:i + 2] == "20":
            return i, j
        i = j
    return None

def extract_year(table_name) -> Optional[str]:
    if not isinstance(table_name, str):
        return None
    span = find_year(table_name)
    return table_name[span[0]:span[1]] if span else None

def _strip_year(text: str) -> tuple[str, Optional[str]]:
    span = find_year(text)
    if span is None:
        return text, None
    a, b = span
    return text[:a] + text[b:], text[a:b]

def _strip_format(text: str) -> tuple[str, Optional[str]]:
    for suffix in FORMAT_SUFFIXES:
        if text.endswith(suffix):
            return text[:-len(suffix)], suffix
    return text, None

def normalize_base(text: str) -> str:
    return text.strip().rstrip(_TRAILING_SEPARATORS)

def extract_facet(table_name: str) -> tuple[str, Facet]:
    """
    Split a composite table name into (table_base, Facet).

    Order matters: the year is removed first (it may sit mid-string), then
    the end-anchored format suffix, then separators are trimmed.
      "Claims Summary 2019 DTA" -> ("Claims Summary", Facet("2019", "DTA"))
      "Annual Report DTA"       -> ("Annual Report", Facet(None, "DTA"))
    """
    if not isinstance(table_name, str):
        raise TypeError(f"table_name must be str, got {type(table_name).__name__}")
    working, year = _strip_year(table_name)
    working, fmt = _strip_format(working)
    return normalize_base(working), Facet(year=year, format=fmt)
