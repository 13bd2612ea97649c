# uspto_DatasetsCatalog/core/grouping.py
from __future__ import annotations
import logging
from collections import defaultdict
from collections.abc import Mapping
from dataclasses import replace
from types import MappingProxyType
from typing import Any, Iterable, Literal, Optional, Sequence

from .discover import ensure_sequence, field_of, well_formed
from .facets import extract_facet
from .model import ClassifiedRecord, FormatCell, GroupedIndex
from .names import ordered_datasets

DuplicatePolicy = Literal["last", "first"]
ALL_YEARS = "all"

_CORE_FIELDS = ("path", "table_name", "shareable_link")

# ----- defaults (used if configure_from_config isn't called) -----
_DUPLICATE_POLICY: DuplicatePolicy = "last"

_LOG = logging.getLogger(__name__)

def normalize_policy(policy) -> DuplicatePolicy:
    """Lower-case and strip a policy name; anything but last/first raises ValueError."""
    value = str(policy).lower().strip()
    if value not in ("last", "first"):
        raise ValueError(f"unknown duplicate_policy {policy!r} (expected 'last' or 'first')")
    return value

def configure_from_config(cfg: dict) -> None:
    """Read catalog.duplicate_policy ("last" | "first"); anything else means "last"."""
    global _DUPLICATE_POLICY
    _DUPLICATE_POLICY = "last"
    cat = (cfg or {}).get("catalog", {}) or {}
    try:
        _DUPLICATE_POLICY = normalize_policy(cat.get("duplicate_policy", "last"))
    except ValueError as e:
        _LOG.warning("%s; using 'last'", e)

def _extra_fields(record: Any) -> Mapping:
    if isinstance(record, Mapping):
        extra = {k: v for k, v in record.items() if k not in _CORE_FIELDS}
    else:
        extra = dict(getattr(record, "extra", None) or {})
    return MappingProxyType(extra)

def classify(record: Any) -> Optional[ClassifiedRecord]:
    """Attach the derived facet to a raw record; None if the record is malformed."""
    path = field_of(record, "path")
    table_name = field_of(record, "table_name")
    if not isinstance(path, str) or not path or not isinstance(table_name, str):
        return None
    base, facet = extract_facet(table_name)
    return ClassifiedRecord(
        path=path,
        table_name=table_name,
        shareable_link=field_of(record, "shareable_link"),
        table_base=base,
        year=facet.year,
        format=facet.format,
        extra=_extra_fields(record),
    )

def build_index(records: Sequence) -> GroupedIndex:
    """
    Group records into dataset -> table base -> classified items.

    One pass with group-by semantics. Datasets come out in display order
    (known datasets first), table bases alphabetically, items in input order.
    """
    records = ensure_sequence(records)
    buckets: dict[str, dict[str, list[ClassifiedRecord]]] = defaultdict(lambda: defaultdict(list))
    for rec, dataset, _ in well_formed(records):
        item = classify(rec)
        buckets[dataset][item.table_base].append(item)

    index: GroupedIndex = {}
    for dataset in ordered_datasets(buckets):
        tables = buckets[dataset]
        index[dataset] = {base: tuple(tables[base]) for base in sorted(tables)}
    _LOG.debug("indexed %d dataset(s): %s", len(index),
               {d: len(t) for d, t in index.items()})
    return index

def cells_by_year(items: Iterable[ClassifiedRecord],
                  policy: Optional[DuplicatePolicy] = None) -> dict[Optional[str], FormatCell]:
    """
    Bucket items by year and fill the DTA/CSV slot of each bucket.

    Items without a format still open their year bucket but fill no slot.
    On a (year, format) collision the later item wins under "last" and the
    earlier one is kept under "first". Unknown policies raise ValueError.
    """
    policy = _DUPLICATE_POLICY if policy is None else normalize_policy(policy)
    cells: dict[Optional[str], FormatCell] = {}
    for item in items:
        cell = cells.get(item.year)
        if cell is None:
            cell = FormatCell()
        if item.format in ("DTA", "CSV"):
            current = cell.get(item.format)
            if current is not None:
                _LOG.debug("duplicate %s/%s/%s (policy=%s)", item.table_base, item.year, item.format, policy)
            if current is None or policy == "last":
                cell = replace(cell, **{item.format: item})
        cells[item.year] = cell
    return cells

def sorted_cell_years(cells: Mapping[Optional[str], FormatCell]) -> list[Optional[str]]:
    years = sorted((y for y in cells if y is not None), reverse=True)
    if None in cells:
        years.append(None)
    return years

def has_items_for_year(items: Iterable[ClassifiedRecord], year_or_all: str) -> bool:
    if year_or_all == ALL_YEARS:
        return True
    return any(item.year == year_or_all for item in items)

def visible_tables(index: GroupedIndex, dataset: str, year_or_all: str = ALL_YEARS) -> list[str]:
    """Table bases of one dataset that pass the year filter, alphabetically."""
    tables = index.get(dataset, {})
    return sorted(base for base, items in tables.items() if has_items_for_year(items, year_or_all))
