# uspto_DatasetsCatalog/core/discover.py
from __future__ import annotations
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Iterator, Optional

from .facets import extract_year

_LOG = logging.getLogger(__name__)

def field_of(record: Any, name: str) -> Any:
    """Read a field from a mapping (parsed JSON) or a RawRecord-like object."""
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)

def dataset_of(path: Any) -> Optional[str]:
    if not isinstance(path, str) or not path:
        return None
    head = path.split("/", 1)[0]
    return head or None

def ensure_sequence(records: Any) -> Sequence:
    # str/bytes/mappings are sequences or iterables of the wrong thing
    if records is None or isinstance(records, (str, bytes, Mapping)):
        raise TypeError(f"records must be a sequence of records, got {type(records).__name__}")
    if not isinstance(records, Sequence):
        try:
            records = list(records)
        except TypeError:
            raise TypeError(f"records must be a sequence of records, got {type(records).__name__}") from None
    return records

def well_formed(records: Sequence) -> Iterator[tuple[Any, str, str]]:
    """
    Yield (record, dataset_id, table_name) for records that carry both a
    usable path and a string table_name. Everything else is skipped, including
    paths whose first segment is empty ("/x"), which name no dataset.
    """
    skipped = 0
    for rec in records:
        dataset = dataset_of(field_of(rec, "path"))
        table_name = field_of(rec, "table_name")
        if dataset is None or not isinstance(table_name, str):
            skipped += 1
            continue
        yield rec, dataset, table_name
    if skipped:
        _LOG.debug("skipped %d malformed record(s)", skipped)

def discover_datasets(records: Sequence) -> set[str]:
    records = ensure_sequence(records)
    return {dataset for _, dataset, _ in well_formed(records)}

def discover_years(records: Sequence) -> list[str]:
    """Distinct embedded years, newest first (fixed-width, so lexical == numeric)."""
    records = ensure_sequence(records)
    years = set()
    for _, _, table_name in well_formed(records):
        year = extract_year(table_name)
        if year is not None:
            years.add(year)
    return sorted(years, reverse=True)
