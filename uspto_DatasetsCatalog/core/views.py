# uspto_DatasetsCatalog/core/views.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence

from .discover import discover_datasets, discover_years
from .grouping import ALL_YEARS
from .model import ClassifiedRecord
from .names import friendly_dataset_name, ordered_datasets

@dataclass(frozen=True)
class DatasetTab:
    id: str
    name: str

def dataset_tabs(records: Sequence) -> list[DatasetTab]:
    return [DatasetTab(d, friendly_dataset_name(d)) for d in ordered_datasets(discover_datasets(records))]

def default_dataset(records: Sequence) -> Optional[str]:
    """The tab shown first, or None when nothing was discovered."""
    tabs = dataset_tabs(records)
    return tabs[0].id if tabs else None

def year_options(records: Sequence) -> list[str]:
    return [ALL_YEARS, *discover_years(records)]

def download_link(item: Optional[ClassifiedRecord]) -> Optional[str]:
    # the link is handed over as-is; empty or missing means nothing to open
    if item is None:
        return None
    link = item.shareable_link
    if not isinstance(link, str) or not link:
        return None
    return link
