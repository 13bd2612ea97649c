# uspto_DatasetsCatalog/utils/detect.py
from __future__ import annotations
from pathlib import Path
import csv
from dataclasses import dataclass
from typing import Literal

DetectedKind = Literal["json", "csv", "unknown"]

REQUIRED_COLUMNS = ("path", "table_name")

@dataclass(frozen=True)
class DetectedItem:
    path: Path        # actual path on disk
    kind: DetectedKind

def _csv_has_manifest_header(p: Path) -> bool:
    try:
        with p.open("r", encoding="utf-8", newline="") as f:
            header = next(csv.reader(f), [])
    except (OSError, UnicodeDecodeError, csv.Error):
        return False
    cols = {h.strip() for h in header}
    return all(c in cols for c in REQUIRED_COLUMNS)

def _json_looks_like_manifest(p: Path) -> bool:
    # cheap sniff: a manifest is a JSON array (or an object wrapping one)
    try:
        with p.open("r", encoding="utf-8") as f:
            head = f.read(1024).lstrip()
    except (OSError, UnicodeDecodeError):
        return False
    return head.startswith("[") or head.startswith("{")

def detect_kind(p: Path) -> DetectedKind:
    """
    Classify a single path.
    - .json (array/object)               -> 'json'
    - .csv  (header has path,table_name) -> 'csv'
    else                                 -> 'unknown'
    """
    suffix = p.suffix.lower()
    if suffix == ".json" and _json_looks_like_manifest(p):
        return "json"
    if suffix == ".csv" and _csv_has_manifest_header(p):
        return "csv"
    return "unknown"

def discover_inputs(root: Path, recurse: bool = True) -> list[DetectedItem]:
    """
    If 'root' is a file -> return that one item (if known).
    If 'root' is a folder -> walk (optionally recursively) and collect manifests.
    """
    items: list[DetectedItem] = []
    if root.is_file():
        kind = detect_kind(root)
        if kind != "unknown":
            items.append(DetectedItem(root.resolve(), kind))
        return items
    if not root.exists():
        return items

    it = root.rglob("*") if recurse else root.glob("*")
    for p in it:
        if not p.is_file():
            continue
        kind = detect_kind(p)
        if kind != "unknown":
            items.append(DetectedItem(p.resolve(), kind))

    # deterministic ordering
    items.sort(key=lambda x: (x.kind, str(x.path)))
    return items
