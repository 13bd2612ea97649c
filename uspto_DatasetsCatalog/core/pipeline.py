# uspto_DatasetsCatalog/core/pipeline.py
from __future__ import annotations
from pathlib import Path
import string
from typing import Sequence

from . import grouping, names
from .discover import discover_years, ensure_sequence
from .grouping import ALL_YEARS, build_index
from .model import GroupedIndex
from .plotting import save_availability_plot
from .reports import catalog_frame, write_catalog_report

CATALOG_FILE = "catalog.csv"
_SAFE_CHARS = frozenset(string.ascii_letters + string.digits + "-_.")

def dataset_dirname(dataset: str) -> str:
    """
    Folder name for a dataset id. Anything outside [A-Za-z0-9._-] becomes "_",
    and names that are empty or start with "." ("", ".", "..") get a "_" prefix.
    """
    slug = "".join(c if c in _SAFE_CHARS else "_" for c in dataset)
    if not slug or slug.startswith("."):
        slug = "_" + slug
    return slug

def dataset_dirs(datasets, out_root: Path) -> dict[str, Path]:
    """Map each dataset to its own folder directly under out_root; collisions get a -2, -3, ... suffix."""
    root = out_root.resolve()
    taken = {CATALOG_FILE.lower()}
    dirs: dict[str, Path] = {}
    for dataset in datasets:
        base = dataset_dirname(dataset)
        name, k = base, 1
        while name.lower() in taken:
            k += 1
            name = f"{base}-{k}"
        taken.add(name.lower())
        ds_dir = (root / name).resolve()
        if ds_dir.parent != root:
            raise ValueError(f"dataset folder for {dataset!r} escapes output root: {ds_dir}")
        dirs[dataset] = ds_dir
    return dirs

def _section(cfg: dict, name: str) -> dict:
    # "reports:" with nothing under it parses to None
    return cfg.get(name, {}) or {}

def _year_filter(cfg: dict, known_years: list[str]) -> str:
    year = str(_section(cfg, "catalog").get("year_filter", ALL_YEARS)).strip()
    if year != ALL_YEARS and year not in known_years:
        print(f"[WARN] year_filter={year} not present in input; reports will be empty.")
    return year

def run_catalog(records: Sequence, cfg: dict, out_root: Path) -> GroupedIndex:
    cfg = cfg or {}
    records = ensure_sequence(records)
    grouping.configure_from_config(cfg)
    names.configure_from_config(cfg)

    index = build_index(records)
    years = discover_years(records)
    year = _year_filter(cfg, years)

    fmt = str(_section(cfg, "reports").get("format", "csv")).lower()
    if fmt not in ("csv", "dta", "both"):
        print(f"[WARN] unknown report format '{fmt}', falling back to csv.")
        fmt = "csv"
    plots_enabled = bool(_section(cfg, "plots").get("enabled", True))

    out_root.mkdir(parents=True, exist_ok=True)
    if index:
        df_all = catalog_frame(index)
        df_all.to_csv(out_root / CATALOG_FILE, index=False, encoding="utf-8")
        print(f"[OK] wrote catalog: {len(df_all)} file(s) across {len(index)} dataset(s) → {out_root / CATALOG_FILE}")
    else:
        print("[INFO] no well-formed records; nothing to catalog.")

    ds_dirs = dataset_dirs(index, out_root)
    for dataset in index:
        ds_dir = ds_dirs[dataset]
        write_catalog_report(index, dataset, ds_dir, fmt=fmt, year_or_all=year)
        if plots_enabled:
            save_availability_plot(index, dataset, ds_dir)

    return index
