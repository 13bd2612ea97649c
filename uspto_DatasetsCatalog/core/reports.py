# uspto_DatasetsCatalog/core/reports.py
from __future__ import annotations
from pathlib import Path
from typing import Literal
import pandas as pd

from .grouping import ALL_YEARS, cells_by_year, has_items_for_year, sorted_cell_years
from .model import GroupedIndex
from .names import friendly_dataset_name, friendly_table_name

ReportFormat = Literal["csv", "dta", "both"]

CATALOG_COLUMNS = [
    "dataset", "dataset_name", "table_base", "table_display",
    "year", "format", "shareable_link",
]

def catalog_frame(index: GroupedIndex, dataset: str | None = None) -> pd.DataFrame:
    """One row per classified record, optionally limited to one dataset."""
    rows: list[dict] = []
    for ds, tables in index.items():
        if dataset is not None and ds != dataset:
            continue
        for base, items in tables.items():
            for item in items:
                rows.append({
                    "dataset": ds,
                    "dataset_name": friendly_dataset_name(ds),
                    "table_base": base,
                    "table_display": friendly_table_name(base),
                    "year": item.year,
                    "format": item.format,
                    "shareable_link": item.shareable_link,
                })
    return pd.DataFrame(rows, columns=CATALOG_COLUMNS)

def _cell_label(cell) -> str:
    return "+".join(cell.formats)

def availability_frame(index: GroupedIndex, dataset: str,
                       year_or_all: str = ALL_YEARS) -> pd.DataFrame:
    """
    Table x year matrix for one dataset. Cells read "DTA", "CSV", "DTA+CSV"
    or "" (nothing downloadable). Years run newest first; tables filtered by
    year_or_all the same way the year dropdown filters the accordions.
    """
    tables = index.get(dataset, {})
    rows: list[dict] = []
    all_years: set[str] = set()
    for base in sorted(tables):
        items = tables[base]
        if not has_items_for_year(items, year_or_all):
            continue
        cells = cells_by_year(items)
        row = {"table": friendly_table_name(base)}
        for year in sorted_cell_years(cells):
            if year is None:
                continue
            if year_or_all != ALL_YEARS and year != year_or_all:
                continue
            row[year] = _cell_label(cells[year])
            all_years.add(year)
        rows.append(row)

    cols = ["table"] + sorted(all_years, reverse=True)
    return pd.DataFrame(rows, columns=cols).fillna("")

def _write_csv(df_out: pd.DataFrame, out_csv: Path, title: str) -> None:
    out_csv.parent.mkdir(parents=True, exist_ok=True)
    df_out.to_csv(out_csv, index=False, encoding="utf-8")
    print(f"[OK] wrote report: {title} → {out_csv}")

def _stata_safe(df_out: pd.DataFrame) -> pd.DataFrame:
    """
    Stata wants string columns without missing values and variable names that
    start with a letter (year columns like "2019" become "y2019").
    """
    df = df_out.copy()
    df.columns = [c if str(c)[:1].isalpha() else f"y{c}" for c in df.columns]
    for c in df.columns:
        df[c] = df[c].fillna("").astype(str)
    return df

def _write_dta(df_out: pd.DataFrame, out_dta: Path, title: str) -> None:
    if df_out.empty:
        print(f"[INFO] {title}: no rows; skipping {out_dta.name}.")
        return
    out_dta.parent.mkdir(parents=True, exist_ok=True)
    df = _stata_safe(df_out)
    strl = [c for c in df.columns if c == "shareable_link"]
    df.to_stata(out_dta, write_index=False, version=118, convert_strl=strl)
    print(f"[OK] wrote report: {title} → {out_dta}")

def _write(df_out: pd.DataFrame, out_base: Path, title: str, fmt: ReportFormat) -> None:
    if fmt in ("csv", "both"):
        _write_csv(df_out, out_base.with_suffix(".csv"), title)
    if fmt in ("dta", "both"):
        _write_dta(df_out, out_base.with_suffix(".dta"), title)

def write_catalog_report(index: GroupedIndex,
                         dataset: str,
                         out_dir: Path,
                         fmt: ReportFormat = "csv",
                         year_or_all: str = ALL_YEARS) -> None:
    """
    Write catalog + availability report(s) for one dataset.
    - out_dir: per-dataset folder; files are catalog.<ext> and availability.<ext>
    - fmt: "csv" | "dta" | "both"
    """
    if dataset not in index:
        return
    name = friendly_dataset_name(dataset)

    df_cat = catalog_frame(index, dataset)
    if year_or_all != ALL_YEARS:
        df_cat = df_cat[df_cat["year"] == year_or_all].reset_index(drop=True)
    _write(df_cat, out_dir / "catalog", f"{name} catalog", fmt)

    df_av = availability_frame(index, dataset, year_or_all)
    _write(df_av, out_dir / "availability", f"{name} availability", fmt)
