# uspto_DatasetsCatalog/core/plotting.py
from __future__ import annotations
from pathlib import Path
import matplotlib.pyplot as plt
import numpy as np

from .grouping import cells_by_year
from .model import GroupedIndex
from .names import friendly_dataset_name

def yearly_format_counts(index: GroupedIndex, dataset: str) -> dict[str, dict[str, int]]:
    """year -> {"DTA": n_tables, "CSV": n_tables} for one dataset."""
    counts: dict[str, dict[str, int]] = {}
    for items in index.get(dataset, {}).values():
        for year, cell in cells_by_year(items).items():
            if year is None:
                continue
            slot = counts.setdefault(year, {"DTA": 0, "CSV": 0})
            for fmt in cell.formats:
                slot[fmt] += 1
    return counts

def save_availability_plot(index: GroupedIndex, dataset: str, out_dir: Path) -> Path | None:
    name = friendly_dataset_name(dataset)
    counts = yearly_format_counts(index, dataset)
    if not counts:
        print(f"[INFO] {name}: no tables with an embedded year; skipping availability plot.")
        return None
    out_dir.mkdir(parents=True, exist_ok=True)

    years = sorted(counts)
    x = np.arange(len(years))
    width = 0.4

    plt.figure(figsize=(max(6, 0.6 * len(years) + 3), 5))
    plt.bar(x - width / 2, [counts[y]["DTA"] for y in years], width, label="DTA")
    plt.bar(x + width / 2, [counts[y]["CSV"] for y in years], width, label="CSV")
    plt.xticks(x, years, rotation=45)
    plt.xlabel("Year")
    plt.ylabel("Tables available")
    plt.title(f"{name} — tables per year")
    plt.legend()
    plt.grid(True, axis="y", alpha=0.3)
    plt.tight_layout()
    out_png = out_dir / "availability.png"
    plt.savefig(out_png, dpi=160)
    plt.close()
    print(f"[OK] wrote plot: {name} → {out_png}")
    return out_png
