# uspto_DatasetsCatalog/main.py
from __future__ import annotations
from pathlib import Path
import logging
import sys
import yaml

from .core.pipeline import run_catalog
from .core.views import dataset_tabs
from .loaders import manifest_loader
from .loaders.manifest_loader import ManifestError
from .utils.detect import discover_inputs

def load_config(cfg_path: Path) -> dict:
    with cfg_path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}

def main(argv: list[str] | None = None):
    argv = sys.argv[1:] if argv is None else argv

    # ---------- config ----------
    here = Path(__file__).resolve().parent
    cfg_path = Path(argv[0]).resolve() if argv else here / "config.yaml"
    cfg = load_config(cfg_path)

    in_path = Path(cfg["input"]["path"])
    if not in_path.is_absolute():
        in_path = (cfg_path.parent / in_path).resolve()
    recurse = bool(cfg["input"].get("recurse", True))
    out_root = Path(cfg["output"]["root"])
    if not out_root.is_absolute():
        out_root = (cfg_path.parent / out_root).resolve()

    verbose = bool((cfg.get("logging", {}) or {}).get("verbose", True))
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if verbose:
        print(f"[cfg] input={in_path} (recurse={recurse})")
        print(f"[cfg] output={out_root}")

    # ---------- discover ----------
    detected = discover_inputs(in_path, recurse=recurse)
    if not detected:
        print(f"[INFO] No JSON/CSV manifests found under: {in_path}")
        return 0
    if verbose:
        kinds: dict[str, int] = {}
        for d in detected:
            kinds.setdefault(d.kind, 0)
            kinds[d.kind] += 1
        print(f"[detector] found {sum(kinds.values())} manifest(s) → {kinds}")

    # ---------- load ----------
    records: list[dict] = []
    for item in detected:
        if verbose:
            print(f"  [load] {item.kind:5} {item.path.name}")
        try:
            records.extend(manifest_loader.load(item.path))
        except ManifestError as e:
            print(f"[WARN] manifest skipped: {e}")

    if not records:
        print("[INFO] No records loaded; exiting without building the catalog.")
        return 0

    # ---------- catalog ----------
    index = run_catalog(records, cfg, out_root)

    if verbose:
        for tab in dataset_tabs(records):
            tables = index.get(tab.id, {})
            n_files = sum(len(items) for items in tables.values())
            print(f"[summary] {tab.name} ({tab.id}): {len(tables)} table(s), {n_files} file(s)")
    return 0

if __name__ == "__main__":
    sys.exit(main())
