# uspto_DatasetsCatalog/loaders/manifest_loader.py
from __future__ import annotations
import io
import json
import logging
from pathlib import Path
import pandas as pd

_LOG = logging.getLogger(__name__)

class ManifestError(ValueError):
    """A manifest could not be read or does not hold a list of records."""

def _records_from_frame(df: pd.DataFrame) -> list[dict]:
    # NaN/NA -> None so the engine sees missing fields, not floats
    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict(orient="records")

def _load_json(path: Path) -> list[dict]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"{path.name}: cannot read manifest ({e})") from e
    except json.JSONDecodeError as e:
        raise ManifestError(f"{path.name}: invalid JSON ({e})") from e
    if isinstance(data, dict):
        # {"files": [...]} style wrappers
        for key in ("files", "records", "items", "data"):
            if isinstance(data.get(key), list):
                data = data[key]
                break
    if not isinstance(data, list):
        raise ManifestError(f"{path.name}: expected a JSON array of records, got {type(data).__name__}")
    records = [r for r in data if isinstance(r, dict)]
    if len(records) != len(data):
        _LOG.info("%s: dropped %d non-object entr(ies)", path.name, len(data) - len(records))
    return records

def _load_csv(path: Path) -> list[dict]:
    try:
        raw = path.read_bytes()
        df = pd.read_csv(io.BytesIO(raw), dtype=str, keep_default_na=False, na_values=[""])
    except OSError as e:
        raise ManifestError(f"{path.name}: cannot read manifest ({e})") from e
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise ManifestError(f"{path.name}: invalid CSV ({e})") from e
    except pd.errors.EmptyDataError:
        return []
    df.columns = [str(c).strip() for c in df.columns]
    return _records_from_frame(df)

def load(path: Path) -> list[dict]:
    """
    Accepts: uspto_links.json (array of {path, table_name, shareable_link, ...})
             or a .csv manifest with the same columns.
    Returns: list of plain dict records, in file order.
    """
    suffix = path.suffix.lower()
    if suffix == ".json":
        records = _load_json(path)
    elif suffix == ".csv":
        records = _load_csv(path)
    else:
        raise ManifestError(f"{path.name}: unsupported manifest type '{suffix}'")
    _LOG.info("loaded %d record(s) from %s", len(records), path.name)
    return records
