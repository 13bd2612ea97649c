# uspto_DatasetsCatalog/core/names.py
from __future__ import annotations
import logging
from enum import Enum
from typing import Iterable, Mapping, Optional

_LOG = logging.getLogger(__name__)

class KnownDataset(str, Enum):
    PATENT_ASSIGNMENT = "patent-assignment-dataset"
    PATENT_CLAIMS = "patent-claims-research-dataset"
    PATENT_EXAMINATION = "patent-examination-research-dataset-public-pair"

DEFAULT_DATASET_NAMES: dict[KnownDataset, str] = {
    KnownDataset.PATENT_ASSIGNMENT: "Patent Assignment Dataset",
    KnownDataset.PATENT_CLAIMS: "Patent Claims Research Dataset",
    KnownDataset.PATENT_EXAMINATION: "Patent Examination Research Dataset (Public PAIR)",
}

# ----- defaults (used if configure_from_config isn't called) -----
_DATASET_NAMES: dict[str, str] = {}

def configure_from_config(cfg: dict) -> None:
    """
    Optional: apply catalog.dataset_names overrides from config.yaml.
    Keys may be known or unknown dataset ids.
    """
    global _DATASET_NAMES
    _DATASET_NAMES = {}
    cat = (cfg or {}).get("catalog", {}) or {}
    overrides = cat.get("dataset_names", None)
    if isinstance(overrides, Mapping):
        for k, v in overrides.items():
            if v is None or not str(v).strip():
                continue
            _DATASET_NAMES[str(k)] = str(v).strip()
        _LOG.debug("dataset name overrides: %s", sorted(_DATASET_NAMES))

def known_dataset(dataset_id: str) -> Optional[KnownDataset]:
    try:
        return KnownDataset(dataset_id)
    except ValueError:
        return None

def friendly_dataset_name(dataset_id: str) -> str:
    """Known ids map to their published names; anything else passes through."""
    if dataset_id in _DATASET_NAMES:
        return _DATASET_NAMES[dataset_id]
    kind = known_dataset(dataset_id)
    if kind is None:
        return dataset_id
    return DEFAULT_DATASET_NAMES[kind]

def friendly_table_name(base: str) -> str:
    # "patent_claims  summary" -> "Patent Claims Summary"
    if not base:
        return ""
    words = base.replace("_", " ").split()
    return " ".join(w[:1].upper() + w[1:].lower() for w in words)

def ordered_datasets(dataset_ids: Iterable[str]) -> list[str]:
    """Known datasets first in their fixed order, then unknown ids alphabetically."""
    present = set(dataset_ids)
    known = [k.value for k in KnownDataset if k.value in present]
    unknown = sorted(d for d in present if known_dataset(d) is None)
    return known + unknown
