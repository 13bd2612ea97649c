# uspto_DatasetsCatalog/core/model.py
from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal, Mapping, Optional

FileFormat = Literal["DTA", "CSV"]

@dataclass(frozen=True)
class RawRecord:
    path: str                 # e.g. patent-claims-research-dataset/claims/...
    table_name: str           # e.g. "Claims Summary 2019 DTA"
    shareable_link: str = ""  # passed through, never dereferenced
    extra: Mapping = field(default_factory=lambda: MappingProxyType({}), hash=False)

@dataclass(frozen=True)
class Facet:
    year: Optional[str] = None          # "2000".."2099"
    format: Optional[FileFormat] = None

@dataclass(frozen=True)
class ClassifiedRecord:
    path: str
    table_name: str
    shareable_link: Optional[str]
    table_base: str
    year: Optional[str]
    format: Optional[FileFormat]
    extra: Mapping = field(default_factory=lambda: MappingProxyType({}), hash=False)

    @property
    def facet(self) -> Facet:
        return Facet(self.year, self.format)

    @property
    def dataset(self) -> str:
        return self.path.split("/", 1)[0]

@dataclass(frozen=True)
class FormatCell:
    DTA: Optional[ClassifiedRecord] = None
    CSV: Optional[ClassifiedRecord] = None

    def get(self, fmt: str) -> Optional[ClassifiedRecord]:
        return getattr(self, fmt, None) if fmt in ("DTA", "CSV") else None

    @property
    def formats(self) -> tuple[str, ...]:
        return tuple(f for f in ("DTA", "CSV") if getattr(self, f) is not None)

# dataset id -> table base -> items (input order)
GroupedIndex = dict[str, dict[str, tuple[ClassifiedRecord, ...]]]
