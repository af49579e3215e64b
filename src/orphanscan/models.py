"""Core catalog data models."""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List


@dataclass(slots=True)
class Asset:
    """One media catalog entry."""

    id: int
    title: str
    mime_type: str
    parent_id: int | None = None
    stored_file: str | None = None

    @property
    def is_attached(self) -> bool:
        return self.parent_id is not None


@dataclass(slots=True)
class ContentRecord:
    """Searchable text-bearing document (post, page, stylesheet, revision...)."""

    record_type: str
    body: str


@dataclass(slots=True)
class MetaRecord:
    """Key/value annotation attached to any owning entity."""

    owner_kind: str
    owner_id: int
    meta_key: str
    meta_value: str


class UsageVerdict(enum.Enum):
    IN_USE = "in_use"
    LIKELY_UNUSED = "likely_unused"
    INDETERMINATE = "indeterminate"


@dataclass(slots=True, frozen=True)
class MissingFile:
    id: int
    title: str
    mime_type: str
    file_path: str | None
    url: str


@dataclass(slots=True, frozen=True)
class AssetSummary:
    id: int
    title: str
    mime_type: str
    url: str


@dataclass(slots=True)
class ScanResult:
    """Outcome of one bounded scan. Plain data only, no formatting."""

    total_assets: int = 0
    scanned: int = 0
    limit: int = 0
    missing_files: List[MissingFile] = field(default_factory=list)
    unattached: List[AssetSummary] = field(default_factory=list)
    unused: List[AssetSummary] = field(default_factory=list)
    undetermined: List[AssetSummary] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return self.scanned < self.total_assets

    def counts(self) -> Dict[str, int]:
        return {
            "total_assets": self.total_assets,
            "scanned": self.scanned,
            "missing_files": len(self.missing_files),
            "unattached": len(self.unattached),
            "unused": len(self.unused),
            "undetermined": len(self.undetermined),
        }

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["counts"] = self.counts()
        return data
