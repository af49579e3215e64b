"""Application configuration defaults."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional

from orphanscan.errors import ConfigurationError

DEFAULT_SCAN_LIMIT = 500
SCAN_LIMIT_ENV = "ORPHANSCAN_SCAN_LIMIT"

LOGGER = logging.getLogger(__name__)

ScanLimitProvider = Callable[[], Optional[int]]


def coerce_scan_limit(limit: int | None) -> int:
    """Return ``limit`` or the default when it is missing or not positive."""
    if limit is None or limit <= 0:
        return DEFAULT_SCAN_LIMIT
    return int(limit)


class EnvScanLimitProvider:
    """Read a scan limit override from an environment variable."""

    def __init__(self, variable: str = SCAN_LIMIT_ENV) -> None:
        self.variable = variable

    def __call__(self) -> int | None:
        raw = os.environ.get(self.variable, "").strip()
        if not raw:
            return None
        try:
            return int(raw)
        except ValueError:
            LOGGER.warning("Ignoring non-integer %s=%r", self.variable, raw)
            return None


def resolve_scan_limit(
    explicit: int | None = None,
    providers: Iterable[ScanLimitProvider] = (),
    fallback: int = DEFAULT_SCAN_LIMIT,
) -> int:
    """Pick the batch limit for one scan.

    An explicit value wins; otherwise the first provider returning a value is
    used, then ``fallback`` (normally ``AppConfig.scan_limit``). The result is
    always coerced to a positive integer.
    """
    if explicit is not None:
        return coerce_scan_limit(explicit)
    for provider in providers:
        value = provider()
        if value is not None:
            return coerce_scan_limit(value)
    return coerce_scan_limit(fallback)


@dataclass(slots=True)
class AppConfig:
    db_path: Path = Path("data/catalog.db")
    uploads_dir: Path = Path("uploads")
    base_url: str = "/uploads"
    scan_limit: int = DEFAULT_SCAN_LIMIT

    def __post_init__(self) -> None:
        if not isinstance(self.scan_limit, int) or isinstance(self.scan_limit, bool):
            raise ConfigurationError(f"scan_limit must be an integer, got {self.scan_limit!r}")
        self.scan_limit = coerce_scan_limit(self.scan_limit)

    def resolve_db_path(self, base_dir: Path | None = None) -> Path:
        return _resolve(Path(self.db_path), base_dir)

    def resolve_uploads_dir(self, base_dir: Path | None = None) -> Path:
        return _resolve(Path(self.uploads_dir), base_dir)


def _resolve(path: Path, base_dir: Path | None) -> Path:
    if path.is_absolute() or base_dir is None:
        return path
    return base_dir / path
