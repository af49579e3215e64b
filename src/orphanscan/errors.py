"""Exception hierarchy for catalog audits.

A scan never degrades a storage failure into "nothing found": doing so would
make every asset look unreferenced. Callers catch :class:`OrphanScanError` to
turn these into an explicit error state.
"""

from __future__ import annotations

__all__ = [
    "OrphanScanError",
    "StorageError",
    "ConfigurationError",
]


class OrphanScanError(RuntimeError):
    """Base exception for catalog audit failures."""


class StorageError(OrphanScanError):
    """Raised when the catalog store cannot be read."""


class ConfigurationError(OrphanScanError):
    """Raised when configuration inputs are invalid."""
