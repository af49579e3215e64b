"""Utility helpers for working with files."""

from __future__ import annotations

import os
from pathlib import Path


def file_exists(stored_path: str | os.PathLike[str] | None) -> bool:
    """Return True when ``stored_path`` names a readable regular file.

    Absence is a normal outcome: empty paths and unreadable or vanished files
    all report False. The answer is only valid at the moment of the call.
    """
    if stored_path is None:
        return False
    raw = os.fspath(stored_path)
    if not raw.strip():
        return False
    path = Path(raw)
    try:
        return path.is_file() and os.access(path, os.R_OK)
    except (OSError, ValueError):
        return False
