"""Derive the on-disk path and public URL of an asset."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from orphanscan.models import Asset


class AssetLocator:
    """Map an asset's stored file onto the uploads directory and base URL.

    ``stored_file`` is normally relative to the uploads directory. Absolute
    values are used as-is for the path; their URL is only derivable when they
    live under the uploads directory.
    """

    def __init__(self, uploads_dir: Path, base_url: str) -> None:
        self.uploads_dir = Path(uploads_dir)
        self.base_url = base_url.rstrip("/")

    def stored_path(self, asset: Asset) -> Path | None:
        stored = (asset.stored_file or "").strip()
        if not stored:
            return None
        path = Path(stored)
        if path.is_absolute():
            return path
        return self.uploads_dir / path

    def canonical_url(self, asset: Asset) -> str:
        relative = self._relative_file(asset)
        if relative is None:
            return ""
        return f"{self.base_url}/{relative}"

    def _relative_file(self, asset: Asset) -> str | None:
        stored = (asset.stored_file or "").strip()
        if not stored:
            return None
        path = Path(stored)
        if path.is_absolute():
            try:
                path = path.relative_to(self.uploads_dir)
            except ValueError:
                return None
        return str(PurePosixPath(*path.parts))
