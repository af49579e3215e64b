"""Bounded media catalog scan."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from orphanscan.catalog.locator import AssetLocator
from orphanscan.catalog.matcher import ReferenceMatcher
from orphanscan.catalog.storage import SQLiteCatalogStore
from orphanscan.config import coerce_scan_limit
from orphanscan.models import Asset, AssetSummary, MissingFile, ScanResult, UsageVerdict
from orphanscan.utils.files import file_exists

LOGGER = logging.getLogger(__name__)


class BatchScanner:
    """Classify the newest catalog entries.

    Only ``limit`` assets are examined per run, newest identifier first, so a
    large catalog is covered partially; ``ScanResult.total_assets`` discloses
    how much was left out.
    """

    def __init__(
        self,
        store: SQLiteCatalogStore,
        locator: AssetLocator,
        *,
        matcher: ReferenceMatcher | None = None,
        exists: Callable[[Path | None], bool] = file_exists,
    ) -> None:
        self.store = store
        self.locator = locator
        self.matcher = matcher if matcher is not None else ReferenceMatcher(store)
        self.exists = exists

    def scan(self, limit: int | None = None) -> ScanResult:
        limit = coerce_scan_limit(limit)
        result = ScanResult(total_assets=self.store.count_assets(), limit=limit)

        assets = self.store.fetch_recent_assets(limit)
        result.scanned = len(assets)
        LOGGER.info("Scanning %d of %d assets", result.scanned, result.total_assets)

        for asset in assets:
            self._classify(asset, result)

        LOGGER.info(
            "Missing: %d, unattached: %d, unused: %d, undetermined: %d",
            len(result.missing_files),
            len(result.unattached),
            len(result.unused),
            len(result.undetermined),
        )
        return result

    def _classify(self, asset: Asset, result: ScanResult) -> None:
        path = self.locator.stored_path(asset)
        url = self.locator.canonical_url(asset)
        present = self.exists(path)

        if not present:
            LOGGER.debug("Asset %d: file missing at %s", asset.id, path)
            result.missing_files.append(
                MissingFile(
                    id=asset.id,
                    title=asset.title,
                    mime_type=asset.mime_type,
                    file_path=str(path) if path is not None else None,
                    url=url,
                )
            )

        if asset.is_attached:
            return

        summary = AssetSummary(id=asset.id, title=asset.title, mime_type=asset.mime_type, url=url)
        result.unattached.append(summary)

        # No point looking for references to a file that is not there.
        if not present:
            return

        verdict = self.matcher.assess(url)
        LOGGER.debug("Asset %d: %s", asset.id, verdict.value)
        if verdict is UsageVerdict.LIKELY_UNUSED:
            result.unused.append(summary)
        elif verdict is UsageVerdict.INDETERMINATE:
            result.undetermined.append(summary)
