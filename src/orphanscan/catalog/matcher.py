"""Textual reference detection for catalog assets."""

from __future__ import annotations

import logging
from typing import Callable, List, Tuple

from orphanscan.catalog.storage import SQLiteCatalogStore
from orphanscan.errors import ConfigurationError
from orphanscan.models import UsageVerdict
from orphanscan.utils.text import like_contains, url_basename

LOGGER = logging.getLogger(__name__)

# Record types whose bodies can embed an asset, including prior revisions.
CONTENT_RECORD_TYPES: Tuple[str, ...] = ("post", "page", "attachment", "custom_css", "revision")


class ReferenceMatcher:
    """Decide whether an asset URL is referenced anywhere in the corpus.

    Searches run from strictest to loosest and stop at the first hit:

    1. content bodies containing the full URL
    2. content bodies containing the file name (resized variants, other hosts)
    3. meta values containing the full URL
    4. meta values containing the file name

    The bias is conservative: anything that cannot be assessed is reported as
    :attr:`UsageVerdict.INDETERMINATE`, never as unused. Storage errors
    propagate.
    """

    def __init__(
        self,
        store: SQLiteCatalogStore,
        *,
        record_types: Tuple[str, ...] = CONTENT_RECORD_TYPES,
    ) -> None:
        if not record_types:
            raise ConfigurationError("At least one content record type must be searched")
        self.store = store
        self.record_types = tuple(record_types)

    def assess(self, url: str | None) -> UsageVerdict:
        url = (url or "").strip()
        if not url:
            return UsageVerdict.INDETERMINATE

        for label, search in self._searches(url):
            hits = search()
            if hits > 0:
                LOGGER.debug("%s referenced via %s (%d hits)", url, label, hits)
                return UsageVerdict.IN_USE

        return UsageVerdict.LIKELY_UNUSED

    def is_likely_unused(self, url: str | None) -> bool:
        return self.assess(url) is UsageVerdict.LIKELY_UNUSED

    def _searches(self, url: str) -> List[Tuple[str, Callable[[], int]]]:
        full = like_contains(url)
        basename = url_basename(url)
        loose = like_contains(basename) if basename else None

        searches: List[Tuple[str, Callable[[], int]]] = [
            ("content/url", lambda: self.store.count_content_references(full, self.record_types)),
        ]
        if loose:
            searches.append(
                ("content/basename", lambda: self.store.count_content_references(loose, self.record_types))
            )
        searches.append(("meta/url", lambda: self.store.count_meta_references(full)))
        if loose:
            searches.append(("meta/basename", lambda: self.store.count_meta_references(loose)))
        return searches
