"""
Fetch metadata for many entries, one at a time, filling only their empty fields.
"""

import logging
import time
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel

from catalog.entries import update_entry
from catalog.errors import CatalogError
from catalog.media_apis import fetch_metadata
from catalog.metadata_merge import metadata_updates
from catalog.store import JsonStore

logger = logging.getLogger(__name__)

DEFAULT_DELAY_SECONDS = 0.2


class BatchSummary(BaseModel):
    """Counts of how each entry in a batch fared."""

    updated: int = 0
    unchanged: int = 0
    failed: int = 0
    skipped: int = 0

    def message(self) -> str:
        """Summary for the notification shown when the batch finishes."""
        if self.updated:
            failed_text = f", {self.failed} failed" if self.failed else ""
            return f"Fetched metadata for {self.updated} items{failed_text}"
        if self.failed:
            return f"Failed to fetch metadata for {self.failed} items"
        return "No entries needed new metadata"


def fetch_metadata_for_entries(
    store: JsonStore,
    entries: List[Dict],
    fetcher: Callable[..., Dict] = fetch_metadata,
    delay_seconds: float = DEFAULT_DELAY_SECONDS,
    on_progress: Optional[Callable[[int, int], None]] = None,
) -> BatchSummary:
    """
    Fetch and store metadata for each entry in turn.

    Entries without a title are skipped.  A failure for one entry is counted and the
    loop carries on with the rest.

    Args:
        store: The table store to write updates to
        entries: Entries to enrich
        fetcher: Function looking up metadata for a title, medium and season
        delay_seconds: Pause between entries to stay within API rate limits
        on_progress: Optional callback receiving (completed, total)

    Returns:
        BatchSummary of updated, unchanged, failed and skipped counts
    """
    summary = BatchSummary()
    total = len(entries)

    for index, entry in enumerate(entries):
        title = (entry.get("title") or "").strip()
        if not title:
            summary.skipped += 1
        else:
            try:
                metadata = fetcher(
                    title=title,
                    medium=entry.get("medium"),
                    season=entry.get("season"),
                )
                updates = metadata_updates(entry, metadata)
                if updates:
                    update_entry(store, entry["id"], updates)
                    summary.updated += 1
                else:
                    summary.unchanged += 1
            except CatalogError as e:
                logger.warning("Failed to fetch metadata for '%s': %s", title, e)
                summary.failed += 1

        if on_progress:
            on_progress(index + 1, total)
        if title and index < total - 1:
            time.sleep(delay_seconds)

    logger.info("Batch metadata fetch finished: %s", summary.message())
    return summary
