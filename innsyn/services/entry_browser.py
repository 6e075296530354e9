"""
Entry Browser: paged search over journal documents.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from config.settings import settings
from innsyn.database.record_store import (
    ENTRIES_TABLE,
    ENTRY_COLUMNS,
    RecordStore,
    StoreQuery,
    TextSearch,
)
from innsyn.exceptions import StoreError
from innsyn.models.entry_models import Entry, EntryKind
from innsyn.utils.logger import log_performance_metric

logger = logging.getLogger(__name__)

SEARCH_COLUMNS = ("etat", "innhold", "saksnr", "sak_tittel")


@dataclass
class EntryPage:
    """One page of search results"""
    entries: List[Entry] = field(default_factory=list)
    total: int = 0
    page: int = 0
    limit: int = 100
    error_message: Optional[str] = None

    @property
    def offset(self) -> int:
        return self.page * self.limit

    @property
    def first(self) -> int:
        """1-based position of the first row shown, 0 when empty"""
        if not self.entries or self.total == 0:
            return 0
        return min(self.offset + 1, self.total)

    @property
    def last(self) -> int:
        return min(self.offset + len(self.entries), self.total)

    @property
    def has_previous(self) -> bool:
        return self.page > 0

    @property
    def has_next(self) -> bool:
        return self.offset + self.limit < self.total


class EntryBrowser:
    """Searches the ``entries`` table, newest journal date first"""

    def __init__(self, store: RecordStore, page_size: Optional[int] = None):
        self.store = store
        self.page_size = page_size or settings.innsyn.page_size

    async def get(self, entry_id) -> Optional[Entry]:
        """
        Fetch one entry by id.

        Raises:
            StoreError: If the query fails
        """
        query = StoreQuery(table=ENTRIES_TABLE, columns=ENTRY_COLUMNS).where("id", entry_id)
        query.limit = 1
        result = await self.store.select(query)
        if not result.rows:
            return None
        return Entry.model_validate(result.rows[0])

    async def search(
        self,
        query: str = "",
        source_type: Optional[str] = None,
        page: int = 0,
        limit: Optional[int] = None,
    ) -> EntryPage:
        """
        Search journal documents.

        Case folders are excluded. A non-empty term matches authority,
        title, case number or case title, case-insensitively.

        Args:
            query: Free-text term
            source_type: Restrict to one source type
            page: Zero-based page number
            limit: Page size, defaults to the configured page size

        Returns:
            EntryPage; on query failure an empty page with ``error_message``
        """
        limit = limit or self.page_size
        page = max(page, 0)

        store_query = (
            StoreQuery(table=ENTRIES_TABLE, columns=ENTRY_COLUMNS, count=True)
            .where_not("kind", EntryKind.CASE_FOLDER.value)
            .order_by("jdato", ascending=False, nulls_first=False)
            .order_by("hentet_tid", ascending=False, nulls_first=False)
            .page(page * limit, limit)
        )
        if source_type:
            store_query.where("source_type", source_type)
        term = (query or "").strip()
        if term:
            store_query.search = TextSearch(columns=SEARCH_COLUMNS, term=term)

        started = time.monotonic()
        try:
            result = await self.store.select(store_query)
        except StoreError as e:
            logger.error(f"Entry search failed: {e.message}")
            return EntryPage(page=page, limit=limit, error_message=e.message)

        log_performance_metric(
            "entry_search",
            time.monotonic() - started,
            "seconds",
            {"term": term, "source_type": source_type, "page": page},
        )

        entries = [Entry.model_validate(row) for row in result.rows]
        total = result.count if result.count is not None else len(entries)
        return EntryPage(entries=entries, total=total, page=page, limit=limit)
