"""
Tracks which entries the current user has already requested.
"""

import logging
from typing import Any, Optional, Set

from config.settings import settings
from innsyn.database.record_store import REQUESTS_TABLE, RecordStore, StoreQuery
from innsyn.exceptions import StoreError
from innsyn.models.entry_models import Entry
from innsyn.models.request_models import request_key
from innsyn.services.session_context import SessionContext

logger = logging.getLogger(__name__)


class RequestDeduplicator:
    """
    Membership set of ``"<source>:<source_entry_id>"`` keys for one request type.

    ``reload`` replaces the set with what the store holds; ``mark_requested``
    adds a key optimistically after a successful creation.
    """

    def __init__(
        self,
        store: RecordStore,
        session: SessionContext,
        request_type: Optional[str] = None,
        source: Optional[str] = None,
    ):
        self.store = store
        self.session = session
        self.request_type = request_type or settings.innsyn.default_request_type
        self.source = source or settings.innsyn.request_source
        self._keys: Set[str] = set()
        self.error_message: Optional[str] = None

    @property
    def keys(self) -> Set[str]:
        return set(self._keys)

    async def reload(self) -> Set[str]:
        """
        Replace the membership set with the user's stored requests.

        Without a user the set is emptied. Query failures keep the current
        set and set ``error_message``.
        """
        if not self.session.user_id:
            self._keys = set()
            return self.keys

        query = (
            StoreQuery(table=REQUESTS_TABLE, columns="source, source_entry_id")
            .where("user_id", self.session.user_id)
            .where("type", self.request_type)
        )
        try:
            result = await self.store.select(query)
        except StoreError as e:
            logger.error(f"Could not load requested entries for {self.session.user_id}: {e.message}")
            self.error_message = e.message
            return self.keys

        keys = set()
        for row in result.rows:
            key = request_key(row.get("source"), row.get("source_entry_id"))
            if key is not None:
                keys.add(key)

        self._keys = keys
        self.error_message = None
        logger.debug(f"Deduplicator loaded {len(keys)} requested entries")
        return self.keys

    def mark_requested(self, source: str, source_entry_id: Any) -> None:
        key = request_key(source, source_entry_id)
        if key is not None:
            self._keys.add(key)

    def is_requested(self, entry: Entry) -> bool:
        """True when a request of this type exists for the entry."""
        if entry.id is None or entry.id == "":
            return False
        return request_key(self.source, entry.id) in self._keys
