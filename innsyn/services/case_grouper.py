"""
Case Grouper: collects the documents belonging to the same case.

A case is identified by (authority, case key). Documents are fetched on
demand for a focal entry and cached for the lifetime of the grouper.
"""

import logging
from functools import cmp_to_key
from typing import Dict, List, Optional, Set, Tuple

from innsyn.database.record_store import (
    CASE_DOCUMENT_COLUMNS,
    ENTRIES_TABLE,
    RecordStore,
    StoreQuery,
)
from innsyn.exceptions import StoreError
from innsyn.models.entry_models import Entry
from innsyn.utils.dates import parse_date

logger = logging.getLogger(__name__)

CaseKey = Tuple[str, str]

UNKNOWN_FETCH_ERROR = "Ukjent feil ved henting av saken"


def _compare_journal_dates(a: Entry, b: Entry) -> int:
    date_a = parse_date(a.journal_date)
    date_b = parse_date(b.journal_date)
    if date_a is None and date_b is None:
        return 0
    if date_a is None:
        return 1
    if date_b is None:
        return -1
    return (date_a > date_b) - (date_a < date_b)


def _compare_document_numbers(a: Entry, b: Entry) -> int:
    num_a = "" if a.document_number is None else str(a.document_number).strip()
    num_b = "" if b.document_number is None else str(b.document_number).strip()
    if not num_a and not num_b:
        return 0
    if not num_a:
        return 1
    if not num_b:
        return -1
    if num_a.isdigit() and num_b.isdigit():
        return (int(num_a) > int(num_b)) - (int(num_a) < int(num_b))
    return (num_a > num_b) - (num_a < num_b)


def _compare_case_documents(a: Entry, b: Entry) -> int:
    return _compare_journal_dates(a, b) or _compare_document_numbers(a, b)


def sort_case_documents(entries: List[Entry]) -> List[Entry]:
    """
    Order documents within a case.

    Ascending journal date with undated documents after dated ones, ties
    broken by ascending document number (missing numbers last).
    """
    return sorted(entries, key=cmp_to_key(_compare_case_documents))


class CaseGrouper:
    """Fetches, orders and caches the documents of a case"""

    def __init__(self, store: RecordStore):
        """
        Initialize the grouper.

        Args:
            store: Record store holding the ``entries`` table
        """
        self.store = store
        self._cache: Dict[CaseKey, List[Entry]] = {}
        self._in_flight: Set[CaseKey] = set()
        self._errors: Dict[CaseKey, str] = {}

    @staticmethod
    def key_for(entry: Entry) -> Optional[CaseKey]:
        """Case identity of an entry, or None when it cannot be grouped."""
        authority = (entry.authority or "").strip()
        case_key = entry.case_key
        if not authority or not case_key:
            return None
        return (authority, case_key)

    def begin_fetch(self, key: CaseKey) -> bool:
        """Claim the fetch slot for ``key``; False if one is already running."""
        if key in self._in_flight:
            return False
        self._in_flight.add(key)
        return True

    def end_fetch(self, key: CaseKey) -> None:
        self._in_flight.discard(key)

    def is_loading(self, key: CaseKey) -> bool:
        return key in self._in_flight

    def error_for(self, key: CaseKey) -> Optional[str]:
        return self._errors.get(key)

    def cached(self, key: CaseKey) -> Optional[List[Entry]]:
        return self._cache.get(key)

    async def load_case_for_entry(self, entry: Entry) -> List[Entry]:
        """
        Return the ordered documents of the entry's case.

        Entries without authority or case key return an empty list without
        querying. A trigger while the same case is being fetched is ignored.
        Store failures are recorded per case (see ``error_for``) and an empty
        list is returned.

        Args:
            entry: Focal entry

        Returns:
            Ordered case documents
        """
        key = self.key_for(entry)
        if key is None:
            return []

        if key in self._cache:
            return self._cache[key]

        if not self.begin_fetch(key):
            logger.debug(f"Fetch for case {key} already in flight, ignoring trigger")
            return []

        self._errors.pop(key, None)
        authority, case_key = key
        try:
            query = (
                StoreQuery(table=ENTRIES_TABLE, columns=CASE_DOCUMENT_COLUMNS)
                .where("etat", authority)
                .where("sak_key", case_key)
            )
            result = await self.store.select(query)
            documents = sort_case_documents([Entry.model_validate(row) for row in result.rows])
            self._cache[key] = documents
            logger.info(f"Loaded {len(documents)} documents for case {case_key} ({authority})")
            return documents
        except StoreError as e:
            self._errors[key] = e.message or UNKNOWN_FETCH_ERROR
            logger.error(f"Failed to load case {case_key} ({authority}): {e.message}")
            return []
        finally:
            self.end_fetch(key)

    def case_title(self, entry: Entry) -> Optional[str]:
        """First non-empty case title among the case documents, else the entry's own."""
        key = self.key_for(entry)
        documents = self._cache.get(key, []) if key else []
        for document in documents:
            if document.case_title and document.case_title.strip():
                return document.case_title
        return entry.case_title or entry.title
