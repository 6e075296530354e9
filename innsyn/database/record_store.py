"""
Record store contract shared by the Supabase and SQL backends.

Services build a ``StoreQuery`` and hand it to whichever backend the
application was configured with. Backends translate every failure into
``StoreError`` so callers only handle one exception type.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

# Table and view names in the store
ENTRIES_TABLE = "entries"
RECOMMENDED_ENTRIES_VIEW = "recommended_entries"
RECOMMENDED_JOBS_VIEW = "innherred_recommended_jobs"
REQUESTS_TABLE = "innsyn_requests"
EVENTS_TABLE = "entry_events"
PROFILES_TABLE = "profiles"

ENTRY_COLUMNS = (
    "uid, id, etat, innhold, saksnr, sak_key, doknr, sak_tittel, jdato, dokdato, "
    "source_type, source_url, avsmot, betegnelse, aar, sekvens, tilgangskode, "
    "hentet_tid, kind, extra"
)
CASE_DOCUMENT_COLUMNS = (
    "uid, id, etat, innhold, saksnr, sak_key, doknr, sak_tittel, jdato, dokdato, avsmot, kind"
)
REQUEST_COLUMNS = (
    "id, user_id, type, source, source_entry_id, etat, recipient_email, subject, body, "
    "sent_at, status, outcome, remind_at, created_at, updated_at"
)
RECOMMENDED_COLUMNS = "id, etat, innhold, saksnr, jdato_date, avsmot, kw_score"


@dataclass
class OrderBy:
    """One ordering term; ``nulls_first`` controls null placement explicitly"""
    column: str
    ascending: bool = True
    nulls_first: bool = False


@dataclass
class TextSearch:
    """Case-insensitive substring match of ``term`` against any of ``columns``"""
    columns: Sequence[str]
    term: str


@dataclass
class StoreQuery:
    """Declarative select against one table or view"""
    table: str
    columns: str = "*"
    eq: Dict[str, Any] = field(default_factory=dict)
    neq: Dict[str, Any] = field(default_factory=dict)
    search: Optional[TextSearch] = None
    order: List[OrderBy] = field(default_factory=list)
    offset: Optional[int] = None
    limit: Optional[int] = None
    count: bool = False

    def where(self, column: str, value: Any) -> "StoreQuery":
        self.eq[column] = value
        return self

    def where_not(self, column: str, value: Any) -> "StoreQuery":
        self.neq[column] = value
        return self

    def order_by(self, column: str, ascending: bool = True, nulls_first: bool = False) -> "StoreQuery":
        self.order.append(OrderBy(column, ascending, nulls_first))
        return self

    def page(self, offset: int, limit: int) -> "StoreQuery":
        self.offset = offset
        self.limit = limit
        return self


@dataclass
class QueryResult:
    """Rows returned by a select, plus the exact match count when requested"""
    rows: List[Dict[str, Any]]
    count: Optional[int] = None


class RecordStore:
    """
    Interface implemented by the record store backends.

    All methods are coroutines; implementations raise ``StoreError`` on any
    backend failure.
    """

    async def select(self, query: StoreQuery) -> QueryResult:
        """Run a select and return matching rows."""
        raise NotImplementedError

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one row and return it as stored (with generated columns)."""
        raise NotImplementedError

    async def update(
        self, table: str, values: Dict[str, Any], match: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        """Update rows matching all ``match`` equalities and return them."""
        raise NotImplementedError
