"""
Supabase (PostgREST) implementation of the record store.

Translates ``StoreQuery`` objects into supabase-py query builder calls on
an ``AsyncClient`` and converts every backend failure into ``StoreError``.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from supabase import AsyncClient, acreate_client
from supabase.lib.client_options import AsyncClientOptions

from config.settings import SupabaseSettings, settings
from innsyn.database.record_store import QueryResult, RecordStore, StoreQuery
from innsyn.exceptions import StoreError
from innsyn.utils.logger import TimedOperation

logger = logging.getLogger(__name__)


async def create_supabase_client(
    supabase_settings: Optional[SupabaseSettings] = None,
    max_retries: int = 3,
) -> AsyncClient:
    """
    Create an async Supabase client with retry logic.

    Args:
        supabase_settings: Connection settings (defaults to global settings)
        max_retries: Attempts before giving up

    Returns:
        Initialized AsyncClient

    Raises:
        StoreError: If credentials are missing or the client cannot be created
    """
    config = supabase_settings or settings.supabase
    if not config.url or not (config.anon_key or config.service_role_key):
        raise StoreError("Supabase credentials not configured")

    # Service role key bypasses row level security; only use it server-side
    auth_key = config.service_role_key or config.anon_key

    for attempt in range(max_retries):
        try:
            logger.info(f"Initializing Supabase client (attempt {attempt + 1}/{max_retries})")
            options = AsyncClientOptions(
                postgrest_client_timeout=config.postgrest_timeout,
                function_client_timeout=config.function_timeout,
            )
            client = await acreate_client(config.url, auth_key, options=options)
            logger.info("Supabase client initialized successfully")
            return client
        except Exception as e:
            logger.warning(f"Attempt {attempt + 1} failed to initialize Supabase client: {str(e)}")
            if attempt < max_retries - 1:
                wait_time = 2 ** attempt  # Exponential backoff: 1s, 2s, 4s
                await asyncio.sleep(wait_time)
            else:
                raise StoreError("Failed to initialize Supabase client", detail=str(e)) from e


def _quote_term(term: str) -> str:
    """Quote a search term for a PostgREST logic tree (commas and parens are reserved)"""
    escaped = term.replace("\\", "\\\\").replace('"', '\\"')
    return f'"%{escaped}%"'


def _error_message(error: Exception) -> str:
    return getattr(error, "message", None) or str(error) or error.__class__.__name__


class SupabaseRecordStore(RecordStore):
    """Record store backed by Supabase PostgREST"""

    def __init__(self, client: AsyncClient):
        self.client = client

    async def select(self, query: StoreQuery) -> QueryResult:
        builder = self.client.table(query.table).select(
            query.columns, count="exact" if query.count else None
        )

        for column, value in query.eq.items():
            if value is None:
                builder = builder.is_(column, "null")
            else:
                builder = builder.eq(column, value)

        for column, value in query.neq.items():
            builder = builder.neq(column, value)

        if query.search and query.search.term.strip():
            term = _quote_term(query.search.term.strip())
            builder = builder.or_(
                ",".join(f"{column}.ilike.{term}" for column in query.search.columns)
            )

        for term in query.order:
            builder = builder.order(
                term.column, desc=not term.ascending, nullsfirst=term.nulls_first
            )

        if query.offset is not None and query.limit is not None:
            builder = builder.range(query.offset, query.offset + query.limit - 1)
        elif query.limit is not None:
            builder = builder.limit(query.limit)

        try:
            with TimedOperation(logger, f"select {query.table}"):
                response = await builder.execute()
        except Exception as e:
            logger.error(f"Query against {query.table} failed: {_error_message(e)}")
            raise StoreError(_error_message(e), detail=query.table) from e

        rows = list(response.data or [])
        count = response.count if query.count else None
        if query.count and count is None:
            count = len(rows)
        return QueryResult(rows=rows, count=count)

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        try:
            with TimedOperation(logger, f"insert {table}"):
                response = await self.client.table(table).insert(row).execute()
        except Exception as e:
            logger.error(f"Insert into {table} failed: {_error_message(e)}")
            raise StoreError(_error_message(e), detail=table) from e

        if not response.data:
            raise StoreError(f"Insert into {table} returned no rows", detail=table)
        return response.data[0]

    async def update(
        self, table: str, values: Dict[str, Any], match: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        if not match:
            raise StoreError("Refusing to update without a match filter", detail=table)

        builder = self.client.table(table).update(values)
        for column, value in match.items():
            builder = builder.eq(column, value)

        try:
            with TimedOperation(logger, f"update {table}"):
                response = await builder.execute()
        except Exception as e:
            logger.error(f"Update of {table} failed: {_error_message(e)}")
            raise StoreError(_error_message(e), detail=table) from e

        return list(response.data or [])
