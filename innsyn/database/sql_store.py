"""
SQLAlchemy async implementation of the record store.

Used when the postjournal tables live in a plain PostgreSQL database (or an
SQLite file for local work) rather than behind Supabase.
"""

import logging
from typing import Any, Dict, List

from sqlalchemy import Table, and_, func, insert, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from innsyn.database import models  # noqa: F401  (registers tables on Base)
from innsyn.database.connection import Base
from innsyn.database.record_store import QueryResult, RecordStore, StoreQuery
from innsyn.exceptions import StoreError
from innsyn.utils.logger import TimedOperation

logger = logging.getLogger(__name__)


class SqlRecordStore(RecordStore):
    """Record store backed by SQLAlchemy Core statements"""

    def __init__(self, engine: AsyncEngine):
        """
        Initialize the store.

        Args:
            engine: AsyncEngine whose database holds the postjournal tables
        """
        self.engine = engine

    def _table(self, name: str) -> Table:
        table = Base.metadata.tables.get(name)
        if table is None:
            raise StoreError(f"Unknown table '{name}'", detail=name)
        return table

    def _column(self, table: Table, name: str):
        if name not in table.c:
            raise StoreError(f"Unknown column '{name}' on {table.name}", detail=table.name)
        return table.c[name]

    def _selected_columns(self, table: Table, columns: str) -> list:
        if columns.strip() == "*":
            return list(table.c)
        names = [name.strip() for name in columns.split(",") if name.strip()]
        return [self._column(table, name) for name in names]

    def _conditions(self, table: Table, query: StoreQuery) -> list:
        conditions = []
        for name, value in query.eq.items():
            column = self._column(table, name)
            conditions.append(column.is_(None) if value is None else column == value)
        for name, value in query.neq.items():
            conditions.append(self._column(table, name) != value)
        if query.search and query.search.term.strip():
            pattern = f"%{query.search.term.strip()}%"
            conditions.append(
                or_(*[self._column(table, name).ilike(pattern) for name in query.search.columns])
            )
        return conditions

    async def select(self, query: StoreQuery) -> QueryResult:
        table = self._table(query.table)
        conditions = self._conditions(table, query)

        stmt = select(*self._selected_columns(table, query.columns))
        if conditions:
            stmt = stmt.where(and_(*conditions))

        for term in query.order:
            column = self._column(table, term.column)
            expression = column.asc() if term.ascending else column.desc()
            expression = expression.nulls_first() if term.nulls_first else expression.nulls_last()
            stmt = stmt.order_by(expression)

        if query.offset is not None:
            stmt = stmt.offset(query.offset)
        if query.limit is not None:
            stmt = stmt.limit(query.limit)

        try:
            with TimedOperation(logger, f"select {query.table}"):
                async with self.engine.connect() as conn:
                    result = await conn.execute(stmt)
                    rows = [dict(row._mapping) for row in result]

                    count = None
                    if query.count:
                        count_stmt = select(func.count()).select_from(table)
                        if conditions:
                            count_stmt = count_stmt.where(and_(*conditions))
                        count = (await conn.execute(count_stmt)).scalar_one()
        except SQLAlchemyError as e:
            logger.error(f"Query against {query.table} failed: {e}")
            raise StoreError(str(e), detail=query.table) from e

        return QueryResult(rows=rows, count=count)

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        target = self._table(table)
        for name in row:
            self._column(target, name)

        primary_key = list(target.primary_key.columns)[0]

        try:
            with TimedOperation(logger, f"insert {table}"):
                async with self.engine.begin() as conn:
                    result = await conn.execute(insert(target).values(**row))
                    new_id = result.inserted_primary_key[0]
                    stored = await conn.execute(select(target).where(primary_key == new_id))
                    return dict(stored.one()._mapping)
        except SQLAlchemyError as e:
            logger.error(f"Insert into {table} failed: {e}")
            raise StoreError(str(e), detail=table) from e

    async def update(
        self, table: str, values: Dict[str, Any], match: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        if not match:
            raise StoreError("Refusing to update without a match filter", detail=table)

        target = self._table(table)
        for name in values:
            self._column(target, name)
        condition = and_(*[self._column(target, name) == value for name, value in match.items()])

        try:
            with TimedOperation(logger, f"update {table}"):
                async with self.engine.begin() as conn:
                    await conn.execute(update(target).where(condition).values(**values))
                    result = await conn.execute(select(target).where(condition))
                    return [dict(row._mapping) for row in result]
        except SQLAlchemyError as e:
            logger.error(f"Update of {table} failed: {e}")
            raise StoreError(str(e), detail=table) from e
