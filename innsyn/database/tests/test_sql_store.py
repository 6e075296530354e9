"""
Tests for the SQL record store against in-memory SQLite.
"""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from innsyn.database.connection import init_db, test_connection as check_connection
from innsyn.database.record_store import StoreQuery, TextSearch
from innsyn.database.sql_store import SqlRecordStore
from innsyn.exceptions import StoreError


ENTRY_ROWS = [
    {"id": 1, "etat": "Levanger kommune", "innhold": "Byggesak Moan", "saksnr": "2024/1-1",
     "sak_key": "2024/1", "jdato": "2024-01-10", "hentet_tid": "2024-01-11T06:00:00", "kind": "journalpost"},
    {"id": 2, "etat": "Verdal kommune", "innhold": "Skolebruksplan", "saksnr": "2024/2-1",
     "sak_key": "2024/2", "jdato": "2024-01-12", "hentet_tid": "2024-01-13T06:00:00", "kind": "journalpost"},
    {"id": 3, "etat": "Levanger kommune", "innhold": "Saksmappe", "saksnr": "2024/1",
     "sak_key": "2024/1", "jdato": "2024-01-09", "hentet_tid": "2024-01-11T06:00:00", "kind": "saksmappe"},
    {"id": 4, "etat": "Levanger kommune", "innhold": "Udatert MOAN-notat", "saksnr": "2024/1-2",
     "sak_key": "2024/1", "jdato": None, "hentet_tid": "2024-01-14T06:00:00", "kind": "journalpost"},
]


class TestSqlRecordStore:
    """Test suite for SQL record store operations."""

    @pytest.fixture
    async def engine(self):
        """Create test database engine."""
        # Use in-memory SQLite for tests
        engine = create_async_engine("sqlite+aiosqlite:///:memory:")
        await init_db(engine)
        yield engine
        await engine.dispose()

    @pytest.fixture
    async def store(self, engine):
        store = SqlRecordStore(engine)
        for row in ENTRY_ROWS:
            await store.insert("entries", row)
        return store

    @pytest.mark.asyncio
    async def test_connection(self, engine):
        assert await check_connection(engine) is True

    @pytest.mark.asyncio
    async def test_select_with_filters_and_order(self, store):
        query = (
            StoreQuery(table="entries", columns="id, etat, jdato", count=True)
            .where_not("kind", "saksmappe")
            .order_by("jdato", ascending=False, nulls_first=False)
        )

        result = await store.select(query)

        assert [row["id"] for row in result.rows] == [2, 1, 4]
        assert set(result.rows[0]) == {"id", "etat", "jdato"}
        assert result.count == 3

    @pytest.mark.asyncio
    async def test_case_insensitive_search(self, store):
        query = StoreQuery(table="entries", columns="id").order_by("id")
        query.search = TextSearch(columns=["innhold", "saksnr"], term="moan")

        result = await store.select(query)

        assert [row["id"] for row in result.rows] == [1, 4]

    @pytest.mark.asyncio
    async def test_paging_and_exact_count(self, store):
        query = StoreQuery(table="entries", columns="id", count=True).order_by("id").page(1, 2)

        result = await store.select(query)

        assert [row["id"] for row in result.rows] == [2, 3]
        assert result.count == 4

    @pytest.mark.asyncio
    async def test_equality_on_several_columns(self, store):
        query = StoreQuery(table="entries", columns="id").where("etat", "Levanger kommune").where("sak_key", "2024/1")

        result = await store.select(query)

        assert sorted(row["id"] for row in result.rows) == [1, 3, 4]

    @pytest.mark.asyncio
    async def test_insert_request_generates_id_and_timestamps(self, store):
        row = await store.insert("innsyn_requests", {
            "user_id": "user-1",
            "type": "postjournal",
            "source": "entries",
            "source_entry_id": 42,
            "etat": "Levanger kommune",
            "subject": "Innsyn i dokument",
            "body": "Hei,",
            "status": "draft",
            "outcome": "unknown",
            "sent_at": None,
        })

        assert len(row["id"]) == 36
        assert row["created_at"] is not None
        assert row["status"] == "draft"

    @pytest.mark.asyncio
    async def test_update_returns_matching_rows(self, store):
        created = await store.insert("innsyn_requests", {"user_id": "user-1", "status": "draft", "outcome": "unknown"})

        rows = await store.update("innsyn_requests", {"outcome": "denied"}, {"id": created["id"], "user_id": "user-1"})
        other = await store.update("innsyn_requests", {"outcome": "full"}, {"id": created["id"], "user_id": "user-2"})

        assert [row["outcome"] for row in rows] == ["denied"]
        assert other == []

    @pytest.mark.asyncio
    async def test_event_extra_stored_as_json(self, store):
        row = await store.insert("entry_events", {
            "user_id": "user-1",
            "entry_uid": "uid-1",
            "action": "view_details",
            "extra": {"saksnr": "2024/1-1"},
        })

        assert row["extra"] == {"saksnr": "2024/1-1"}

    @pytest.mark.asyncio
    async def test_check_constraint_violation_becomes_store_error(self, store):
        with pytest.raises(StoreError):
            await store.insert("innsyn_requests", {"user_id": "user-1", "status": "lost"})

    @pytest.mark.asyncio
    async def test_unknown_table_and_column(self, store):
        with pytest.raises(StoreError):
            await store.select(StoreQuery(table="nope"))

        with pytest.raises(StoreError):
            await store.select(StoreQuery(table="entries").where("nope", 1))

    @pytest.mark.asyncio
    async def test_update_without_match_refused(self, store):
        with pytest.raises(StoreError):
            await store.update("innsyn_requests", {"outcome": "full"}, {})
