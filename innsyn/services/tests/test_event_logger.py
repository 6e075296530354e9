"""
Tests for the Event Logger and detail view tracking.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from innsyn.database.record_store import ENTRIES_TABLE, EVENTS_TABLE
from innsyn.models.entry_models import Entry
from innsyn.models.event_models import EventAction
from innsyn.services.case_grouper import CaseGrouper
from innsyn.services.event_logger import DetailViewTracker, EventLogger


@pytest.fixture
def entry():
    return Entry(
        id=42,
        uid="uid-42",
        etat="Levanger kommune",
        saksnr="2024/100-3",
        innhold="Søknad om dispensasjon",
        avsmot="Ola Nordmann",
        source_type="einnsyn",
        source_url="https://example.no/42",
    )


class TestEventLogger:
    """Test event rows and idempotency"""

    @pytest.mark.asyncio
    async def test_event_row(self, fake_store, session, entry):
        event_logger = EventLogger(fake_store, session)

        assert await event_logger.log_view_details(entry) is True

        row = fake_store.rows(EVENTS_TABLE)[0]
        assert row["user_id"] == "user-1"
        assert row["session_id"] == "session-1"
        assert row["entry_uid"] == "uid-42"
        assert row["action"] == "view_details"
        assert row["etat"] == "Levanger kommune"
        assert row["innhold"] == "Søknad om dispensasjon"
        assert row["avsmot"] == "Ola Nordmann"
        assert row["extra"]["saksnr"] == "2024/100-3"
        assert row["extra"]["source_url"] == "https://example.no/42"

    @pytest.mark.asyncio
    async def test_once_per_entry_and_action(self, fake_store, session, entry):
        event_logger = EventLogger(fake_store, session)

        await event_logger.log_view_details(entry)
        await event_logger.log_view_details(entry)
        await event_logger.log_contact_click(entry)

        actions = [row["action"] for row in fake_store.rows(EVENTS_TABLE)]
        assert actions == ["view_details", "click_mailto"]
        assert event_logger.has_logged(entry, EventAction.VIEW_DETAILS)

    @pytest.mark.asyncio
    async def test_no_user_logs_nothing(self, fake_store, anonymous_session, entry):
        event_logger = EventLogger(fake_store, anonymous_session)

        assert await event_logger.log_view_details(entry) is False
        assert fake_store.inserts == []

    @pytest.mark.asyncio
    async def test_failures_are_swallowed(self, session, entry):
        store = MagicMock()
        store.insert = AsyncMock(side_effect=RuntimeError("sink down"))
        event_logger = EventLogger(store, session)

        assert await event_logger.log_add_request(entry) is False
        store.insert.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_entry_without_uid_skipped(self, fake_store, session):
        assert await EventLogger(fake_store, session).log_view_details(Entry()) is False
        assert fake_store.inserts == []


class TestDetailViewTracker:
    """Test open/close toggling"""

    @pytest.mark.asyncio
    async def test_toggle_logs_view_once_and_loads_case(self, fake_store, session, entry):
        fake_store.tables[ENTRIES_TABLE] = [
            {"id": 42, "etat": "Levanger kommune", "sak_key": "2024/100", "saksnr": "2024/100-3"},
        ]
        grouper = CaseGrouper(fake_store)
        tracker = DetailViewTracker(EventLogger(fake_store, session), grouper)

        assert await tracker.toggle(entry) is True
        assert await tracker.toggle(entry) is False
        assert await tracker.toggle(entry) is True

        views = [row for row in fake_store.rows(EVENTS_TABLE) if row["action"] == "view_details"]
        assert len(views) == 1
        assert tracker.is_open(entry)
        assert len(grouper.cached(grouper.key_for(entry))) == 1

    @pytest.mark.asyncio
    async def test_opening_a_row_closes_the_others(self, fake_store, session, entry):
        other = Entry(id=43, uid="uid-43", etat="Levanger kommune")
        tracker = DetailViewTracker(EventLogger(fake_store, session))

        await tracker.toggle(entry)
        assert await tracker.toggle(other) is True

        assert tracker.is_open(other)
        assert not tracker.is_open(entry)
        assert await tracker.toggle(entry) is True
        assert not tracker.is_open(other)
