"""
Event Logger: records user interactions with entries.

Events are observational only. A failed write is logged locally and never
reaches the caller.
"""

import logging
from typing import Any, Dict, Optional, Set, Tuple

from innsyn.database.record_store import EVENTS_TABLE, RecordStore
from innsyn.models.entry_models import Entry
from innsyn.models.event_models import EntryEvent, EventAction
from innsyn.services.session_context import SessionContext

logger = logging.getLogger(__name__)


class EventLogger:
    """Appends ``entry_events`` rows, at most once per (entry, action) per session"""

    def __init__(self, store: RecordStore, session: SessionContext):
        self.store = store
        self.session = session
        self._logged: Set[Tuple[str, str]] = set()

    def has_logged(self, entry: Entry, action: EventAction) -> bool:
        return (entry.entry_uid, action.value) in self._logged

    async def log(
        self,
        entry: Entry,
        action: EventAction,
        extra: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Record one interaction.

        Args:
            entry: Entry the user interacted with
            action: Interaction kind
            extra: Additional context merged into the event's extra bag

        Returns:
            True if a row was written
        """
        if not self.session.user_id:
            return False

        uid = entry.entry_uid
        if not uid:
            return False

        key = (uid, action.value)
        if key in self._logged:
            return False
        self._logged.add(key)

        event = EntryEvent(
            user_id=self.session.user_id,
            entry_uid=uid,
            action=action,
            session_id=self.session.session_id,
            authority=entry.authority,
            title=entry.title,
            sender_recipient=entry.sender_recipient,
            extra={
                "saksnr": entry.case_number,
                "source_type": entry.source_type,
                "source_url": entry.source_url,
                **(extra or {}),
            },
        )

        try:
            await self.store.insert(EVENTS_TABLE, event.to_row())
        except Exception as e:
            logger.warning(f"Could not log {action.value} for entry {uid}: {e}")
            return False

        logger.debug(f"Logged {action.value} for entry {uid}")
        return True

    async def log_view_details(self, entry: Entry) -> bool:
        return await self.log(entry, EventAction.VIEW_DETAILS)

    async def log_add_request(self, entry: Entry, request_id: Optional[str] = None) -> bool:
        extra = {"request_id": request_id} if request_id else None
        return await self.log(entry, EventAction.ADD_REQUEST, extra)

    async def log_contact_click(self, entry: Entry, email: Optional[str] = None) -> bool:
        extra = {"to": email} if email else None
        return await self.log(entry, EventAction.CLICK_MAILTO, extra)


class DetailViewTracker:
    """Open/closed state of entry detail rows"""

    def __init__(self, event_logger: EventLogger, case_grouper=None):
        self.event_logger = event_logger
        self.case_grouper = case_grouper
        self._open: Set[str] = set()

    def is_open(self, entry: Entry) -> bool:
        return entry.entry_uid in self._open

    async def toggle(self, entry: Entry) -> bool:
        """
        Flip the detail row of an entry.

        Opening closes any other open row, logs ``view_details`` (once per
        entry) and loads the entry's case documents.

        Returns:
            True if the row is now open
        """
        uid = entry.entry_uid
        if uid in self._open:
            self._open.discard(uid)
            return False

        self._open = {uid}
        await self.event_logger.log_view_details(entry)
        if self.case_grouper is not None:
            await self.case_grouper.load_case_for_entry(entry)
        return True
