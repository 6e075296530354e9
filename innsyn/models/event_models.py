"""
Models for user interaction events appended to the event sink.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class EventAction(str, Enum):
    """Interaction kinds recorded per entry"""
    VIEW_DETAILS = "view_details"
    ADD_REQUEST = "add_innsyn"
    CLICK_MAILTO = "click_mailto"


class EntryEvent(BaseModel):
    """One row in ``entry_events``"""

    user_id: str
    entry_uid: str
    action: EventAction
    session_id: Optional[str] = None
    authority: Optional[str] = None
    title: Optional[str] = None
    sender_recipient: Optional[str] = None
    extra: Dict[str, Any] = Field(default_factory=dict)

    def to_row(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "entry_uid": self.entry_uid,
            "action": self.action.value,
            "session_id": self.session_id,
            "etat": self.authority,
            "innhold": self.title,
            "avsmot": self.sender_recipient,
            "extra": self.extra,
        }
