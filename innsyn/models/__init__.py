"""
Models package for the innsyn service
"""

from .entry_models import (
    Entry,
    EntryKind,
    JobPosting,
    derive_case_key,
)
from .request_models import (
    DisclosureRequest,
    DisclosureRequestCreate,
    RequestOutcome,
    RequestStatus,
    RequestType,
    RESOLVED_STATUSES,
    request_key,
)
from .event_models import (
    EntryEvent,
    EventAction,
)

__all__ = [
    # Entry models
    "Entry",
    "EntryKind",
    "JobPosting",
    "derive_case_key",
    # Request models
    "DisclosureRequest",
    "DisclosureRequestCreate",
    "RequestOutcome",
    "RequestStatus",
    "RequestType",
    "RESOLVED_STATUSES",
    "request_key",
    # Event models
    "EntryEvent",
    "EventAction",
]
