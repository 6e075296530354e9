"""
Pydantic models for disclosure ("innsyn") requests.

Status and outcome are independent dimensions: status follows the
dispatch lifecycle, outcome is a user annotation that may be set at any
time.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RequestType(str, Enum):
    """Kinds of disclosure request"""
    POSTJOURNAL = "postjournal"
    JOB_APPLICANTS = "job_applicants"
    JOB_HIRED = "job_hired"


class RequestStatus(str, Enum):
    """Dispatch lifecycle of a request"""
    DRAFT = "draft"
    QUEUED = "queued"
    SENT = "sent"
    ANSWERED = "answered"
    REJECTED = "rejected"
    CLOSED = "closed"


class RequestOutcome(str, Enum):
    """How a request was resolved, as annotated by the user"""
    UNKNOWN = "unknown"
    FULL = "full"
    DENIED = "denied"
    STORY = "story"


RESOLVED_STATUSES = frozenset({
    RequestStatus.ANSWERED.value,
    RequestStatus.CLOSED.value,
    RequestStatus.REJECTED.value,
})

DISPATCHABLE_STATUSES = frozenset({
    RequestStatus.DRAFT.value,
    RequestStatus.QUEUED.value,
})

TYPE_LABELS = {
    RequestType.POSTJOURNAL.value: "Postjournal",
    RequestType.JOB_APPLICANTS.value: "Søkerliste – stilling",
    RequestType.JOB_HIRED.value: "Hvem fikk jobben",
}

SOURCE_LABELS = {
    "postjournal": "Postjournal",
    "webcruiter": "Webcruiter",
}

OUTCOME_LABELS = {
    RequestOutcome.UNKNOWN.value: "– ikke satt –",
    RequestOutcome.FULL.value: "Innsyn",
    RequestOutcome.DENIED.value: "Avslag",
    RequestOutcome.STORY.value: "Resulterte i sak",
}


def type_label(request_type: Optional[str]) -> str:
    if not request_type:
        return "Ukjent"
    return TYPE_LABELS.get(request_type, request_type)


def source_label(source: Optional[str]) -> str:
    if not source:
        return "—"
    return SOURCE_LABELS.get(source, source)


class DisclosureRequest(BaseModel):
    """A user's request for access to one entry, as stored"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    user_id: str
    type: str = RequestType.POSTJOURNAL.value
    source: Optional[str] = None
    source_entry_id: Optional[Union[int, str]] = None
    authority: Optional[str] = Field(None, alias="etat")
    recipient_email: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    sent_at: Optional[datetime] = None
    status: str = RequestStatus.DRAFT.value
    outcome: Optional[str] = RequestOutcome.UNKNOWN.value
    remind_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def coerce_identifier(cls, v: Any) -> Any:
        """UUID columns arrive as UUID objects from some drivers"""
        if v is not None and not isinstance(v, str):
            return str(v)
        return v

    @property
    def is_answered(self) -> bool:
        """Resolved for display purposes: answered, closed or rejected"""
        return self.status in RESOLVED_STATUSES

    @property
    def can_dispatch(self) -> bool:
        """Not yet sent: draft or queued"""
        return self.status in DISPATCHABLE_STATUSES

    @property
    def status_label(self) -> str:
        return "Besvart" if self.is_answered else "Ikke besvart"

    @property
    def outcome_label(self) -> str:
        return OUTCOME_LABELS.get(self.outcome or RequestOutcome.UNKNOWN.value, self.outcome or "")

    @property
    def type_label(self) -> str:
        return type_label(self.type)

    @property
    def source_key(self) -> Optional[str]:
        """Deduplication key ``"<source>:<source_entry_id>"``"""
        return request_key(self.source, self.source_entry_id)


def request_key(source: Optional[str], source_entry_id: Any) -> Optional[str]:
    """Key used to mark an entry as already requested"""
    if source_entry_id is None or source_entry_id == "":
        return None
    return f"{source}:{source_entry_id}"


class DisclosureRequestCreate(BaseModel):
    """Row inserted when an entry is added to the request basket"""

    user_id: str
    type: RequestType = RequestType.POSTJOURNAL
    source: str
    source_entry_id: int
    authority: Optional[str] = None
    recipient_email: Optional[str] = None
    subject: str
    body: str
    status: RequestStatus = RequestStatus.DRAFT
    outcome: RequestOutcome = RequestOutcome.UNKNOWN
    sent_at: Optional[datetime] = None

    @field_validator("subject", "body")
    @classmethod
    def validate_text(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Subject and body cannot be empty")
        return v

    def to_row(self) -> Dict[str, Any]:
        """Store row using the store's column names"""
        return {
            "user_id": self.user_id,
            "type": self.type.value,
            "source": self.source,
            "source_entry_id": self.source_entry_id,
            "etat": self.authority,
            "recipient_email": self.recipient_email or None,
            "subject": self.subject,
            "body": self.body,
            "status": self.status.value,
            "outcome": self.outcome.value,
            "sent_at": None,
        }
