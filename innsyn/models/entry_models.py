"""
Data models for postjournal entries and job postings.

Attribute names are English; the store's column names are accepted as
aliases so rows from either record store validate directly.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

CASE_NUMBER_SEPARATOR = "-"


class EntryKind(str, Enum):
    """Entry classification in the journal"""
    CASE_FOLDER = "saksmappe"
    JOURNAL_ENTRY = "journalpost"


KIND_LABELS = {
    EntryKind.CASE_FOLDER.value: "Saksmappe",
    EntryKind.JOURNAL_ENTRY.value: "Postjournal",
}


def derive_case_key(case_key: Optional[str], case_number: Optional[str]) -> Optional[str]:
    """
    Resolve the case key of an entry.

    An explicit case key wins; otherwise the case number up to the first
    separator is used (``"2024/100-3"`` -> ``"2024/100"``).
    """
    if case_key:
        return str(case_key)
    if case_number:
        return str(case_number).split(CASE_NUMBER_SEPARATOR)[0]
    return None


class Entry(BaseModel):
    """A single public record: journal document, case folder or posting"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    uid: Optional[Union[int, str]] = None
    id: Optional[Union[int, str]] = None
    authority: Optional[str] = Field(None, alias="etat")
    title: Optional[str] = Field(None, alias="innhold")
    case_number: Optional[str] = Field(None, alias="saksnr")
    case_key_value: Optional[str] = Field(None, alias="sak_key")
    document_number: Optional[Union[int, str]] = Field(None, alias="doknr")
    case_title: Optional[str] = Field(None, alias="sak_tittel")
    journal_date: Optional[Union[datetime, str]] = Field(
        None,
        validation_alias=AliasChoices("jdato", "jdato_date", "journal_date"),
        serialization_alias="jdato",
    )
    document_date: Optional[Union[datetime, str]] = Field(None, alias="dokdato")
    source_type: Optional[str] = None
    source_url: Optional[str] = None
    sender_recipient: Optional[str] = Field(None, alias="avsmot")
    designation: Optional[str] = Field(None, alias="betegnelse")
    year: Optional[int] = Field(None, alias="aar")
    sequence: Optional[int] = Field(None, alias="sekvens")
    access_code: Optional[str] = Field(None, alias="tilgangskode")
    retrieved_at: Optional[Union[datetime, str]] = Field(None, alias="hentet_tid")
    kind: Optional[str] = None
    extra: Optional[Dict[str, Any]] = None
    score: Optional[float] = Field(None, alias="kw_score")

    @property
    def case_key(self) -> Optional[str]:
        """Case key, explicit or derived from the case number"""
        return derive_case_key(self.case_key_value, self.case_number)

    @property
    def entry_uid(self) -> str:
        """Stable identifier used for event logging"""
        if self.uid is not None:
            return str(self.uid)
        if self.id is not None:
            return str(self.id)
        return ""

    @property
    def display_date(self) -> Optional[Union[datetime, str]]:
        return self.journal_date or self.document_date

    @property
    def kind_label(self) -> str:
        if not self.kind:
            return "—"
        return KIND_LABELS.get(self.kind, self.kind)

    @property
    def is_case_folder(self) -> bool:
        return self.kind == EntryKind.CASE_FOLDER.value


class JobPosting(BaseModel):
    """Recommended job posting row"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Union[int, str]
    source: Optional[str] = None
    source_job_id: Optional[Union[int, str]] = None
    url: Optional[str] = None
    title: Optional[str] = None
    employer: Optional[str] = None
    location: Optional[str] = None
    job_category: Optional[str] = None
    published_date: Optional[Union[datetime, str]] = None
    deadline_date: Optional[Union[datetime, str]] = None
