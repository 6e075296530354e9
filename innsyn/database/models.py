"""
SQLAlchemy ORM models mirroring the postjournal store tables.

Column names match the Supabase schema so rows from both backends validate
against the same pydantic models. Date columns on entries are kept as text
because the ingestion pipeline writes them as strings.
"""

import uuid

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.sql import func

from innsyn.database.connection import Base


class EntryDB(Base):
    """Ingested journal entry (read-only to this service)"""

    __tablename__ = "entries"

    id = Column(Integer, primary_key=True)
    uid = Column(String(64), unique=True)
    etat = Column(String(255), index=True)
    innhold = Column(Text)
    saksnr = Column(String(64))
    sak_key = Column(String(64), index=True)
    doknr = Column(String(32))
    sak_tittel = Column(Text)
    jdato = Column(String(32))
    dokdato = Column(String(32))
    source_type = Column(String(64))
    source_url = Column(Text)
    avsmot = Column(Text)
    betegnelse = Column(Text)
    aar = Column(Integer)
    sekvens = Column(Integer)
    tilgangskode = Column(String(64))
    hentet_tid = Column(String(40))
    kind = Column(String(32))
    extra = Column(JSON)

    __table_args__ = (
        Index("idx_entries_case", "etat", "sak_key"),
    )


class RecommendedEntryDB(Base):
    """Scored entries feeding the recommendation view"""

    __tablename__ = "recommended_entries"

    id = Column(Integer, primary_key=True)
    etat = Column(String(255))
    innhold = Column(Text)
    saksnr = Column(String(64))
    jdato_date = Column(String(32))
    avsmot = Column(Text)
    kw_score = Column(Float)


class RecommendedJobDB(Base):
    """Recommended job postings"""

    __tablename__ = "innherred_recommended_jobs"

    id = Column(Integer, primary_key=True)
    source = Column(String(64))
    source_job_id = Column(String(64))
    url = Column(Text)
    title = Column(Text)
    employer = Column(String(255))
    location = Column(String(255))
    job_category = Column(String(255))
    published_date = Column(String(32))
    deadline_date = Column(String(32))


class DisclosureRequestDB(Base):
    """Disclosure request owned by one user"""

    __tablename__ = "innsyn_requests"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=False, index=True)
    type = Column(String(32), nullable=False, default="postjournal")
    source = Column(String(64))
    source_entry_id = Column(BigInteger)
    etat = Column(String(255))
    recipient_email = Column(String(255))
    subject = Column(Text)
    body = Column(Text)
    sent_at = Column(DateTime(timezone=True))
    status = Column(String(20), nullable=False, default="draft")
    outcome = Column(String(20), default="unknown")
    remind_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_requests_user_type", "user_id", "type"),
        CheckConstraint(
            "status IN ('draft', 'queued', 'sent', 'answered', 'rejected', 'closed')",
            name="check_request_status",
        ),
        CheckConstraint(
            "outcome IS NULL OR outcome IN ('unknown', 'full', 'denied', 'story')",
            name="check_request_outcome",
        ),
    )


class EntryEventDB(Base):
    """Append-only interaction log"""

    __tablename__ = "entry_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), nullable=False)
    entry_uid = Column(String(64), nullable=False)
    action = Column(String(32), nullable=False)
    session_id = Column(String(64))
    etat = Column(String(255))
    innhold = Column(Text)
    avsmot = Column(Text)
    extra = Column(JSON, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (Index("idx_events_user_session", "user_id", "session_id"),)


class ProfileDB(Base):
    """User profile with the approval flag"""

    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True)
    approved = Column(Boolean, nullable=False, default=False)
