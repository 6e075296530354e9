"""
Recommendation Ranker and the feeds built on it.

Ranking is pure and stable: equal keys keep their input order. The feeds
load once from the store and re-sort locally when the mode changes.
"""

import logging
from enum import Enum
from typing import List, Optional, Sequence

from config.settings import settings
from innsyn.database.record_store import (
    RECOMMENDED_COLUMNS,
    RECOMMENDED_ENTRIES_VIEW,
    RECOMMENDED_JOBS_VIEW,
    RecordStore,
    StoreQuery,
)
from innsyn.exceptions import StoreError
from innsyn.models.entry_models import Entry, JobPosting
from innsyn.services.contact_resolver import ContactResolver
from innsyn.services.event_logger import EventLogger
from innsyn.services.request_templates import build_mailto
from innsyn.utils.dates import parse_date, timestamp_or_epoch

logger = logging.getLogger(__name__)


class RankMode(str, Enum):
    """Sort modes for the recommendation feed"""
    BEST = "best"
    NEWEST = "newest"


class JobSortMode(str, Enum):
    """Sort modes for the job feed"""
    NEWEST = "nyeste"
    DEADLINE = "frist"


def rank_entries(entries: Sequence[Entry], mode: str = RankMode.BEST.value) -> List[Entry]:
    """
    Order recommended entries.

    Args:
        entries: Entries to order (not modified)
        mode: ``best`` for descending score (missing scores last) or
            ``newest`` for descending journal date (missing or invalid
            dates count as epoch zero)

    Returns:
        New ordered list
    """
    mode = RankMode(mode)
    if mode == RankMode.BEST:
        return sorted(
            entries,
            key=lambda entry: float("-inf") if entry.score is None else entry.score,
            reverse=True,
        )
    return sorted(
        entries,
        key=lambda entry: timestamp_or_epoch(entry.journal_date),
        reverse=True,
    )


def rank_jobs(jobs: Sequence[JobPosting], mode: str = JobSortMode.NEWEST.value) -> List[JobPosting]:
    """Order job postings by publication (newest first) or by deadline (soonest first)."""
    mode = JobSortMode(mode)
    if mode == JobSortMode.NEWEST:
        return sorted(jobs, key=lambda job: timestamp_or_epoch(job.published_date), reverse=True)

    def deadline_key(job: JobPosting):
        deadline = parse_date(job.deadline_date)
        if deadline is None:
            return (1, 0.0)
        return (0, deadline.timestamp())

    return sorted(jobs, key=deadline_key)


class RecommendationFeed:
    """Top scored entries for the current user"""

    def __init__(
        self,
        store: RecordStore,
        limit: Optional[int] = None,
        contacts: Optional[ContactResolver] = None,
        event_logger: Optional[EventLogger] = None,
    ):
        self.store = store
        self.limit = limit or settings.innsyn.feed_limit
        self.contacts = contacts or ContactResolver()
        self.event_logger = event_logger
        self.entries: List[Entry] = []
        self.error_message: Optional[str] = None

    async def load(self) -> List[Entry]:
        """Fetch the highest scored rows. Failures leave an empty feed."""
        query = (
            StoreQuery(table=RECOMMENDED_ENTRIES_VIEW, columns=RECOMMENDED_COLUMNS)
            .order_by("kw_score", ascending=False)
        )
        query.limit = self.limit
        try:
            result = await self.store.select(query)
        except StoreError as e:
            logger.error(f"Failed to load recommendations: {e.message}")
            self.entries = []
            self.error_message = e.message
            return self.entries

        self.entries = [Entry.model_validate(row) for row in result.rows]
        self.error_message = None
        return self.entries

    def ranked(self, mode: str = RankMode.BEST.value) -> List[Entry]:
        return rank_entries(self.entries, mode)

    async def contact_link(self, entry: Entry) -> str:
        """mailto link to the entry's authority; records a ``click_mailto`` event."""
        email = self.contacts.resolve(entry.authority)
        if self.event_logger is not None:
            await self.event_logger.log_contact_click(entry, email or None)
        return build_mailto(entry, email)


class JobFeed:
    """Recommended job postings"""

    def __init__(self, store: RecordStore, limit: Optional[int] = None):
        self.store = store
        self.limit = limit or settings.innsyn.jobs_limit
        self.jobs: List[JobPosting] = []
        self.error_message: Optional[str] = None

    async def load(self) -> List[JobPosting]:
        query = StoreQuery(table=RECOMMENDED_JOBS_VIEW).order_by("published_date", ascending=False)
        query.limit = self.limit
        try:
            result = await self.store.select(query)
        except StoreError as e:
            logger.error(f"Failed to load job postings: {e.message}")
            self.jobs = []
            self.error_message = e.message
            return self.jobs

        self.jobs = [JobPosting.model_validate(row) for row in result.rows]
        self.error_message = None
        return self.jobs

    def ranked(self, mode: str = JobSortMode.NEWEST.value) -> List[JobPosting]:
        return rank_jobs(self.jobs, mode)
