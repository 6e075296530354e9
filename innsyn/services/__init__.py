"""
Services package for the innsyn service
"""

from .case_grouper import CaseGrouper, sort_case_documents
from .contact_resolver import ContactResolver
from .entry_browser import EntryBrowser, EntryPage
from .event_logger import DetailViewTracker, EventLogger
from .recommendation_ranker import JobFeed, RecommendationFeed, rank_entries, rank_jobs
from .request_deduplicator import RequestDeduplicator
from .request_dispatcher import DispatchResult, RequestDispatcher, SupabaseFunctionDispatcher
from .request_lifecycle import RequestLifecycleManager
from .session_context import SessionContext, SessionTokenStore

__all__ = [
    "CaseGrouper",
    "sort_case_documents",
    "ContactResolver",
    "EntryBrowser",
    "EntryPage",
    "DetailViewTracker",
    "EventLogger",
    "JobFeed",
    "RecommendationFeed",
    "rank_entries",
    "rank_jobs",
    "RequestDeduplicator",
    "DispatchResult",
    "RequestDispatcher",
    "SupabaseFunctionDispatcher",
    "RequestLifecycleManager",
    "SessionContext",
    "SessionTokenStore",
]
