"""
Record store backends for the innsyn service
"""

from .record_store import (
    OrderBy,
    QueryResult,
    RecordStore,
    StoreQuery,
    TextSearch,
)

__all__ = [
    "OrderBy",
    "QueryResult",
    "RecordStore",
    "StoreQuery",
    "TextSearch",
]
