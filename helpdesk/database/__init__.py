"""
Database connection and utilities
"""
from .connection import (
    get_client,
    get_database,
    get_collection,
    close_connection,
    ensure_indexes,
    COLLECTION_TICKETS,
    COLLECTION_COUNTERS,
)

__all__ = [
    "get_client",
    "get_database",
    "get_collection",
    "close_connection",
    "ensure_indexes",
    "COLLECTION_TICKETS",
    "COLLECTION_COUNTERS",
]
