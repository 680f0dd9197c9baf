"""MongoDB connection management."""

from functools import lru_cache

from pymongo import MongoClient
from pymongo.database import Database

from src.todoapp.config import settings


@lru_cache(maxsize=1)
def get_mongo_client() -> MongoClient:
    """
    Get MongoDB client instance (singleton pattern).

    The client owns a connection pool and connects lazily on first use.

    Returns:
        Configured MongoClient returning timezone-aware datetimes

    Example:
        >>> client = get_mongo_client()
        >>> client.admin.command("ping")
    """
    return MongoClient(
        settings.mongodb_uri,
        serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
        tz_aware=True,
    )


def get_database(name: str) -> Database:
    """
    Get a database handle from the shared client.

    Args:
        name: Database name (e.g. settings.auth_database)

    Returns:
        pymongo Database

    Example:
        >>> db = get_database(settings.todo_database)
        >>> db["todos"].count_documents({})
    """
    return get_mongo_client()[name]
