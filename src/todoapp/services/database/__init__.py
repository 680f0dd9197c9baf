"""Database connection and query helpers."""

from src.todoapp.services.database.connection import get_database, get_mongo_client
from src.todoapp.services.database.utils import (
    MongoQueryBuilder,
    get_query_builder,
    to_object_id,
    utc_now,
)

__all__ = [
    "get_database",
    "get_mongo_client",
    "MongoQueryBuilder",
    "get_query_builder",
    "to_object_id",
    "utc_now",
]
