"""Generic database utility functions for MongoDB interactions."""

import logging
from datetime import UTC, datetime
from typing import Any

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database

from src.todoapp.services.database.connection import get_database

logger = logging.getLogger(__name__)

Sort = list[tuple[str, int]]


def utc_now() -> datetime:
    """
    Current UTC time at the precision BSON dates keep (milliseconds).

    Timestamps returned right after a write then equal the ones read back later.
    """
    now = datetime.now(UTC)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def to_object_id(record_id: ObjectId | str) -> ObjectId | None:
    """
    Convert a client-supplied id to an ObjectId.

    Returns None for malformed ids so callers can treat them exactly like
    ids that match nothing.
    """
    if isinstance(record_id, ObjectId):
        return record_id
    if isinstance(record_id, str) and ObjectId.is_valid(record_id):
        return ObjectId(record_id)
    return None


class MongoQueryBuilder:
    """
    Helper class for building and executing MongoDB queries.

    Every id-based method accepts optional ``filters`` that are ANDed with the
    id match. Passing the owner field there (``{"user_id": ...}``) scopes the
    operation to one user's records.
    """

    def __init__(self, database: Database) -> None:
        """
        Initialize query builder.

        Args:
            database: pymongo Database handle
        """
        self.database = database

    def _id_filter(self, record_id: ObjectId | str, filters: dict[str, Any] | None) -> dict[str, Any] | None:
        object_id = to_object_id(record_id)
        if object_id is None:
            return None
        return {"_id": object_id, **(filters or {})}

    def get_by_id(
        self, collection: str, record_id: ObjectId | str, filters: dict[str, Any] | None = None
    ) -> dict[str, Any] | None:
        """
        Fetch a single record by ID.

        Args:
            collection: Collection name
            record_id: ObjectId or its hex string
            filters: Extra field:value conditions (e.g. owner)

        Returns:
            Record dictionary or None if not found or the id is malformed

        Example:
            >>> builder = get_query_builder(settings.todo_database)
            >>> todo = builder.get_by_id("todos", todo_id, filters={"user_id": user_id})
        """
        query = self._id_filter(record_id, filters)
        if query is None:
            return None
        return self.database[collection].find_one(query)

    def get_by_field(self, collection: str, field: str, value: Any) -> dict[str, Any] | None:
        """
        Fetch a single record by field value.

        Args:
            collection: Collection name
            field: Field name to filter by
            value: Field value

        Returns:
            First matching record or None

        Example:
            >>> user = builder.get_by_field("users", "email", "user@example.com")
        """
        return self.database[collection].find_one({field: value})

    def list_records(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        sort: Sort | None = None,
    ) -> list[dict[str, Any]]:
        """
        List records with optional filtering and ordering.

        Args:
            collection: Collection name
            filters: Dictionary of field:value pairs for filtering
            sort: List of (field, direction) pairs, e.g. [("created_at", DESCENDING)]

        Returns:
            List of record dictionaries

        Example:
            >>> todos = builder.list_records(
            ...     "todos",
            ...     filters={"user_id": user_id},
            ...     sort=[("created_at", DESCENDING)],
            ... )
        """
        cursor = self.database[collection].find(filters or {})

        if sort:
            cursor = cursor.sort(sort)

        return list(cursor)

    def insert_record(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a single record.

        Args:
            collection: Collection name
            data: Record data dictionary

        Returns:
            The inserted record including its generated ``_id``

        Raises:
            pymongo.errors.DuplicateKeyError: If a unique index is violated

        Example:
            >>> todo = builder.insert_record("todos", {"title": "buy milk", "user_id": user_id})
        """
        document = dict(data)
        result = self.database[collection].insert_one(document)
        document["_id"] = result.inserted_id
        return document

    def update_record(
        self,
        collection: str,
        record_id: ObjectId | str,
        data: dict[str, Any],
        filters: dict[str, Any] | None = None,
        return_previous: bool = False,
    ) -> dict[str, Any] | None:
        """
        Atomically update a record by ID.

        Args:
            collection: Collection name
            record_id: ObjectId or its hex string
            data: Fields to set
            filters: Extra field:value conditions (e.g. owner)
            return_previous: Return the document as it was before the update

        Returns:
            Updated (or previous) record dictionary, None if nothing matched

        Example:
            >>> before = builder.update_record(
            ...     "todos", todo_id, {"completed": True},
            ...     filters={"user_id": user_id}, return_previous=True
            ... )
        """
        query = self._id_filter(record_id, filters)
        if query is None:
            return None
        return self.database[collection].find_one_and_update(
            query,
            {"$set": data},
            return_document=ReturnDocument.BEFORE if return_previous else ReturnDocument.AFTER,
        )

    def delete_record(
        self, collection: str, record_id: ObjectId | str, filters: dict[str, Any] | None = None
    ) -> dict[str, Any] | None:
        """
        Atomically delete a record by ID.

        Args:
            collection: Collection name
            record_id: ObjectId or its hex string
            filters: Extra field:value conditions (e.g. owner)

        Returns:
            The deleted record, or None if nothing matched

        Example:
            >>> deleted = builder.delete_record("todos", todo_id, filters={"user_id": user_id})
        """
        query = self._id_filter(record_id, filters)
        if query is None:
            return None
        return self.database[collection].find_one_and_delete(query)

    def exists(self, collection: str, filters: dict[str, Any]) -> bool:
        """Check if at least one record matches filters."""
        return self.database[collection].find_one(filters, {"_id": 1}) is not None

    def ensure_index(self, collection: str, keys: Sort, unique: bool = False) -> str:
        """
        Create an index if it does not exist yet.

        Args:
            collection: Collection name
            keys: List of (field, direction) pairs
            unique: Enforce uniqueness

        Returns:
            Index name
        """
        name = self.database[collection].create_index(keys, unique=unique)
        logger.debug(f"Ensured index {name} on {collection}", extra={"collection": collection})
        return name


def get_query_builder(database: str) -> MongoQueryBuilder:
    """
    Get instance of MongoQueryBuilder.

    Args:
        database: Database name (settings.auth_database or settings.todo_database)

    Returns:
        MongoQueryBuilder instance bound to that database

    Example:
        >>> db = get_query_builder(settings.todo_database)
        >>> todos = db.list_records("todos", filters={"user_id": user_id})
    """
    return MongoQueryBuilder(get_database(database))
