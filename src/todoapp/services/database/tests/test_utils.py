"""Tests for MongoQueryBuilder."""

import mongomock
import pytest
from bson import ObjectId
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError

from src.todoapp.services.database import MongoQueryBuilder, get_query_builder, to_object_id, utc_now


@pytest.fixture
def builder(mongo: mongomock.MongoClient) -> MongoQueryBuilder:
    return MongoQueryBuilder(mongo["utils-test"])


def test_to_object_id() -> None:
    object_id = ObjectId()

    assert to_object_id(object_id) is object_id
    assert to_object_id(str(object_id)) == object_id
    assert to_object_id("nope") is None


def test_utc_now_has_millisecond_precision() -> None:
    now = utc_now()

    assert now.tzinfo is not None
    assert now.microsecond % 1000 == 0


def test_get_query_builder_uses_patched_client(mongo: mongomock.MongoClient) -> None:
    get_query_builder("some-db").insert_record("things", {"a": 1})

    assert mongo["some-db"]["things"].count_documents({}) == 1


def test_insert_returns_id(builder: MongoQueryBuilder) -> None:
    record = builder.insert_record("things", {"name": "a"})

    assert isinstance(record["_id"], ObjectId)
    assert builder.get_by_id("things", str(record["_id"]))["name"] == "a"


def test_filters_scope_id_lookups(builder: MongoQueryBuilder) -> None:
    record = builder.insert_record("things", {"owner": "u1"})

    assert builder.get_by_id("things", record["_id"], filters={"owner": "u1"}) is not None
    assert builder.get_by_id("things", record["_id"], filters={"owner": "u2"}) is None
    assert builder.update_record("things", record["_id"], {"x": 1}, filters={"owner": "u2"}) is None
    assert builder.delete_record("things", record["_id"], filters={"owner": "u2"}) is None


def test_update_returns_previous_or_updated(builder: MongoQueryBuilder) -> None:
    record = builder.insert_record("things", {"count": 1})

    previous = builder.update_record("things", record["_id"], {"count": 2}, return_previous=True)
    updated = builder.update_record("things", record["_id"], {"count": 3})

    assert previous["count"] == 1
    assert updated["count"] == 3


def test_malformed_ids_match_nothing(builder: MongoQueryBuilder) -> None:
    assert builder.get_by_id("things", "bad") is None
    assert builder.update_record("things", "bad", {"x": 1}) is None
    assert builder.delete_record("things", "bad") is None


def test_list_records_filter_and_sort(builder: MongoQueryBuilder) -> None:
    for rank in range(5):
        builder.insert_record("things", {"rank": rank, "group": "g" if rank < 3 else "h"})

    records = builder.list_records("things", filters={"group": "g"}, sort=[("rank", DESCENDING)])

    assert [record["rank"] for record in records] == [2, 1, 0]
    assert builder.exists("things", {"rank": 4})
    assert not builder.exists("things", {"rank": 9})


def test_unique_index_rejects_duplicates(builder: MongoQueryBuilder) -> None:
    builder.ensure_index("users", [("email", 1)], unique=True)
    builder.insert_record("users", {"email": "a@x.com"})

    with pytest.raises(DuplicateKeyError):
        builder.insert_record("users", {"email": "a@x.com"})
