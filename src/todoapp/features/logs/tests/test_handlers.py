"""Tests for the log ingestion handlers."""

import logging

import pytest
from fastapi.testclient import TestClient


def _frontend_records(caplog) -> list[logging.LogRecord]:
    return [r for r in caplog.records if getattr(r, "action_type", None) == "frontend_log"]


def test_log_health(todo_client: TestClient) -> None:
    response = todo_client.get("/api/logs/health")

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Frontend logging endpoint is healthy"}


def test_entry_is_reemitted_with_receipt_metadata(todo_client: TestClient, caplog) -> None:
    caplog.set_level(logging.INFO)

    response = todo_client.post(
        "/api/logs",
        json={
            "level": "error",
            "message": "Failed to fetch todos",
            "service": "todo-frontend",
            "context": {"status": 500},
        },
        headers={"User-Agent": "pytest-agent"},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Log received"}
    records = _frontend_records(caplog)
    assert len(records) == 1
    record = records[0]
    assert record.levelno == logging.ERROR
    assert record.getMessage() == "[Frontend] Failed to fetch todos"
    assert record.log_source == "frontend"
    assert record.client_entry["context"] == {"status": 500}
    assert record.client_entry["service"] == "todo-frontend"
    assert record.client_entry["user_agent"] == "pytest-agent"
    assert record.client_entry["received_at"]


@pytest.mark.parametrize(("level", "expected"), [("warn", logging.WARNING), ("info", logging.INFO), ("trace", logging.INFO)])
def test_levels_are_mapped(todo_client: TestClient, caplog, level: str, expected: int) -> None:
    caplog.set_level(logging.INFO)

    todo_client.post("/api/logs", json={"level": level, "message": "hello"})

    assert _frontend_records(caplog)[0].levelno == expected


@pytest.mark.parametrize("payload", [{"level": "error"}, {"message": "hello"}, {}])
def test_missing_level_or_message_returns_400(todo_client: TestClient, payload: dict) -> None:
    response = todo_client.post("/api/logs", json=payload)

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "message": "Invalid log data. Required fields: level, message",
    }


def test_ingestion_needs_no_token(todo_client: TestClient) -> None:
    response = todo_client.post("/api/logs", json={"level": "info", "message": "anonymous"})

    assert response.status_code == 200
