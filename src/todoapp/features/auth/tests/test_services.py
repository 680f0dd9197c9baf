"""Tests for UserService."""

from datetime import timedelta
from unittest.mock import Mock

import mongomock
import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from src.todoapp.features.auth.schemas import LoginRequest, SignupRequest
from src.todoapp.features.auth.services import UserService, normalize_email
from src.todoapp.services.auth.tokens import TokenService
from src.todoapp.services.database import MongoQueryBuilder
from src.todoapp.services.exceptions import (
    AuthenticationError,
    BadRequestError,
    ConflictError,
    NotFoundError,
)


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(secret="test-secret")


@pytest.fixture
def service(mongo: mongomock.MongoClient, tokens: TokenService) -> UserService:
    user_service = UserService(MongoQueryBuilder(mongo["auth-test"]), tokens)
    user_service.ensure_indexes()
    return user_service


def _signup(service: UserService, email: str = "a@x.com", password: str = "secret1"):
    return service.signup(SignupRequest(full_name="Alice", email=email, password=password))


def test_normalize_email() -> None:
    assert normalize_email("  Alice@Example.COM ") == "alice@example.com"
    assert normalize_email(None) == ""


def test_signup_token_resolves_to_new_user(service: UserService) -> None:
    user, token = _signup(service)

    claims, resolved = service.resolve_token(token)

    assert claims["userId"] == str(user["_id"])
    assert claims["email"] == "a@x.com"
    assert resolved["_id"] == user["_id"]


def test_signup_stores_timestamps_and_hash(service: UserService) -> None:
    user, _ = _signup(service)

    assert user["created_at"] == user["updated_at"]
    assert user["password"] != "secret1"


def test_signup_duplicate_email_conflicts(service: UserService) -> None:
    _signup(service)

    with pytest.raises(ConflictError) as exc_info:
        _signup(service, email="A@x.com")

    assert exc_info.value.status_code == 409


def test_signup_duplicate_key_race_conflicts(tokens: TokenService) -> None:
    """Test a unique-index violation on insert is reported as a conflict."""
    db = Mock(spec=MongoQueryBuilder)
    db.exists.return_value = False
    db.insert_record.side_effect = DuplicateKeyError("E11000 duplicate key")
    service = UserService(db, tokens)

    with pytest.raises(ConflictError):
        _signup(service)


def test_signup_rejects_short_password(service: UserService) -> None:
    with pytest.raises(BadRequestError) as exc_info:
        _signup(service, password="abc")

    assert exc_info.value.message == "Password must be at least 6 characters long"


def test_login_distinguishes_reasons_internally(service: UserService) -> None:
    _signup(service)

    with pytest.raises(AuthenticationError) as unknown:
        service.login(LoginRequest(email="b@x.com", password="secret1"))
    with pytest.raises(AuthenticationError) as wrong:
        service.login(LoginRequest(email="a@x.com", password="wrong12"))

    assert unknown.value.message == wrong.value.message == "Invalid email or password"
    assert unknown.value.reason == "User not found"
    assert wrong.value.reason == "Invalid password"


def test_login_is_case_insensitive_on_email(service: UserService) -> None:
    user, _ = _signup(service)

    logged_in, token = service.login(LoginRequest(email=" A@X.com", password="secret1"))

    assert logged_in["_id"] == user["_id"]
    assert token


def test_resolve_expired_token_fails(service: UserService) -> None:
    user, _ = _signup(service)
    expired = TokenService("test-secret", expires_in=timedelta(seconds=-60)).issue_token(
        str(user["_id"]), user["email"]
    )

    with pytest.raises(AuthenticationError) as exc_info:
        service.resolve_token(expired)

    assert exc_info.value.message == "Access denied. Invalid token."
    assert exc_info.value.reason.startswith("Invalid token")


def test_resolve_token_of_unknown_user_fails(service: UserService, tokens: TokenService) -> None:
    token = tokens.issue_token(str(ObjectId()), "ghost@x.com")

    with pytest.raises(AuthenticationError) as exc_info:
        service.resolve_token(token)

    assert exc_info.value.reason == "User not found"


def test_get_profile_missing_user(service: UserService) -> None:
    with pytest.raises(NotFoundError):
        service.get_profile(str(ObjectId()))
