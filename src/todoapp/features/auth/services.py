"""Business logic for user accounts and tokens."""

import logging
from typing import Any

from jose import JWTError
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from src.todoapp.config import settings
from src.todoapp.features.auth.schemas import LoginRequest, SignupRequest
from src.todoapp.services.auth import TokenService, get_token_service, hash_password, verify_password
from src.todoapp.services.database import MongoQueryBuilder, get_query_builder, utc_now
from src.todoapp.services.exceptions import (
    AuthenticationError,
    BadRequestError,
    ConflictError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

USERS = "users"

INVALID_CREDENTIALS = "Invalid email or password"


def normalize_email(email: str | None) -> str:
    """Emails are stored and matched trimmed and lower-cased."""
    return (email or "").strip().lower()


class UserService:
    """Service for signup, login and token resolution."""

    def __init__(
        self,
        db: MongoQueryBuilder,
        tokens: TokenService,
        password_min_length: int = 6,
    ) -> None:
        self.db = db
        self.tokens = tokens
        self.password_min_length = password_min_length

    def ensure_indexes(self) -> None:
        """Create the unique email index (idempotent)."""
        self.db.ensure_index(USERS, [("email", ASCENDING)], unique=True)

    def issue_token(self, user: dict[str, Any]) -> str:
        return self.tokens.issue_token(str(user["_id"]), user["email"])

    def signup(self, payload: SignupRequest) -> tuple[dict[str, Any], str]:
        """
        Register a new user and issue a token.

        Args:
            payload: Signup request

        Returns:
            Tuple of (stored user document, token)

        Raises:
            BadRequestError: 400 if a field is missing or the password is too short
            ConflictError: 409 if the email is already registered
        """
        full_name = (payload.full_name or "").strip()
        email = normalize_email(payload.email)
        password = payload.password or ""

        if not full_name or not email or not password:
            raise BadRequestError(
                "Full name, email, and password are required", reason="Missing required fields"
            )

        if len(password) < self.password_min_length:
            raise BadRequestError(
                f"Password must be at least {self.password_min_length} characters long",
                reason="Password too short",
            )

        if self.db.exists(USERS, {"email": email}):
            raise ConflictError("User with this email already exists", reason="User already exists")

        now = utc_now()
        try:
            user = self.db.insert_record(
                USERS,
                {
                    "full_name": full_name,
                    "email": email,
                    "password": hash_password(password),
                    "created_at": now,
                    "updated_at": now,
                },
            )
        except DuplicateKeyError as e:
            # Lost a race with a concurrent signup for the same email
            raise ConflictError(
                "User with this email already exists", reason="Duplicate key on insert"
            ) from e

        return user, self.issue_token(user)

    def login(self, payload: LoginRequest) -> tuple[dict[str, Any], str]:
        """
        Check credentials and issue a token.

        Unknown email and wrong password fail with the same message; only
        ``reason`` tells them apart.

        Args:
            payload: Login request

        Returns:
            Tuple of (user document, token)

        Raises:
            BadRequestError: 400 if email or password is missing
            AuthenticationError: 401 if the credentials do not match
        """
        email = normalize_email(payload.email)
        if not email or not payload.password:
            raise BadRequestError("Email and password are required", reason="Missing credentials")

        user = self.db.get_by_field(USERS, "email", email)
        if user is None:
            raise AuthenticationError(INVALID_CREDENTIALS, reason="User not found")

        if not verify_password(payload.password, user.get("password", "")):
            raise AuthenticationError(INVALID_CREDENTIALS, reason="Invalid password")

        return user, self.issue_token(user)

    def resolve_token(self, token: str) -> tuple[dict[str, Any], dict[str, Any]]:
        """
        Verify a token and confirm its user still exists.

        Args:
            token: Bearer token

        Returns:
            Tuple of (verified claims, user document)

        Raises:
            AuthenticationError: 401 for malformed, badly signed or expired
                tokens and for tokens whose user no longer exists
        """
        try:
            claims = self.tokens.verify_token(token)
        except JWTError as e:
            raise AuthenticationError(reason=f"Invalid token: {e}") from e

        user = self.db.get_by_id(USERS, claims["userId"])
        if user is None:
            raise AuthenticationError(reason="User not found")

        return claims, user

    def get_profile(self, user_id: str) -> dict[str, Any]:
        """
        Fetch a user by id.

        Raises:
            NotFoundError: 404 if the user does not exist
        """
        user = self.db.get_by_id(USERS, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user


def get_user_service() -> UserService:
    """UserService bound to the auth database."""
    return UserService(
        db=get_query_builder(settings.auth_database),
        tokens=get_token_service(),
        password_min_length=settings.password_min_length,
    )
