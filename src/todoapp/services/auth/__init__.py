"""Authentication module: token signing, password hashing and remote validation."""

from src.todoapp.services.auth.client import AuthServiceClient
from src.todoapp.services.auth.dependencies import (
    get_auth_client,
    get_current_user,
    set_auth_client,
)
from src.todoapp.services.auth.models import AuthenticatedUser
from src.todoapp.services.auth.passwords import hash_password, verify_password
from src.todoapp.services.auth.tokens import TokenService, get_token_service

__all__ = [
    "AuthServiceClient",
    "get_auth_client",
    "get_current_user",
    "set_auth_client",
    "AuthenticatedUser",
    "hash_password",
    "verify_password",
    "TokenService",
    "get_token_service",
]
