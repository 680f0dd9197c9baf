"""API handlers for auth service endpoints."""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials

from src.todoapp.features.auth.dependencies import get_token_user, security
from src.todoapp.features.auth.schemas import (
    AuthPayload,
    LoginRequest,
    SignupRequest,
    TokenIdentityResponse,
    UserResponse,
)
from src.todoapp.features.auth.services import get_user_service
from src.todoapp.services.auth.models import AuthenticatedUser
from src.todoapp.services.exceptions import (
    AuthenticationError,
    BadRequestError,
    ConflictError,
    NotFoundError,
    TodoAppError,
)
from src.todoapp.services.observability import request_log_context
from src.todoapp.services.rate_limiter import auth_rate_limit, default_rate_limit
from src.todoapp.services.responses import ApiResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/signup",
    response_model=ApiResponse[AuthPayload],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
@auth_rate_limit
async def signup(request: Request, payload: SignupRequest) -> ApiResponse[AuthPayload]:
    """
    Register a new user.

    Args:
        payload: fullName, email and password

    Returns:
        The created user (without password) and a signed token

    Raises:
        BadRequestError: 400 if a field is missing or the password is too short
        ConflictError: 409 if the email is already registered
        TodoAppError: 500 if the database fails

    Example Response:
        {
            "success": true,
            "message": "User registered successfully",
            "data": {"user": {"id": "...", "fullName": "A", "email": "a@x.com", ...}, "token": "eyJ..."}
        }
    """
    log_context = request_log_context(request)

    try:
        user, token = get_user_service().signup(payload)
    except (BadRequestError, ConflictError) as e:
        logger.warning(
            f"Signup failed: {e.reason}",
            extra={**log_context, "email": payload.email, "action_type": "user_signup_failed"},
        )
        raise
    except Exception as e:
        logger.error(
            "Error during signup",
            exc_info=True,
            extra={**log_context, "action_type": "user_signup_error"},
        )
        raise TodoAppError("Server error during registration") from e

    logger.info(
        "User registered successfully",
        extra={
            **log_context,
            "user_id": str(user["_id"]),
            "email": user["email"],
            "full_name": user["full_name"],
            "action_type": "user_signup",
            "signup_method": "email",
        },
    )

    return ApiResponse(
        message="User registered successfully",
        data=AuthPayload(user=UserResponse.from_document(user), token=token),
    )


@router.post("/login", response_model=ApiResponse[AuthPayload], response_model_exclude_none=True)
@auth_rate_limit
async def login(request: Request, payload: LoginRequest) -> ApiResponse[AuthPayload]:
    """
    Exchange email and password for a token.

    Unknown email and wrong password produce the same 401 message.

    Raises:
        BadRequestError: 400 if email or password is missing
        AuthenticationError: 401 if the credentials do not match
        TodoAppError: 500 if the database fails
    """
    log_context = request_log_context(request)

    try:
        user, token = get_user_service().login(payload)
    except (BadRequestError, AuthenticationError) as e:
        logger.warning(
            f"Login failed: {e.reason}",
            extra={**log_context, "email": payload.email, "action_type": "user_login_failed"},
        )
        raise
    except Exception as e:
        logger.error(
            "Error during login",
            exc_info=True,
            extra={**log_context, "action_type": "user_login_error"},
        )
        raise TodoAppError("Server error during login") from e

    logger.info(
        "User logged in successfully",
        extra={
            **log_context,
            "user_id": str(user["_id"]),
            "email": user["email"],
            "full_name": user["full_name"],
            "action_type": "user_login",
            "login_method": "password",
        },
    )

    return ApiResponse(
        message="Login successful",
        data=AuthPayload(user=UserResponse.from_document(user), token=token),
    )


@router.get("/profile", response_model=ApiResponse[UserResponse], response_model_exclude_none=True)
@default_rate_limit
async def get_profile(
    request: Request,
    current_user: AuthenticatedUser = Depends(get_token_user),
) -> ApiResponse[UserResponse]:
    """
    Get the authenticated user's profile.

    Raises:
        AuthenticationError: 401 if the token is missing or invalid
        NotFoundError: 404 if the user record is gone
        TodoAppError: 500 if the database fails
    """
    log_context = {**request_log_context(request), "user_id": current_user.user_id}

    try:
        user = get_user_service().get_profile(current_user.user_id)
    except NotFoundError:
        logger.warning(
            "Profile fetch failed: User not found",
            extra={**log_context, "action_type": "profile_fetch_failed"},
        )
        raise
    except Exception as e:
        logger.error(
            "Error fetching profile",
            exc_info=True,
            extra={**log_context, "action_type": "profile_fetch_error"},
        )
        raise TodoAppError("Server error") from e

    logger.info(
        "User profile fetched",
        extra={**log_context, "email": user["email"], "action_type": "profile_fetched"},
    )

    return ApiResponse(data=UserResponse.from_document(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    current_user: AuthenticatedUser = Depends(get_token_user),
) -> MessageResponse:
    """
    Record a logout.

    Tokens are stateless, so nothing is revoked: the client discards its
    token and the server only logs the event.
    """
    logger.info(
        "User logged out",
        extra={
            **request_log_context(request),
            "user_id": current_user.user_id,
            "action_type": "user_logout",
        },
    )
    return MessageResponse(success=True, message="Logged out successfully")


@router.post(
    "/validate", response_model=ApiResponse[TokenIdentityResponse], response_model_exclude_none=True
)
async def validate_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> ApiResponse[TokenIdentityResponse]:
    """
    Validate a bearer token on behalf of another service.

    Every failure (absent, malformed, expired, orphaned token) answers with
    the same 401; the cause is only logged. Not rate limited because the todo
    service calls it once per request.

    Returns:
        userId, email and fullName of the token's owner

    Raises:
        AuthenticationError: 401 if the token is not valid
        TodoAppError: 500 if the database fails
    """
    log_context = request_log_context(request)

    if credentials is None or not credentials.credentials:
        logger.warning(
            "Token validation failed: No token provided",
            extra={**log_context, "action_type": "token_validation_failed"},
        )
        raise AuthenticationError("No token provided")

    try:
        claims, user = get_user_service().resolve_token(credentials.credentials)
    except AuthenticationError as e:
        logger.warning(
            f"Token validation failed: {e.reason}",
            extra={**log_context, "action_type": "token_validation_failed"},
        )
        raise AuthenticationError("Invalid token") from e
    except Exception as e:
        logger.error(
            "Error validating token",
            exc_info=True,
            extra={**log_context, "action_type": "token_validation_error"},
        )
        raise TodoAppError("Server error") from e

    logger.info(
        "Token validated",
        extra={**log_context, "user_id": claims["userId"], "action_type": "token_validated"},
    )

    return ApiResponse(
        data=TokenIdentityResponse(
            user_id=claims["userId"],
            email=claims.get("email", user["email"]),
            full_name=user.get("full_name"),
        )
    )
