"""Data models for authentication."""

from pydantic import BaseModel, ConfigDict, Field


class AuthenticatedUser(BaseModel):
    """
    Identity of the caller, as confirmed by the auth service.

    Parsed from the validation endpoint's ``data`` payload
    (``{"userId": ..., "email": ..., "fullName": ...}``) and handed to todo
    handlers to scope their data access.

    Attributes:
        user_id: User identifier from the token's userId claim
        email: User email from the token
        full_name: Full name from the live user record

    Example:
        >>> user = AuthenticatedUser.model_validate(
        ...     {"userId": "65f0c0ffee0000000000abcd", "email": "a@x.com", "fullName": "A"}
        ... )
        >>> user.user_id
        '65f0c0ffee0000000000abcd'
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    user_id: str = Field(alias="userId", min_length=1)
    email: str
    full_name: str | None = Field(None, alias="fullName")
