"""
Request / response schemas for the auth routes.
"""

from __future__ import annotations

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_core import PydanticCustomError

from auth.breach import MIN_PASSWORD_LENGTH


def _check_email(value: str) -> str:
    # syntax only; the address is stored as submitted
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise PydanticCustomError("invalid_email", "Invalid email")
    return value


class RegisterRequest(BaseModel):
    name: str
    document: str
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def email_format(cls, value: str) -> str:
        return _check_email(value)

    @field_validator("password")
    @classmethod
    def password_length(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise PydanticCustomError(
                "password_too_short",
                "Password must be at least {min_length} characters",
                {"min_length": MIN_PASSWORD_LENGTH},
            )
        return value


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def email_format(cls, value: str) -> str:
        return _check_email(value)


class UserView(BaseModel):
    """Public user profile; the password hash is not part of it."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    document: str
    email: str


class MeResponse(BaseModel):
    user: UserView
