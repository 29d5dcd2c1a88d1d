"""User schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Request fields default to None so that missing values reach the service,
# which owns the validation messages.


class UserRegister(BaseModel):
    """User registration request."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str | None = Field(None, max_length=255)
    email: str | None = Field(None, max_length=255)
    password: str | None = Field(None, max_length=128)
    confirm_password: str | None = Field(None, max_length=128)


class UserLogin(BaseModel):
    """User login request."""

    email: str | None = Field(None, max_length=255)
    password: str | None = Field(None, max_length=128)


class UserEdit(BaseModel):
    """Profile and password change request."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str | None = Field(None, max_length=255)
    email: str | None = Field(None, max_length=255)
    current_password: str | None = Field(None, max_length=128)
    new_password: str | None = Field(None, max_length=128)
    confirm_new_password: str | None = Field(None, max_length=128)


class LoginResponse(BaseModel):
    """Login response with token and identity."""

    token: str
    id: int
    name: str


class UserResponse(BaseModel):
    """Public user information. Never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    avatar: str | None
    posts: int
    created_at: datetime
    updated_at: datetime
