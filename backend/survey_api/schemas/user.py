"""Account request/response contracts."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from survey_api.schemas.base import CamelModel


class RegisterRequest(CamelModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=100)
    role: str


class RegisterOut(CamelModel):
    message: str
    user_id: int


class LoginRequest(CamelModel):
    email: str
    password: str


class UserOut(CamelModel):
    id: int
    email: str
    name: str
    role: str
    email_verified: bool = False
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


class TokenResponse(CamelModel):
    message: str
    token: str
    user: UserOut


class ProfileOut(CamelModel):
    user: Optional[UserOut] = None
    is_authenticated: bool = False


class VerifyEmailOut(CamelModel):
    message: str
    email: str
    redirect: str


class ForgotPasswordRequest(CamelModel):
    email: str = Field(min_length=1)


class ResetPasswordRequest(CamelModel):
    token: str = Field(min_length=1)
    new_password: str = Field(min_length=1)


class AuthMessageOut(CamelModel):
    message: str
