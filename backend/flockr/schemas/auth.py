"""
Auth request/response schemas

Request fields are optional here so that missing values reach the auth
service, which reports them with its own messages.
"""
from typing import Optional

from flockr.schemas.base import CamelModel
from flockr.schemas.user import UserResponse


class RegisterRequest(CamelModel):
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    terms_and_conditions: Optional[bool] = None


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ResendVerificationRequest(CamelModel):
    email: Optional[str] = None


class RegisterResponse(CamelModel):
    message: str
    user: UserResponse


class VerifyEmailResponse(CamelModel):
    message: str
    user: UserResponse


class AuthResponse(CamelModel):
    token: str
    token_type: str = "bearer"
    user: UserResponse
