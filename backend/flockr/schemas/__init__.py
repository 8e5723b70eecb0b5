"""
Pydantic schemas
"""
from flockr.schemas.base import CamelModel, MessageResponse
from flockr.schemas.user import UserResponse, OwnerSummary
from flockr.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    ResendVerificationRequest,
    RegisterResponse,
    VerifyEmailResponse,
    AuthResponse,
)
from flockr.schemas.product import (
    ProductResponse,
    ProductDetailResponse,
    DiscoverResponse,
)

__all__ = [
    "CamelModel",
    "MessageResponse",
    "UserResponse",
    "OwnerSummary",
    "RegisterRequest",
    "LoginRequest",
    "ResendVerificationRequest",
    "RegisterResponse",
    "VerifyEmailResponse",
    "AuthResponse",
    "ProductResponse",
    "ProductDetailResponse",
    "DiscoverResponse",
]
