"""
Authentication routes

- Registration with email verification (rate limited)
- Email verification link target
- Login returning a 1-hour bearer token (rate limited)
- Verification email resend (rate limited)
- Current user lookup
"""
from fastapi import APIRouter, Depends, Request, status

from flockr.api.deps import TokenClaims, get_auth_service, get_current_claims
from flockr.core.rate_limit import auth_limit
from flockr.schemas import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResendVerificationRequest,
    UserResponse,
    VerifyEmailResponse,
)
from flockr.services.auth_service import AuthService

router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
@auth_limit
async def register(
    request: Request,
    data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Register a new account.

    The account starts unverified; a verification link is emailed. If the
    email cannot be sent the account is not kept.
    """
    user = await auth_service.register(
        email=data.email,
        first_name=data.first_name,
        last_name=data.last_name,
        password=data.password,
        role=data.role,
        terms_and_conditions=data.terms_and_conditions,
    )
    return RegisterResponse(
        message="User created successfully. Please check your email to verify your account.",
        user=UserResponse.model_validate(user),
    )


@router.get("/verify-email/{token}", response_model=VerifyEmailResponse)
async def verify_email(
    token: str,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Consume a verification token from the emailed link."""
    user = await auth_service.verify_email(token)
    return VerifyEmailResponse(
        message="Email verified successfully",
        user=UserResponse.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
@auth_limit
async def login(
    request: Request,
    credentials: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Login and get a bearer token."""
    result = await auth_service.login(credentials.email, credentials.password)
    return AuthResponse(token=result.token, user=UserResponse.model_validate(result.user))


@router.post("/resend-verification", response_model=MessageResponse)
@auth_limit
async def resend_verification(
    request: Request,
    data: ResendVerificationRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Send a fresh verification link.

    Always returns the same message to prevent email enumeration.
    """
    await auth_service.resend_verification(data.email)
    return MessageResponse(
        message="If an unverified account with that email exists, a verification link has been sent"
    )


@router.get("/me", response_model=UserResponse)
async def get_me(
    claims: TokenClaims = Depends(get_current_claims),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Get current authenticated user"""
    user = await auth_service.get_current_user(claims.id)
    return UserResponse.model_validate(user)
