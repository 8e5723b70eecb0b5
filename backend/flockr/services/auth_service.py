"""
Auth Service

Registration with email verification, verification, and login.

Registration is all-or-nothing with respect to the verification email: the
user row is committed, the email is sent, and if delivery fails the row is
deleted again before DeliveryError propagates.
"""
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from flockr.core.config import Settings
from flockr.core.exceptions import (
    AuthError,
    ConflictError,
    DeliveryError,
    InvalidTokenError,
    UnverifiedError,
    ValidationError,
)
from flockr.core.security import (
    create_access_token,
    dummy_verify_password,
    generate_verification_token,
    get_password_hash,
    hash_token,
    verify_password,
)
from flockr.core.utils import utcnow
from flockr.models import User, UserRole
from flockr.repositories import SqlUserRepository, UserRepository
from flockr.services.auth_email_service import AuthEmailService

logger = logging.getLogger(__name__)

VALID_ROLES = {role.value for role in UserRole}


@dataclass
class LoginResult:
    token: str
    user: User


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _clean(value: Optional[str]) -> str:
    return value.strip() if isinstance(value, str) else ""


class AuthService:
    """
    Service for account lifecycle operations.

    Features:
    - Registration with password policy and role selection
    - Email verification with single-use, expiring tokens
    - Login issuing 1-hour bearer tokens
    - Verification email resend
    """

    def __init__(
        self,
        db: AsyncSession,
        email_service: AuthEmailService,
        settings: Settings,
        users: Optional[UserRepository] = None,
    ):
        self.db = db
        self.email_service = email_service
        self.settings = settings
        self.users = users or SqlUserRepository(db)

    # ============================================================
    # Registration
    # ============================================================

    def _validate_email(self, email: str) -> str:
        email = normalize_email(email)
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError:
            raise ValidationError("Invalid email address")
        return email

    def _new_verification_token(self, user: User) -> str:
        raw_token = generate_verification_token()
        expires_at = utcnow() + timedelta(hours=self.settings.EMAIL_VERIFICATION_TOKEN_HOURS)
        user.set_verification_token(hash_token(raw_token), expires_at)
        return raw_token

    async def _send_verification(self, user: User, raw_token: str) -> Optional[str]:
        """Send the verification email. Returns the failure reason, or None once sent."""
        try:
            result = await self.email_service.send_email_verification(
                to_email=user.email,
                verification_token=raw_token,
                user_name=user.first_name,
            )
        except Exception as e:
            logger.error(f"Verification email to user {user.id} raised {type(e).__name__}: {e}")
            return f"{type(e).__name__}: {e}"
        return None if result.success else (result.error or "send failed")

    async def register(
        self,
        email: Optional[str],
        first_name: Optional[str],
        last_name: Optional[str],
        password: Optional[str],
        role: Optional[str] = None,
        terms_and_conditions: Optional[bool] = None,
    ) -> User:
        """
        Register a new, unverified user and send the verification email.

        Raises:
            ValidationError: Missing/invalid fields or weak password
            ConflictError: Email already registered
            DeliveryError: Verification email could not be sent (user removed)
        """
        email, first_name, last_name = _clean(email), _clean(first_name), _clean(last_name)
        if not email or not first_name or not last_name or not password:
            raise ValidationError("All fields are required")

        email = self._validate_email(email)

        if len(password) < self.settings.PASSWORD_MIN_LENGTH:
            raise ValidationError(
                f"Password must be at least {self.settings.PASSWORD_MIN_LENGTH} characters"
            )

        role = _clean(role).lower() or UserRole.BUYER.value
        if role not in VALID_ROLES:
            raise ValidationError("Role must be either 'buyer' or 'seller'")

        if terms_and_conditions is False:
            raise ValidationError("You must accept the terms and conditions")

        if await self.users.find_by_email(email):
            raise ConflictError("User already exists")

        user = User(
            email=email,
            first_name=first_name,
            last_name=last_name,
            hashed_password=get_password_hash(password, rounds=self.settings.BCRYPT_ROUNDS),
            role=role,
            is_verified=False,
        )
        raw_token = self._new_verification_token(user)
        try:
            user = await self.users.add(user)
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            await self.db.rollback()
            raise ConflictError("User already exists")
        await self.db.commit()
        logger.info(f"Registered user {user.id} ({role}), sending verification email")

        error = await self._send_verification(user, raw_token)
        if error:
            await self.users.delete(user)
            await self.db.commit()
            logger.warning(f"Rolled back registration of {user.id}: verification email failed")
            raise DeliveryError(details={"user_id": user.id, "error": error})

        return user

    # ============================================================
    # Email verification
    # ============================================================

    async def verify_email(self, token: Optional[str]) -> User:
        """
        Consume a verification token.

        Raises:
            InvalidTokenError: Unknown, already used, or expired token
        """
        token = _clean(token)
        if not token:
            raise InvalidTokenError()

        user = await self.users.find_by_verification_token(hash_token(token), utcnow())
        if not user:
            raise InvalidTokenError()

        user.mark_verified()
        user = await self.users.save(user)
        logger.info(f"Email verified for user {user.id}")
        return user

    async def resend_verification(self, email: Optional[str]) -> None:
        """
        Issue a fresh verification token and email it.

        Silent for unknown or already-verified addresses.
        """
        email = _clean(email)
        if not email:
            raise ValidationError("Email is required")

        user = await self.users.find_by_email(normalize_email(email))
        if not user or user.is_verified:
            logger.info("Verification resend requested for unknown or verified email")
            return

        raw_token = self._new_verification_token(user)
        await self.users.save(user)
        await self.db.commit()

        error = await self._send_verification(user, raw_token)
        if error:
            raise DeliveryError(details={"user_id": user.id, "error": error})

    # ============================================================
    # Login
    # ============================================================

    async def login(self, email: Optional[str], password: Optional[str]) -> LoginResult:
        """
        Check credentials and issue a bearer token.

        Raises:
            ValidationError: Missing email or password
            AuthError: Unknown email or wrong password (indistinguishable)
            UnverifiedError: Correct credentials, unverified email
        """
        email = _clean(email)
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = await self.users.find_by_email(normalize_email(email))
        if not user:
            dummy_verify_password(password)
            logger.info("Login failed: unknown email")
            raise AuthError("Invalid credentials")

        if not verify_password(password, user.hashed_password):
            logger.info(f"Login failed for user {user.id}: invalid password")
            raise AuthError("Invalid credentials")

        if not user.is_verified:
            logger.info(f"Login refused for user {user.id}: email not verified")
            raise UnverifiedError()

        token = create_access_token(
            {"sub": user.id, "id": user.id, "email": user.email, "role": user.role},
            expires_delta=timedelta(minutes=self.settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            secret_key=self.settings.SECRET_KEY,
            algorithm=self.settings.ALGORITHM,
        )
        logger.info(f"User {user.id} logged in")
        return LoginResult(token=token, user=user)

    async def get_current_user(self, user_id: str) -> User:
        user = await self.users.find_by_id(user_id)
        if not user:
            raise AuthError("User not found")
        return user
