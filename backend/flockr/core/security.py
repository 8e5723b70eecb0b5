"""
Security utilities - password hashing, JWT tokens, verification tokens

Uses timezone-aware datetime (datetime.now(timezone.utc)) throughout.
Access tokens carry a JTI so they can be told apart in logs.
"""
import hashlib
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from flockr.core.config import settings

# Compared against when the email is unknown so login timing stays uniform
_DUMMY_HASH = bcrypt.hashpw(b"flockr-timing-guard", bcrypt.gensalt(rounds=4)).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            hashed_password.encode("utf-8")
        )
    except ValueError:
        # Malformed stored hash
        return False


def dummy_verify_password(plain_password: str) -> None:
    """Burn a bcrypt comparison for an account that does not exist."""
    verify_password(plain_password, _DUMMY_HASH)


def get_password_hash(password: str, rounds: Optional[int] = None) -> str:
    """Generate password hash"""
    return bcrypt.hashpw(
        password.encode("utf-8"),
        bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    ).decode("utf-8")


def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None,
    secret_key: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> str:
    """Create JWT access token"""
    to_encode = data.copy()
    # RFC 7519: sub must be a string
    if "sub" in to_encode:
        to_encode["sub"] = str(to_encode["sub"])
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({
        "exp": expire,
        "type": "access",
        "jti": str(uuid.uuid4()),
        "iat": now,
    })
    return jwt.encode(
        to_encode,
        secret_key or settings.SECRET_KEY,
        algorithm=algorithm or settings.ALGORITHM,
    )


def decode_token(
    token: str,
    secret_key: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> Optional[dict]:
    """Decode and validate JWT token. Returns None if invalid or expired."""
    try:
        return jwt.decode(
            token,
            secret_key or settings.SECRET_KEY,
            algorithms=[algorithm or settings.ALGORITHM],
        )
    except JWTError:
        return None


def generate_verification_token() -> str:
    """256-bit random token for email verification links."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """Digest stored in place of a raw verification token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
