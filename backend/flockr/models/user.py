"""
User model

Email verification state lives on the user row: the token digest and its
expiry are present only while the account is unverified.
"""
import enum

from sqlalchemy import Column, String, Boolean, DateTime, Index
from sqlalchemy.orm import relationship

from flockr.core.database import Base
from flockr.core.utils import utcnow, new_id


class UserRole(str, enum.Enum):
    BUYER = "buyer"
    SELLER = "seller"


class User(Base):
    """
    User account model.

    The password is stored only as a bcrypt hash and the verification token
    only as a SHA-256 digest.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)

    # Core fields
    email = Column(String(320), unique=True, index=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String(16), nullable=False, default=UserRole.BUYER.value)

    # Email verification
    is_verified = Column(Boolean, nullable=False, default=False)
    email_verification_token = Column(String(64), nullable=True)
    email_verification_expires = Column(DateTime(timezone=True), nullable=True)

    # Timestamps (UTC-aware)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    products = relationship("Product", back_populates="owner", passive_deletes=True)

    __table_args__ = (
        Index("ix_users_verification_token", "email_verification_token"),
    )

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}')>"

    def set_verification_token(self, token_digest: str, expires_at) -> None:
        """Store a fresh verification token; any previous one stops working."""
        self.email_verification_token = token_digest
        self.email_verification_expires = expires_at

    def mark_verified(self) -> None:
        """Mark email as verified and consume the token."""
        self.is_verified = True
        self.email_verification_token = None
        self.email_verification_expires = None
