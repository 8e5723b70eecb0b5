"""
Flockr Exception Hierarchy

Services raise these; the API layer maps them to HTTP responses using
``status_code``. All exceptions include code, message, and details for
logging and debugging.

Exception Hierarchy:
    FlockrError
    ├── ValidationError
    ├── ConflictError
    ├── AuthError
    │   └── InvalidTokenError
    ├── UnverifiedError
    ├── ForbiddenError
    ├── NotFoundError
    ├── ExternalServiceError
    │   ├── UploadError
    │   ├── MediaStoreError
    │   └── DeliveryError
    └── InternalError
"""
from typing import Optional, Dict, Any


class FlockrError(Exception):
    """
    Base exception for all Flockr errors.

    Attributes:
        message: Human-readable error description, safe to return to clients
        code: Machine-readable error code for programmatic handling
        details: Additional context for logging (never returned to clients)
        status_code: HTTP status the API layer responds with
    """

    default_code: str = "INTERNAL_ERROR"
    default_message: str = "An unexpected error occurred"
    status_code: int = 500

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "status_code": self.status_code,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


# =============================================================================
# CLIENT ERRORS
# =============================================================================

class ValidationError(FlockrError):
    """Malformed or missing input."""
    default_code = "VALIDATION_ERROR"
    default_message = "Invalid request"
    status_code = 400


class ConflictError(FlockrError):
    """Resource already exists."""
    default_code = "CONFLICT"
    default_message = "Resource already exists"
    status_code = 409


class AuthError(FlockrError):
    """Bad credentials, or a missing/invalid bearer token."""
    default_code = "AUTH_FAILED"
    default_message = "Authentication required"
    status_code = 401


class InvalidTokenError(AuthError):
    """Email verification token is unknown, consumed, or expired."""
    default_code = "INVALID_VERIFICATION_TOKEN"
    default_message = "Invalid or expired verification token"
    status_code = 400


class UnverifiedError(FlockrError):
    """Credentials are valid but the email address is not verified yet."""
    default_code = "EMAIL_NOT_VERIFIED"
    default_message = "Please verify your email before logging in"
    status_code = 403


class ForbiddenError(FlockrError):
    """Authenticated but not permitted."""
    default_code = "FORBIDDEN"
    default_message = "Not authorized to perform this action"
    status_code = 403


class NotFoundError(FlockrError):
    default_code = "NOT_FOUND"
    default_message = "Resource not found"
    status_code = 404


# =============================================================================
# EXTERNAL DEPENDENCY ERRORS
# =============================================================================

class ExternalServiceError(FlockrError):
    """Base exception for failures of third-party services."""
    default_code = "EXTERNAL_SERVICE_ERROR"
    default_message = "An external service failed"
    status_code = 500


class UploadError(ExternalServiceError):
    """Media upload failed."""
    default_code = "MEDIA_UPLOAD_FAILED"
    default_message = "Failed to upload video"


class MediaStoreError(ExternalServiceError):
    """Media deletion or other non-upload media store failure."""
    default_code = "MEDIA_STORE_ERROR"
    default_message = "Media storage operation failed"


class DeliveryError(ExternalServiceError):
    """Email could not be delivered."""
    default_code = "EMAIL_DELIVERY_FAILED"
    default_message = "Failed to send verification email"


class InternalError(FlockrError):
    default_code = "INTERNAL_ERROR"
