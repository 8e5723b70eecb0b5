"""
Services layer
"""
from flockr.services.auth_email_service import AuthEmailService
from flockr.services.auth_service import AuthService, LoginResult
from flockr.services.email_provider import (
    ConsoleEmailProvider,
    EmailProvider,
    SendGridProvider,
    SendResult,
    build_email_provider,
)
from flockr.services.product_service import DiscoverPage, ProductPatch, ProductService
from flockr.services.storage import MediaAsset, MediaStore, S3MediaStore

__all__ = [
    "AuthEmailService",
    "AuthService",
    "LoginResult",
    "ConsoleEmailProvider",
    "EmailProvider",
    "SendGridProvider",
    "SendResult",
    "build_email_provider",
    "DiscoverPage",
    "ProductPatch",
    "ProductService",
    "MediaAsset",
    "MediaStore",
    "S3MediaStore",
]
