"""
API dependencies

Access control is stateless: the bearer token's claims are trusted until the
token expires, and role checks read the role claim.
"""
from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from flockr.core.config import Settings
from flockr.core.database import get_db
from flockr.core.exceptions import AuthError, ForbiddenError
from flockr.core.security import decode_token
from flockr.services.auth_email_service import AuthEmailService
from flockr.services.auth_service import AuthService
from flockr.services.product_service import ProductService

# auto_error=False so a missing header becomes our own 401 message
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by a bearer token."""
    id: str
    email: str
    role: str


def get_auth_service(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> AuthService:
    settings = request.app.state.settings
    email_service = AuthEmailService(request.app.state.email_provider, settings)
    return AuthService(db, email_service, settings)


def get_product_service(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> ProductService:
    return ProductService(db, request.app.state.media_store, request.app.state.settings)


async def get_current_claims(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> TokenClaims:
    """Require a valid bearer token and expose its claims."""
    if not credentials or not credentials.credentials:
        raise AuthError("Authentication required")

    settings: Settings = request.app.state.settings
    payload = decode_token(
        credentials.credentials,
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )

    if not payload or payload.get("type") != "access":
        raise AuthError("Invalid or expired token")

    user_id = payload.get("id") or payload.get("sub")
    if not user_id or not payload.get("role"):
        raise AuthError("Invalid or expired token")

    claims = TokenClaims(id=str(user_id), email=payload.get("email", ""), role=payload["role"])
    request.state.user = claims
    return claims


def require_role(*roles: str):
    """
    Build a dependency that admits only the given roles.

    Authentication runs first, so a missing token is still a 401 and a
    wrong role is a 403.
    """
    allowed = set(roles)

    async def role_checker(claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
        if claims.role not in allowed:
            if allowed == {"seller"}:
                raise ForbiddenError("Only sellers can perform this action")
            raise ForbiddenError(f"Requires role: {', '.join(sorted(allowed))}")
        return claims

    return role_checker


require_seller = require_role("seller")
