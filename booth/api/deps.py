"""Common API dependencies: device token extraction, app-owned collaborators."""

import secrets

from fastapi import Depends, Header, HTTPException, Query, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from booth.config import settings
from booth.services.auth_service import AuthError, TokenClaims, verify_token
from booth.services.download_service import ClientCapabilities
from booth.services.password_cache import PasswordRevealCache
from booth.utils.storage import LocalStorage

bearer_scheme = HTTPBearer()


def get_current_device(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> TokenClaims:
    """Validate the device token. Expired and malformed both mean log in again."""
    try:
        return verify_token(credentials.credentials)
    except AuthError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def require_admin(x_admin_key: str = Header(default="")) -> None:
    """Guard admin routes when an admin key is configured."""
    if settings.admin_key and not secrets.compare_digest(x_admin_key, settings.admin_key):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )


def get_password_cache(request: Request) -> PasswordRevealCache:
    return request.app.state.password_cache


def get_photo_storage(request: Request) -> LocalStorage:
    return request.app.state.storage


def get_client_capabilities(
    auto_download: bool = Query(default=True),
) -> ClientCapabilities:
    """Capabilities reported by the page that requests the download."""
    return ClientCapabilities(supports_auto_download=auto_download)
