"""Device login & token verification API endpoints."""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from booth.database import get_session
from booth.schemas.auth import (
    LoginRequest,
    LoginResponse,
    VerifyTokenRequest,
    VerifyTokenResponse,
)
from booth.services.auth_service import AuthError, InvalidCredentials, login, verify_token

router = APIRouter(prefix="/auth", tags=["auth"])

LOGIN_FAILED = "Device ID or password is incorrect"


@router.post("/login", response_model=LoginResponse)
def device_login(request: LoginRequest, session: Session = Depends(get_session)):
    """Log a booth device in. Returns a bearer token valid for 24 hours."""
    if not request.device_id.strip() or not request.password:
        return LoginResponse(success=False, error="Enter the device ID and password")

    try:
        result = login(request.device_id, request.password, session)
    except InvalidCredentials:
        return LoginResponse(success=False, error=LOGIN_FAILED)

    return LoginResponse(success=True, token=result.token, device_name=result.device_name)


@router.post("/verify", response_model=VerifyTokenResponse)
def verify(request: VerifyTokenRequest):
    """Check a token; both failure reasons mean the booth should log in again."""
    if not request.token:
        return VerifyTokenResponse(success=False, error="No token provided", reason="malformed")

    try:
        claims = verify_token(request.token)
    except AuthError as e:
        return VerifyTokenResponse(
            success=False,
            error="Token is invalid or expired",
            reason=e.code,
        )

    return VerifyTokenResponse(
        success=True,
        device_id=claims.device_id,
        expires_at=claims.expires_at_ms,
    )
