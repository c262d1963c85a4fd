"""Device authentication business logic.

A shared booth device logs in with a device id and password and receives a
signed, time-bounded token. Verification only checks the token itself: a
device deactivated after login keeps a working token until it expires.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

import jwt
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, col, select

from booth.models.device import DeviceCredential
from booth.utils.security import (
    TOKEN_TYPE,
    create_device_token,
    decode_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Base class for auth gate failures."""

    code = "auth_error"


class InvalidCredentials(AuthError):
    code = "invalid_credentials"


class DuplicateDevice(AuthError):
    code = "duplicate_device"


class NotFound(AuthError):
    code = "not_found"


class MalformedToken(AuthError):
    code = "malformed"


class ExpiredToken(AuthError):
    code = "expired"


@dataclass
class LoginResult:
    token: str
    device_name: str


@dataclass
class TokenClaims:
    device_id: str
    issued_at_ms: int
    expires_at_ms: int


def login(device_id: str, password: str, session: Session) -> LoginResult:
    """Check credentials of an active device and mint a token."""
    device_id = device_id.strip()
    device = session.exec(
        select(DeviceCredential).where(
            DeviceCredential.device_id == device_id,
            DeviceCredential.is_active == True,  # noqa: E712
        )
    ).first()

    if not device or not verify_password(password, device.password_hash):
        logger.info("Login rejected for device %s", device_id)
        raise InvalidCredentials("Device ID or password is incorrect")

    _touch_last_login(device, session)

    logger.info("Device %s logged in", device_id)
    return LoginResult(token=create_device_token(device_id), device_name=device.device_name)


def _touch_last_login(device: DeviceCredential, session: Session) -> None:
    """Record the login time. Failure here never blocks the login."""
    try:
        device.last_login = datetime.now(timezone.utc)
        session.add(device)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.warning("Failed to update last_login for %s: %s", device.device_id, e)


def verify_token(token: str, now: datetime | None = None) -> TokenClaims:
    """Decode a device token. Does not consult the credential store."""
    try:
        payload = decode_token(token, now)
    except jwt.ExpiredSignatureError:
        raise ExpiredToken("Token has expired")
    except jwt.PyJWTError:
        raise MalformedToken("Token is invalid")

    if payload.get("type") != TOKEN_TYPE or not isinstance(payload.get("sub"), str):
        raise MalformedToken("Token is invalid")

    return TokenClaims(
        device_id=payload["sub"],
        issued_at_ms=int(payload["iat"]) * 1000,
        expires_at_ms=int(payload["exp"]) * 1000,
    )


def create_device(device_id: str, password: str, device_name: str, session: Session) -> str:
    """Register a new booth device. Returns the credential record id."""
    device_id = device_id.strip()
    password = password.strip()
    device_name = device_name.strip()
    if not device_id or not password or not device_name:
        raise ValueError("device_id, password and device_name are required")

    existing = session.exec(
        select(DeviceCredential).where(DeviceCredential.device_id == device_id)
    ).first()
    if existing:
        raise DuplicateDevice(f"Device {device_id} already exists")

    device = DeviceCredential(
        device_id=device_id,
        password_hash=hash_password(password),
        device_name=device_name,
    )
    session.add(device)
    try:
        session.commit()
    except IntegrityError:
        # Lost a race with a concurrent create of the same id
        session.rollback()
        raise DuplicateDevice(f"Device {device_id} already exists")
    session.refresh(device)

    logger.info("Created device %s (%s)", device_id, device_name)
    return device.id


def set_device_active(device_id: str, is_active: bool, session: Session) -> DeviceCredential:
    """Enable or disable a device. History is kept either way."""
    device = session.exec(
        select(DeviceCredential).where(DeviceCredential.device_id == device_id)
    ).first()
    if not device:
        raise NotFound(f"Device {device_id} not found")

    device.is_active = is_active
    session.add(device)
    session.commit()
    session.refresh(device)

    logger.info("Device %s %s", device_id, "activated" if is_active else "deactivated")
    return device


def list_devices(session: Session) -> list[DeviceCredential]:
    """All devices, newest first."""
    return list(
        session.exec(
            select(DeviceCredential).order_by(col(DeviceCredential.created_at).desc())
        ).all()
    )
