"""Security utilities: device tokens and password hashing."""

from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from booth.config import settings

TOKEN_TYPE = "device"


# --- Password Hashing ---

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


# --- Device Tokens ---

def create_device_token(device_id: str, issued_at: datetime | None = None) -> str:
    """Mint a signed bearer token for a device.

    ``exp`` is always ``iat`` plus the configured TTL.
    """
    issued = int((issued_at or datetime.now(timezone.utc)).timestamp())
    ttl = int(timedelta(hours=settings.token_expire_hours).total_seconds())
    payload = {
        "sub": device_id,
        "iat": issued,
        "exp": issued + ttl,
        "type": TOKEN_TYPE,
    }
    return jwt.encode(payload, settings.token_secret, algorithm=settings.token_algorithm)


def decode_token(token: str, now: datetime | None = None) -> dict:
    """Decode and validate a device token. Raises jwt.PyJWTError on failure.

    A token is still valid at the instant ``now == exp`` and expired after it.
    """
    payload = jwt.decode(
        token,
        settings.token_secret,
        algorithms=[settings.token_algorithm],
        options={"require": ["sub", "iat", "exp"], "verify_exp": False},
    )
    exp = payload["exp"]
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise jwt.DecodeError("Expiration Time claim (exp) must be a number")
    if (now or datetime.now(timezone.utc)).timestamp() > exp:
        raise jwt.ExpiredSignatureError("Signature has expired")
    return payload
