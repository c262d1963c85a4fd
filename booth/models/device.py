"""Device credential model."""

import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class DeviceCredential(SQLModel, table=True):
    __tablename__ = "device_auth"

    id: str = Field(default_factory=lambda: f"auth_{secrets.token_hex(4)}", primary_key=True)
    device_id: str = Field(unique=True, index=True)
    password_hash: str
    device_name: str
    is_active: bool = Field(default=True)
    last_login: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
