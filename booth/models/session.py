"""Photo session and temporary photo models."""

import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class PhotoSession(SQLModel, table=True):
    __tablename__ = "photo_sessions"

    id: str = Field(default_factory=lambda: f"ses_{secrets.token_hex(6)}", primary_key=True)
    session_name: str = Field(default="party-photo")
    device_id: Optional[str] = Field(default=None, index=True)
    selected_photo_url: Optional[str] = None
    selected_photo_key: Optional[str] = None
    download_count: int = Field(default=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    expires_at: datetime = Field(index=True)


class TempPhoto(SQLModel, table=True):
    __tablename__ = "temp_photos"

    id: str = Field(default_factory=lambda: f"tmp_{secrets.token_hex(6)}", primary_key=True)
    session_id: str = Field(foreign_key="photo_sessions.id", index=True)
    photo_url: str
    storage_key: str
    photo_order: int  # 1-based capture order
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
