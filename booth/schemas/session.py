"""Photo session request/response schemas."""

from typing import Optional

from pydantic import Field

from booth.schemas.auth import CamelModel


class SessionCreateRequest(CamelModel):
    session_name: str = "party-photo"


class SessionCreateResponse(CamelModel):
    success: bool
    session_id: str
    expires_at: str


class TempPhotoResponse(CamelModel):
    id: str
    photo_url: str
    photo_order: int


class PhotoUploadResponse(CamelModel):
    success: bool
    photos: list[TempPhotoResponse]


class SelectPhotoRequest(CamelModel):
    order: int = Field(ge=1)


class SelectPhotoResponse(CamelModel):
    success: bool
    photo_url: str
    share_url: str


class SessionResponse(CamelModel):
    id: str
    session_name: str
    created_at: str
    expires_at: str
    selected_photo_url: Optional[str] = None
    download_count: int
    share_url: str
    photos: list[TempPhotoResponse]
