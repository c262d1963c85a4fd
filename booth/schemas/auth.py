"""Auth and device admin request/response schemas.

Field names are camelCase on the wire to match the booth front end.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Login / token ---

class LoginRequest(CamelModel):
    device_id: str = ""
    password: str = ""


class LoginResponse(CamelModel):
    success: bool
    token: Optional[str] = None
    device_name: Optional[str] = None
    error: Optional[str] = None


class VerifyTokenRequest(CamelModel):
    token: str = ""


class VerifyTokenResponse(CamelModel):
    success: bool
    device_id: Optional[str] = None
    expires_at: Optional[int] = None  # epoch millis
    error: Optional[str] = None
    reason: Optional[str] = None  # 'malformed' | 'expired'


# --- Device admin ---

class CreateDeviceRequest(CamelModel):
    device_id: str = ""
    password: str = ""
    device_name: str = ""


class CreateDeviceResponse(CamelModel):
    success: bool
    record_id: Optional[str] = None
    device_id: Optional[str] = None
    device_name: Optional[str] = None
    error: Optional[str] = None


class SetDeviceActiveRequest(CamelModel):
    device_id: str
    is_active: bool


class StatusResponse(CamelModel):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None


class DeviceResponse(CamelModel):
    id: str
    device_id: str
    device_name: str
    is_active: bool
    created_at: str
    last_login: Optional[str] = None


class DeviceListResponse(CamelModel):
    success: bool
    devices: list[DeviceResponse]


class PasswordRevealResponse(CamelModel):
    success: bool
    password: str
