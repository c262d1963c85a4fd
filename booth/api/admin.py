"""Device administration API endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlmodel import Session

from booth.api.deps import get_password_cache, require_admin
from booth.database import get_session
from booth.schemas.auth import (
    CreateDeviceRequest,
    CreateDeviceResponse,
    DeviceListResponse,
    DeviceResponse,
    PasswordRevealResponse,
    SetDeviceActiveRequest,
    StatusResponse,
)
from booth.services.auth_service import (
    DuplicateDevice,
    NotFound,
    create_device,
    list_devices,
    set_device_active,
)
from booth.services.password_cache import MASK, PasswordRevealCache

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.post("/devices", response_model=CreateDeviceResponse)
def create(
    request: CreateDeviceRequest,
    session: Session = Depends(get_session),
    cache: PasswordRevealCache = Depends(get_password_cache),
):
    """Register a booth device. The password can be revealed once afterwards."""
    try:
        record_id = create_device(request.device_id, request.password, request.device_name, session)
    except ValueError:
        return CreateDeviceResponse(success=False, error="All fields are required")
    except DuplicateDevice:
        return JSONResponse(
            status_code=409,
            content=CreateDeviceResponse(
                success=False, error="Device ID already exists"
            ).model_dump(by_alias=True, exclude_none=True),
        )

    device_id = request.device_id.strip()
    cache.put(device_id, request.password.strip())
    return CreateDeviceResponse(
        success=True,
        record_id=record_id,
        device_id=device_id,
        device_name=request.device_name.strip(),
    )


@router.get("/devices", response_model=DeviceListResponse)
def list_all(session: Session = Depends(get_session)):
    """List devices, newest first. Password hashes are never returned."""
    devices = list_devices(session)
    return DeviceListResponse(
        success=True,
        devices=[
            DeviceResponse(
                id=d.id,
                device_id=d.device_id,
                device_name=d.device_name,
                is_active=d.is_active,
                created_at=d.created_at.isoformat(),
                last_login=d.last_login.isoformat() if d.last_login else None,
            )
            for d in devices
        ],
    )


@router.post("/devices/active", response_model=StatusResponse)
def set_active(request: SetDeviceActiveRequest, session: Session = Depends(get_session)):
    """Enable or disable a device. Tokens already issued stay valid until expiry."""
    try:
        set_device_active(request.device_id, request.is_active, session)
    except NotFound:
        return JSONResponse(
            status_code=404,
            content=StatusResponse(
                success=False, error="Device not found"
            ).model_dump(by_alias=True, exclude_none=True),
        )
    return StatusResponse(
        success=True,
        message="Device enabled" if request.is_active else "Device disabled",
    )


@router.get("/devices/{device_id}/password", response_model=PasswordRevealResponse)
def reveal_password(
    device_id: str,
    cache: PasswordRevealCache = Depends(get_password_cache),
):
    """Show a just-created device's password once; masked afterwards."""
    password = cache.reveal(device_id)
    return PasswordRevealResponse(success=True, password=password or MASK)
