"""Photo session API endpoints: burst upload, selection, share page, download."""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import Response
from sqlmodel import Session

from booth.api.deps import get_client_capabilities, get_current_device, get_photo_storage
from booth.config import settings
from booth.database import get_session
from booth.models.session import PhotoSession, TempPhoto
from booth.schemas.session import (
    PhotoUploadResponse,
    SelectPhotoRequest,
    SelectPhotoResponse,
    SessionCreateRequest,
    SessionCreateResponse,
    SessionResponse,
    TempPhotoResponse,
)
from booth.services.auth_service import TokenClaims
from booth.services.download_service import ClientCapabilities, download_headers
from booth.services.session_service import (
    create_session,
    get_session as get_photo_session,
    get_temp_photos,
    increment_download_count,
    save_temp_photos,
    select_photo,
    share_url,
)
from booth.utils.storage import LocalStorage

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _photo_to_response(p: TempPhoto) -> TempPhotoResponse:
    return TempPhotoResponse(id=p.id, photo_url=p.photo_url, photo_order=p.photo_order)


def _require_session(session_id: str, session: Session) -> PhotoSession:
    photo_session = get_photo_session(session_id, session)
    if not photo_session:
        raise HTTPException(status_code=404, detail="Session not found or expired")
    return photo_session


@router.post("", response_model=SessionCreateResponse)
def create(
    request: SessionCreateRequest,
    device: TokenClaims = Depends(get_current_device),
    session: Session = Depends(get_session),
):
    """Open a photo session for the logged-in booth device."""
    photo_session = create_session(session, request.session_name, device.device_id)
    return SessionCreateResponse(
        success=True,
        session_id=photo_session.id,
        expires_at=photo_session.expires_at.isoformat(),
    )


@router.post("/{session_id}/photos", response_model=PhotoUploadResponse)
def upload_photos(
    session_id: str,
    files: list[UploadFile] = File(...),
    device: TokenClaims = Depends(get_current_device),
    session: Session = Depends(get_session),
    storage: LocalStorage = Depends(get_photo_storage),
):
    """Upload the burst; file order is capture order."""
    _require_session(session_id, session)

    if not files or len(files) > settings.shot_count:
        raise HTTPException(
            status_code=400,
            detail=f"Expected 1 to {settings.shot_count} photos",
        )

    blobs = []
    for f in files:
        data = f.file.read()
        if not data:
            raise HTTPException(status_code=400, detail="Empty file")
        if len(data) > settings.max_upload_bytes:
            raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="File too large")
        blobs.append(data)

    records = save_temp_photos(session_id, blobs, storage, session)
    return PhotoUploadResponse(success=True, photos=[_photo_to_response(r) for r in records])


@router.post("/{session_id}/select", response_model=SelectPhotoResponse)
def select(
    session_id: str,
    request: SelectPhotoRequest,
    device: TokenClaims = Depends(get_current_device),
    session: Session = Depends(get_session),
    storage: LocalStorage = Depends(get_photo_storage),
):
    """Pick the keeper; returns the link to encode in the QR code."""
    try:
        photo_session = select_photo(session_id, request.order, storage, session)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return SelectPhotoResponse(
        success=True,
        photo_url=photo_session.selected_photo_url,
        share_url=share_url(session_id),
    )


@router.get("/{session_id}", response_model=SessionResponse)
def get_one(session_id: str, session: Session = Depends(get_session)):
    """Public session info for the download page."""
    photo_session = _require_session(session_id, session)
    photos = get_temp_photos(session_id, session)
    return SessionResponse(
        id=photo_session.id,
        session_name=photo_session.session_name,
        created_at=photo_session.created_at.isoformat(),
        expires_at=photo_session.expires_at.isoformat(),
        selected_photo_url=photo_session.selected_photo_url,
        download_count=photo_session.download_count,
        share_url=share_url(session_id),
        photos=[_photo_to_response(p) for p in photos],
    )


@router.get("/{session_id}/download")
def download(
    session_id: str,
    capabilities: ClientCapabilities = Depends(get_client_capabilities),
    session: Session = Depends(get_session),
    storage: LocalStorage = Depends(get_photo_storage),
):
    """Serve the selected photo as attachment or inline, per client capability."""
    photo_session = _require_session(session_id, session)
    if not photo_session.selected_photo_key:
        raise HTTPException(status_code=404, detail="No photo selected yet")

    try:
        data = storage.read(photo_session.selected_photo_key)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="Photo file missing")

    increment_download_count(photo_session, session)
    return Response(content=data, headers=download_headers(capabilities, len(data)))
