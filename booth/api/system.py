"""System API: configuration check and housekeeping."""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from booth.api.deps import get_photo_storage, require_admin
from booth.config import settings
from booth.database import get_session
from booth.services.session_service import cleanup_expired_sessions
from booth.utils.storage import LocalStorage, get_storage_info

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
def check_config():
    """Report whether the server is set up, without exposing secrets."""
    return {
        "success": True,
        "config": {
            "server_name": settings.server_name,
            "public_base_url": settings.public_base_url,
            "token_secret_configured": bool(settings.token_secret),
            "admin_key_configured": bool(settings.admin_key),
            "token_expire_hours": settings.token_expire_hours,
            "photo_expire_hours": settings.photo_expire_hours,
            "capture": {
                "countdown_from": settings.countdown_from,
                "shot_count": settings.shot_count,
                "jpeg_quality": settings.jpeg_quality,
            },
        },
        "storage": get_storage_info(),
    }


@router.post("/cleanup", dependencies=[Depends(require_admin)])
def cleanup(
    session: Session = Depends(get_session),
    storage: LocalStorage = Depends(get_photo_storage),
):
    """Delete expired photo sessions and their files."""
    removed = cleanup_expired_sessions(storage, session)
    return {"success": True, "removed": removed}
